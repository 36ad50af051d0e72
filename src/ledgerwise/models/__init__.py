"""SQLModel table exports."""

from .asset import Asset
from .enums import AssetKind, LiabilityKind, PaymentMethod, TransactionKind
from .liability import Liability
from .transaction import Transaction
from .user import User

__all__ = [
    "Asset",
    "AssetKind",
    "Liability",
    "LiabilityKind",
    "PaymentMethod",
    "Transaction",
    "TransactionKind",
    "User",
]
