"""Repository protocol definitions for the ledger store."""

from .asset import AssetRepository
from .liability import LiabilityRepository
from .transaction import TransactionRepository
from .user import UserRepository

__all__ = [
    "AssetRepository",
    "LiabilityRepository",
    "TransactionRepository",
    "UserRepository",
]
