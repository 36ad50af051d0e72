"""Concrete repository implementations using SQLModel."""

from .asset import SQLModelAssetRepository
from .liability import SQLModelLiabilityRepository
from .transaction import SQLModelTransactionRepository
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelAssetRepository",
    "SQLModelLiabilityRepository",
    "SQLModelTransactionRepository",
    "SQLModelUserRepository",
]
