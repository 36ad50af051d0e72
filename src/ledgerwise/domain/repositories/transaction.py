"""Transaction repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...models.enums import TransactionKind
from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for managing transaction entities, scoped per user."""

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def search(
        self,
        *,
        user_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        kind: Optional[TransactionKind] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions newest first with optional filters."""
        ...

    def list_by_asset(self, asset_id: int, *, user_id: int) -> list[Transaction]:
        """Transactions funded from an asset."""
        ...

    def list_by_liability(self, liability_id: int, *, user_id: int) -> list[Transaction]:
        """Transactions funded from a liability."""
        ...

    def create(self, transaction: Transaction, *, user_id: int) -> Transaction:
        ...

    def update(self, transaction: Transaction, *, user_id: int) -> Transaction:
        ...

    def delete(self, transaction_id: int, *, user_id: int) -> bool:
        """Delete a transaction; returns False when nothing matched."""
        ...

    def detach_asset(self, asset_id: int, *, user_id: int) -> int:
        """Clear ``source_asset_id`` on rows pointing at a deleted asset."""
        ...

    def detach_liability(self, liability_id: int, *, user_id: int) -> int:
        """Clear ``source_liability_id`` on rows pointing at a deleted liability."""
        ...
