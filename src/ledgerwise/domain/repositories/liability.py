"""Liability repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ...models.liability import Liability


class LiabilityRepository(Protocol):
    """Repository for managing liability entities, scoped per user."""

    def get_by_id(self, liability_id: int, *, user_id: int) -> Optional[Liability]:
        ...

    def list_all(self, *, user_id: int) -> list[Liability]:
        ...

    def create(self, liability: Liability, *, user_id: int) -> Liability:
        ...

    def update(self, liability: Liability, *, user_id: int) -> Liability:
        ...

    def delete(self, liability_id: int, *, user_id: int) -> bool:
        ...

    def get_total_debt(self, *, user_id: int) -> Decimal:
        """Sum of outstanding balances."""
        ...
