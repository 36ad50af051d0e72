"""Asset repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ...models.asset import Asset


class AssetRepository(Protocol):
    """Repository for managing asset entities, scoped per user."""

    def get_by_id(self, asset_id: int, *, user_id: int) -> Optional[Asset]:
        ...

    def list_all(self, *, user_id: int) -> list[Asset]:
        ...

    def create(self, asset: Asset, *, user_id: int) -> Asset:
        ...

    def update(self, asset: Asset, *, user_id: int) -> Asset:
        ...

    def delete(self, asset_id: int, *, user_id: int) -> bool:
        ...

    def get_total_value(self, *, user_id: int) -> Decimal:
        """Sum of current values."""
        ...
