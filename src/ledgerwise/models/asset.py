"""Asset entities tracked in the net worth."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..utils.dates import utcnow
from .enums import AssetKind


class Asset(SQLModel, table=True):
    """Bank account, investment, property or other holding of value."""

    __tablename__: ClassVar[str] = "asset"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=200)
    kind: AssetKind = Field(nullable=False)
    current_value: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    # Value before any linked transaction; balance refolds start here.
    opening_balance: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    purchase_value: Optional[Decimal] = Field(default=None, max_digits=18, decimal_places=2)
    purchase_date: Optional[datetime] = Field(default=None)
    currency: str = Field(default="EUR", max_length=10)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_liquid: bool = Field(default=True, nullable=False)
    last_updated: datetime = Field(default_factory=utcnow, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
