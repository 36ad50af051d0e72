"""Debt and liability entities."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..utils.dates import utcnow
from .enums import LiabilityKind


class Liability(SQLModel, table=True):
    """Credit card, loan or other debt; ``current_balance`` is the amount owed."""

    __tablename__: ClassVar[str] = "liability"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=200, index=True)
    kind: LiabilityKind = Field(nullable=False)
    current_balance: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    opening_balance: Decimal = Field(default=Decimal("0"), max_digits=18, decimal_places=2)
    credit_limit: Optional[Decimal] = Field(default=None, max_digits=18, decimal_places=2)
    interest_rate: Optional[Decimal] = Field(default=None, max_digits=5, decimal_places=2)
    monthly_payment: Optional[Decimal] = Field(default=None, max_digits=18, decimal_places=2)
    maturity_date: Optional[datetime] = Field(default=None)
    currency: str = Field(default="CAD", max_length=10)
    description: Optional[str] = Field(default=None, max_length=1000)
    last_updated: datetime = Field(default_factory=utcnow, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
