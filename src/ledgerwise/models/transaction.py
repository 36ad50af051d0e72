"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..utils.dates import utcnow
from ..utils.decimal_utils import coerce_decimal
from .enums import PaymentMethod, TransactionKind


class Transaction(SQLModel, table=True):
    """A single income or expense entry.

    ``amount`` is always positive; ``kind`` carries the direction.
    """

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    occurred_at: datetime = Field(nullable=False, index=True)
    amount: Decimal = Field(nullable=False, max_digits=18, decimal_places=2)
    description: str = Field(default="", max_length=500)
    category: str = Field(default="Other", max_length=100, index=True)
    kind: TransactionKind = Field(nullable=False)
    payment_method: Optional[PaymentMethod] = Field(default=None)
    source_asset_id: Optional[int] = Field(default=None, foreign_key="asset.id", index=True)
    source_liability_id: Optional[int] = Field(
        default=None, foreign_key="liability.id", index=True
    )
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    @property
    def signed_amount(self) -> Decimal:
        """Positive for income, negative for expenses."""

        amount = coerce_decimal(self.amount)
        return amount if self.kind == TransactionKind.INCOME else -amount
