"""Liability management per user."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from ..domain.repositories import LiabilityRepository, TransactionRepository
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.enums import LiabilityKind, parse_enum
from ..models.liability import Liability
from ..utils.dates import to_naive_utc, utcnow
from ..utils.decimal_utils import quantize_money
from .assets import clean_currency, clean_name, parse_money
from .net_worth import linked_liability_effect

logger = get_logger(__name__)

DEFAULT_LIABILITY_CURRENCY = "CAD"
MAX_INTEREST_RATE = Decimal("100")


@dataclass
class LiabilityInput:
    name: Optional[str]
    kind: Any
    current_balance: Any
    credit_limit: Any = None
    interest_rate: Any = None
    monthly_payment: Any = None
    maturity_date: Optional[datetime] = None
    currency: Optional[str] = None
    description: Optional[str] = None


class LiabilityService:
    """CRUD for liabilities and the user's total debt."""

    def __init__(
        self,
        *,
        liabilities: LiabilityRepository,
        transactions: TransactionRepository,
        clock: Callable[[], datetime] = utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        self._liabilities = liabilities
        self._transactions = transactions
        self._clock = clock
        self._log = log or logger

    def _validate(self, data: LiabilityInput) -> dict[str, Any]:
        errors: dict[str, list[str]] = {}
        name = clean_name(data.name, errors)
        kind = parse_enum(LiabilityKind, data.kind)
        if kind is None:
            errors.setdefault("type", []).append("Unknown liability type.")
        balance = parse_money(
            data.current_balance, field_name="currentBalance", errors=errors, required=True
        )
        credit_limit = parse_money(
            data.credit_limit, field_name="creditLimit", errors=errors, required=False
        )
        monthly_payment = parse_money(
            data.monthly_payment, field_name="monthlyPayment", errors=errors, required=False
        )

        interest_rate: Optional[Decimal] = None
        if data.interest_rate not in (None, ""):
            try:
                interest_rate = quantize_money(data.interest_rate)
            except (InvalidOperation, ValueError, TypeError):
                errors.setdefault("interestRate", []).append("Interest rate must be a number.")
            else:
                if not Decimal("0") <= interest_rate <= MAX_INTEREST_RATE:
                    errors.setdefault("interestRate", []).append(
                        "Interest rate must be between 0 and 100."
                    )
        currency = clean_currency(data.currency, DEFAULT_LIABILITY_CURRENCY, errors)
        if errors:
            raise ValidationError("Invalid liability.", errors)

        return {
            "name": name,
            "kind": kind,
            "current_balance": balance,
            # Only credit cards have a limit.
            "credit_limit": credit_limit if kind == LiabilityKind.CREDIT_CARD else None,
            "interest_rate": interest_rate,
            "monthly_payment": monthly_payment,
            "maturity_date": to_naive_utc(data.maturity_date) if data.maturity_date else None,
            "currency": currency,
            "description": (data.description or "").strip() or None,
        }

    def list_liabilities(self, *, user_id: int) -> list[Liability]:
        return self._liabilities.list_all(user_id=user_id)

    def get_liability(self, liability_id: int, *, user_id: int) -> Liability:
        liability = self._liabilities.get_by_id(liability_id, user_id=user_id)
        if liability is None:
            raise NotFoundError(f"Liability {liability_id} not found.")
        return liability

    def create_liability(self, data: LiabilityInput, *, user_id: int) -> Liability:
        fields = self._validate(data)
        now = self._clock()
        liability = Liability(
            user_id=user_id,
            opening_balance=fields["current_balance"],
            last_updated=now,
            created_at=now,
            **fields,
        )
        created = self._liabilities.create(liability, user_id=user_id)
        self._log.info(
            "Liability created",
            extra={"liability_id": created.id, "user_id": user_id, "kind": created.kind},
        )
        return created

    def update_liability(self, liability_id: int, data: LiabilityInput, *, user_id: int) -> Liability:
        liability = self.get_liability(liability_id, user_id=user_id)
        fields = self._validate(data)
        for key, value in fields.items():
            setattr(liability, key, value)
        linked = self._transactions.list_by_liability(liability_id, user_id=user_id)
        liability.opening_balance = fields["current_balance"] - linked_liability_effect(
            liability, linked
        )
        liability.last_updated = self._clock()
        updated = self._liabilities.update(liability, user_id=user_id)
        self._log.info("Liability updated", extra={"liability_id": liability_id, "user_id": user_id})
        return updated

    def delete_liability(self, liability_id: int, *, user_id: int) -> None:
        self.get_liability(liability_id, user_id=user_id)
        detached = self._transactions.detach_liability(liability_id, user_id=user_id)
        self._liabilities.delete(liability_id, user_id=user_id)
        self._log.info(
            "Liability deleted",
            extra={
                "liability_id": liability_id,
                "user_id": user_id,
                "detached_transactions": detached,
            },
        )

    def total_debt(self, *, user_id: int) -> Decimal:
        return self._liabilities.get_total_debt(user_id=user_id)


__all__ = ["DEFAULT_LIABILITY_CURRENCY", "LiabilityInput", "LiabilityService"]
