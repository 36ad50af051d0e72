"""Transaction CRUD orchestration: validation, persistence and balance sync."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Optional

from ..domain.repositories import AssetRepository, LiabilityRepository, TransactionRepository
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.enums import PaymentMethod, TransactionKind, parse_enum
from ..models.transaction import Transaction
from ..utils.dates import to_naive_utc, utcnow
from ..utils.decimal_utils import ZERO, coerce_decimal, quantize_money
from .net_worth import NetWorthService, TransactionOperation

logger = get_logger(__name__)

MAX_DESCRIPTION = 500
MAX_CATEGORY = 100


@dataclass
class TransactionInput:
    """Raw transaction fields as received from a caller."""

    amount: Any
    description: Optional[str]
    category: Optional[str]
    kind: Any
    occurred_at: Optional[datetime] = None
    payment_method: Any = None
    source_asset_id: Optional[int] = None
    source_liability_id: Optional[int] = None


@dataclass
class LedgerFilters:
    """Filters applied to ledger listings."""

    user_id: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    kind: Optional[TransactionKind] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class LedgerSummary:
    income: Decimal
    expenses: Decimal
    balance: Decimal
    transaction_count: int


def compute_summary(transactions: Iterable[Transaction]) -> LedgerSummary:
    """Income, expenses and balance of the provided transactions."""

    rows = list(transactions)
    income = sum(
        (coerce_decimal(t.amount) for t in rows if t.kind == TransactionKind.INCOME), ZERO
    )
    expenses = sum(
        (coerce_decimal(t.amount) for t in rows if t.kind == TransactionKind.EXPENSE), ZERO
    )
    return LedgerSummary(
        income=income, expenses=expenses, balance=income - expenses, transaction_count=len(rows)
    )


class LedgerService:
    """Creates, edits and removes transactions and keeps funding balances in step."""

    def __init__(
        self,
        *,
        transactions: TransactionRepository,
        assets: AssetRepository,
        liabilities: LiabilityRepository,
        net_worth: NetWorthService,
        clock: Callable[[], datetime] = utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        self._transactions = transactions
        self._assets = assets
        self._liabilities = liabilities
        self._net_worth = net_worth
        self._clock = clock
        self._log = log or logger

    # -- validation -------------------------------------------------------

    def _validate(self, data: TransactionInput, *, user_id: int) -> dict[str, Any]:
        errors: dict[str, list[str]] = {}

        def add(field_name: str, message: str) -> None:
            errors.setdefault(field_name, []).append(message)

        amount: Decimal | None = None
        try:
            amount = quantize_money(data.amount) if data.amount is not None else None
        except (InvalidOperation, ValueError, TypeError):
            amount = None
        if amount is None or not amount.is_finite() or amount <= 0:
            add("amount", "Amount must be a positive number.")

        description = (data.description or "").strip()
        if not description:
            add("description", "Description is required.")
        elif len(description) > MAX_DESCRIPTION:
            add("description", f"Description must be at most {MAX_DESCRIPTION} characters.")

        category = (data.category or "").strip()
        if not category:
            add("category", "Category is required.")
        elif len(category) > MAX_CATEGORY:
            add("category", f"Category must be at most {MAX_CATEGORY} characters.")

        kind = parse_enum(TransactionKind, data.kind)
        if kind is None:
            add("type", "Type must be Expense or Income.")

        method = None
        if data.payment_method not in (None, ""):
            method = parse_enum(PaymentMethod, data.payment_method)
            if method is None:
                add("paymentMethod", "Unknown payment method.")

        asset_id = data.source_asset_id
        liability_id = data.source_liability_id
        if asset_id is not None and liability_id is not None:
            add("sourceAssetId", "A transaction is funded by an asset or a liability, not both.")
        if method == PaymentMethod.BANK_ACCOUNT and asset_id is None:
            add("sourceAssetId", "Bank account transactions need a source asset.")
        if method in (PaymentMethod.CREDIT_CARD, PaymentMethod.LOAN_DEBIT) and liability_id is None:
            add("sourceLiabilityId", "Credit card and loan transactions need a source liability.")
        if asset_id is not None and self._assets.get_by_id(asset_id, user_id=user_id) is None:
            add("sourceAssetId", "Source asset not found.")
        if (
            liability_id is not None
            and self._liabilities.get_by_id(liability_id, user_id=user_id) is None
        ):
            add("sourceLiabilityId", "Source liability not found.")

        if errors:
            raise ValidationError("Invalid transaction.", errors)

        occurred_at = to_naive_utc(data.occurred_at) if data.occurred_at else self._clock()
        return {
            "amount": amount,
            "description": description,
            "category": category,
            "kind": kind,
            "payment_method": method,
            "occurred_at": occurred_at,
            "source_asset_id": asset_id,
            "source_liability_id": liability_id,
        }

    # -- sync -------------------------------------------------------------

    def _sync(
        self,
        transaction: Transaction,
        operation: TransactionOperation,
        previous: Transaction | None = None,
    ) -> None:
        """Propagate onto balances; failures are logged and do not undo the write."""

        try:
            self._net_worth.sync_transaction_impact(transaction, operation, previous=previous)
        except Exception:
            self._log.exception(
                "Balance sync failed after transaction write",
                extra={"transaction_id": transaction.id, "operation": operation.value},
            )

    # -- commands ---------------------------------------------------------

    def create_transaction(self, data: TransactionInput, *, user_id: int) -> Transaction:
        fields = self._validate(data, user_id=user_id)
        created = self._transactions.create(Transaction(user_id=user_id, **fields), user_id=user_id)
        self._log.info(
            "Transaction created",
            extra={"transaction_id": created.id, "user_id": user_id, "amount": created.amount},
        )
        self._sync(created, TransactionOperation.CREATE)
        return created

    def update_transaction(
        self, transaction_id: int, data: TransactionInput, *, user_id: int
    ) -> Transaction:
        existing = self.get_transaction(transaction_id, user_id=user_id)
        fields = self._validate(data, user_id=user_id)
        previous = Transaction(**existing.model_dump())
        for key, value in fields.items():
            setattr(existing, key, value)
        updated = self._transactions.update(existing, user_id=user_id)
        self._log.info(
            "Transaction updated", extra={"transaction_id": transaction_id, "user_id": user_id}
        )
        self._sync(updated, TransactionOperation.UPDATE, previous=previous)
        return updated

    def delete_transaction(self, transaction_id: int, *, user_id: int) -> None:
        existing = self.get_transaction(transaction_id, user_id=user_id)
        self._transactions.delete(transaction_id, user_id=user_id)
        self._log.info(
            "Transaction deleted", extra={"transaction_id": transaction_id, "user_id": user_id}
        )
        self._sync(existing, TransactionOperation.DELETE)

    # -- queries ----------------------------------------------------------

    def get_transaction(self, transaction_id: int, *, user_id: int) -> Transaction:
        transaction = self._transactions.get_by_id(transaction_id, user_id=user_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found.")
        return transaction

    def list_transactions(self, filters: LedgerFilters) -> list[Transaction]:
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise ValidationError.for_field("startDate", "Start date must not be after end date.")
        return self._transactions.search(
            user_id=filters.user_id,
            start_date=filters.start_date,
            end_date=filters.end_date,
            kind=filters.kind,
            category=filters.category,
        )

    def get_summary(
        self,
        *,
        user_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> LedgerSummary:
        return compute_summary(
            self.list_transactions(
                LedgerFilters(user_id=user_id, start_date=start_date, end_date=end_date)
            )
        )


__all__ = [
    "LedgerFilters",
    "LedgerService",
    "LedgerSummary",
    "TransactionInput",
    "compute_summary",
]
