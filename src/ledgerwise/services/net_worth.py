"""Net worth computation and transaction-to-balance synchronization.

Two responsibilities:

* ``calculate_net_worth`` folds a user's assets, liabilities and transactions
  into a :class:`NetWorthSummary`. It only reads.
* ``sync_transaction_impact`` keeps the asset or liability that funded a
  transaction consistent with the ledger after the transaction is created,
  updated or deleted.

Balance effects by payment method:

============  =====================  ==========================
method        target                 effect on create
============  =====================  ==========================
BankAccount   BankAccount asset      +amount income, -amount expense
CreditCard    CreditCard liability   +amount expense, -amount income
LoanDebit     any liability          -amount
Cash, Other   nothing                none
============  =====================  ==========================

Delete applies the inverse. Update refolds the balance of every touched
target from its ``opening_balance`` and the full list of linked transactions.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Optional

from ..domain.repositories import AssetRepository, LiabilityRepository, TransactionRepository
from ..logging_config import get_logger
from ..models.asset import Asset
from ..models.enums import AssetKind, LiabilityKind, PaymentMethod, TransactionKind
from ..models.liability import Liability
from ..models.transaction import Transaction
from ..utils.dates import utcnow
from ..utils.decimal_utils import ZERO, coerce_decimal

logger = get_logger(__name__)


class TransactionOperation(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


@dataclass(frozen=True, slots=True)
class NetWorthSummary:
    """Point-in-time net worth of one user. Never cached."""

    user_id: int
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    liquid_assets: Decimal
    transaction_balance: Decimal
    credit_utilization: float
    asset_breakdown: dict[str, Decimal] = field(default_factory=dict)
    liability_breakdown: dict[str, Decimal] = field(default_factory=dict)
    last_updated: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def transaction_net_balance(transactions: Iterable[Transaction]) -> Decimal:
    """Income minus expenses across ``transactions``."""

    return sum((tx.signed_amount for tx in transactions), ZERO)


def compute_net_worth(
    *,
    user_id: int,
    assets: Iterable[Asset],
    liabilities: Iterable[Liability],
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
) -> NetWorthSummary:
    """Fold already-loaded records into a summary.

    The transaction balance counts as an implicit liquid cash asset.
    """

    assets = list(assets)
    liabilities = list(liabilities)
    tx_balance = transaction_net_balance(transactions)

    total_assets = sum((coerce_decimal(a.current_value) for a in assets), ZERO) + tx_balance
    total_liabilities = sum((coerce_decimal(item.current_balance) for item in liabilities), ZERO)
    liquid_assets = (
        sum((coerce_decimal(a.current_value) for a in assets if a.is_liquid), ZERO) + tx_balance
    )

    cards = [item for item in liabilities if item.kind == LiabilityKind.CREDIT_CARD]
    credit_used = sum((coerce_decimal(c.current_balance) for c in cards), ZERO)
    credit_limit = sum((coerce_decimal(c.credit_limit) for c in cards), ZERO)
    utilization = float(credit_used / credit_limit * 100) if credit_limit > 0 else 0.0

    asset_breakdown: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for asset in assets:
        asset_breakdown[AssetKind(asset.kind).value] += coerce_decimal(asset.current_value)
    liability_breakdown: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for liability in liabilities:
        liability_breakdown[LiabilityKind(liability.kind).value] += coerce_decimal(
            liability.current_balance
        )

    return NetWorthSummary(
        user_id=user_id,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
        liquid_assets=liquid_assets,
        transaction_balance=tx_balance,
        credit_utilization=utilization,
        asset_breakdown=dict(asset_breakdown),
        liability_breakdown=dict(liability_breakdown),
        last_updated=now or utcnow(),
    )


def balance_effect(transaction: Transaction) -> Decimal:
    """Signed change a newly created transaction applies to its funding record."""

    amount = abs(coerce_decimal(transaction.amount))
    method = transaction.payment_method
    if method is None or method in (PaymentMethod.CASH, PaymentMethod.OTHER):
        return ZERO
    if method == PaymentMethod.BANK_ACCOUNT:
        return amount if transaction.kind == TransactionKind.INCOME else -amount
    if method == PaymentMethod.CREDIT_CARD:
        # Purchases add debt; income on the card is a repayment.
        return amount if transaction.kind == TransactionKind.EXPENSE else -amount
    if method == PaymentMethod.LOAN_DEBIT:
        return -amount
    raise ValueError(f"Unknown payment method: {method!r}")


def applies_to_asset(asset: Asset, transaction: Transaction) -> bool:
    return (
        transaction.payment_method == PaymentMethod.BANK_ACCOUNT
        and transaction.source_asset_id == asset.id
        and asset.kind == AssetKind.BANK_ACCOUNT
    )


def applies_to_liability(liability: Liability, transaction: Transaction) -> bool:
    if transaction.source_liability_id != liability.id:
        return False
    if transaction.payment_method == PaymentMethod.CREDIT_CARD:
        return liability.kind == LiabilityKind.CREDIT_CARD
    return transaction.payment_method == PaymentMethod.LOAN_DEBIT


def linked_asset_effect(asset: Asset, transactions: Iterable[Transaction]) -> Decimal:
    """Total balance movement the ledger has applied to ``asset``."""

    return sum((balance_effect(tx) for tx in transactions if applies_to_asset(asset, tx)), ZERO)


def linked_liability_effect(liability: Liability, transactions: Iterable[Transaction]) -> Decimal:
    """Total balance movement the ledger has applied to ``liability``."""

    return sum(
        (balance_effect(tx) for tx in transactions if applies_to_liability(liability, tx)), ZERO
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class NetWorthService:
    """Net worth queries and balance propagation over the ledger store."""

    def __init__(
        self,
        *,
        transactions: TransactionRepository,
        assets: AssetRepository,
        liabilities: LiabilityRepository,
        clock: Callable[[], datetime] = utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        self._transactions = transactions
        self._assets = assets
        self._liabilities = liabilities
        self._clock = clock
        self._log = log or logger

    def calculate_net_worth(self, user_id: int) -> NetWorthSummary:
        """Compute the user's net worth from the current store state."""

        try:
            assets = self._assets.list_all(user_id=user_id)
            liabilities = self._liabilities.list_all(user_id=user_id)
            transactions = self._transactions.search(user_id=user_id)
            summary = compute_net_worth(
                user_id=user_id,
                assets=assets,
                liabilities=liabilities,
                transactions=transactions,
                now=self._clock(),
            )
        except Exception:
            self._log.exception("Net worth computation failed", extra={"user_id": user_id})
            raise

        self._log.info(
            "Net worth computed",
            extra={
                "user_id": user_id,
                "total_assets": summary.total_assets,
                "transaction_balance": summary.transaction_balance,
                "total_liabilities": summary.total_liabilities,
                "net_worth": summary.net_worth,
            },
        )
        return summary

    def sync_transaction_impact(
        self,
        transaction: Transaction,
        operation: TransactionOperation,
        *,
        previous: Transaction | None = None,
    ) -> None:
        """Propagate a transaction write onto the asset or liability it references.

        ``previous`` is the pre-update snapshot; on update both the old and the
        new funding record are refolded. Missing or mismatched targets are
        logged and skipped; store failures propagate.
        """

        operation = TransactionOperation(operation)
        try:
            if operation == TransactionOperation.UPDATE:
                self._sync_update(transaction, previous)
                return

            method = transaction.payment_method
            if method is None:
                self._log.debug(
                    "Transaction has no payment method, nothing to sync",
                    extra={"transaction_id": transaction.id},
                )
                return

            self._log.info(
                "Syncing transaction impact",
                extra={
                    "transaction_id": transaction.id,
                    "amount": transaction.amount,
                    "kind": transaction.kind,
                    "payment_method": method,
                    "operation": operation.value,
                },
            )
            if method == PaymentMethod.BANK_ACCOUNT:
                self._sync_bank_account(transaction, operation)
            elif method in (PaymentMethod.CREDIT_CARD, PaymentMethod.LOAN_DEBIT):
                self._sync_liability(transaction, operation)
            elif method in (PaymentMethod.CASH, PaymentMethod.OTHER):
                self._log.debug("Cash/other transaction, no tracked balance affected")
            else:
                raise ValueError(f"Unknown payment method: {method!r}")
        except Exception:
            self._log.exception(
                "Transaction sync failed", extra={"transaction_id": transaction.id}
            )
            raise

    # -- create / delete --------------------------------------------------

    def _signed_delta(self, transaction: Transaction, operation: TransactionOperation) -> Decimal:
        delta = balance_effect(transaction)
        return -delta if operation == TransactionOperation.DELETE else delta

    def _sync_bank_account(self, transaction: Transaction, operation: TransactionOperation) -> None:
        asset = self._resolve_bank_account(transaction)
        if asset is None:
            return
        delta = self._signed_delta(transaction, operation)
        asset.current_value = coerce_decimal(asset.current_value) + delta
        asset.last_updated = self._clock()
        self._assets.update(asset, user_id=transaction.user_id)
        self._log.info(
            "Bank account balance adjusted",
            extra={"asset_id": asset.id, "delta": delta, "operation": operation.value},
        )

    def _sync_liability(self, transaction: Transaction, operation: TransactionOperation) -> None:
        liability = self._resolve_liability(transaction)
        if liability is None:
            return
        delta = self._signed_delta(transaction, operation)
        liability.current_balance = coerce_decimal(liability.current_balance) + delta
        liability.last_updated = self._clock()
        self._liabilities.update(liability, user_id=transaction.user_id)
        self._log.info(
            "Liability balance adjusted",
            extra={"liability_id": liability.id, "delta": delta, "operation": operation.value},
        )

    def _resolve_bank_account(self, transaction: Transaction) -> Asset | None:
        if transaction.source_asset_id is None:
            self._log.warning(
                "BankAccount transaction without source asset",
                extra={"transaction_id": transaction.id},
            )
            return None
        asset = self._assets.get_by_id(transaction.source_asset_id, user_id=transaction.user_id)
        if asset is None:
            self._log.warning(
                "Source asset not found",
                extra={"asset_id": transaction.source_asset_id, "transaction_id": transaction.id},
            )
            return None
        if asset.kind != AssetKind.BANK_ACCOUNT:
            self._log.warning(
                "Source asset is not a bank account",
                extra={"asset_id": asset.id, "kind": asset.kind},
            )
            return None
        return asset

    def _resolve_liability(self, transaction: Transaction) -> Liability | None:
        if transaction.source_liability_id is None:
            self._log.warning(
                "Transaction without source liability",
                extra={"transaction_id": transaction.id, "payment_method": transaction.payment_method},
            )
            return None
        liability = self._liabilities.get_by_id(
            transaction.source_liability_id, user_id=transaction.user_id
        )
        if liability is None:
            self._log.warning(
                "Source liability not found",
                extra={
                    "liability_id": transaction.source_liability_id,
                    "transaction_id": transaction.id,
                },
            )
            return None
        if (
            transaction.payment_method == PaymentMethod.CREDIT_CARD
            and liability.kind != LiabilityKind.CREDIT_CARD
        ):
            self._log.warning(
                "Source liability is not a credit card",
                extra={"liability_id": liability.id, "kind": liability.kind},
            )
            return None
        return liability

    # -- update -----------------------------------------------------------

    def _sync_update(self, transaction: Transaction, previous: Transaction | None) -> None:
        versions = [tx for tx in (previous, transaction) if tx is not None]
        asset_ids = {
            tx.source_asset_id
            for tx in versions
            if tx.payment_method == PaymentMethod.BANK_ACCOUNT and tx.source_asset_id is not None
        }
        liability_ids = {
            tx.source_liability_id
            for tx in versions
            if tx.payment_method in (PaymentMethod.CREDIT_CARD, PaymentMethod.LOAN_DEBIT)
            and tx.source_liability_id is not None
        }
        if not asset_ids and not liability_ids:
            self._log.debug(
                "Updated transaction touches no tracked balance",
                extra={"transaction_id": transaction.id},
            )
            return
        for asset_id in sorted(asset_ids):
            self.rebalance_asset(asset_id, user_id=transaction.user_id)
        for liability_id in sorted(liability_ids):
            self.rebalance_liability(liability_id, user_id=transaction.user_id)

    def rebalance_asset(self, asset_id: int, *, user_id: int) -> Asset | None:
        """Refold a bank account's value from its opening balance and linked history."""

        asset = self._assets.get_by_id(asset_id, user_id=user_id)
        if asset is None:
            self._log.warning("Asset to rebalance not found", extra={"asset_id": asset_id})
            return None
        if asset.kind != AssetKind.BANK_ACCOUNT:
            self._log.debug("Asset is not ledger-driven", extra={"asset_id": asset_id})
            return asset
        linked = self._transactions.list_by_asset(asset_id, user_id=user_id)
        asset.current_value = coerce_decimal(asset.opening_balance) + linked_asset_effect(asset, linked)
        asset.last_updated = self._clock()
        self._log.info(
            "Asset balance recomputed",
            extra={"asset_id": asset_id, "linked": len(linked), "value": asset.current_value},
        )
        return self._assets.update(asset, user_id=user_id)

    def rebalance_liability(self, liability_id: int, *, user_id: int) -> Liability | None:
        """Refold a liability's balance from its opening balance and linked history."""

        liability = self._liabilities.get_by_id(liability_id, user_id=user_id)
        if liability is None:
            self._log.warning(
                "Liability to rebalance not found", extra={"liability_id": liability_id}
            )
            return None
        linked = self._transactions.list_by_liability(liability_id, user_id=user_id)
        liability.current_balance = coerce_decimal(liability.opening_balance) + linked_liability_effect(
            liability, linked
        )
        liability.last_updated = self._clock()
        self._log.info(
            "Liability balance recomputed",
            extra={
                "liability_id": liability_id,
                "linked": len(linked),
                "balance": liability.current_balance,
            },
        )
        return self._liabilities.update(liability, user_id=user_id)

    def recompute_balances(self, user_id: int) -> dict[str, int]:
        """Refold every asset and liability of a user; returns counts touched."""

        assets = [a for a in self._assets.list_all(user_id=user_id) if a.kind == AssetKind.BANK_ACCOUNT]
        liabilities = self._liabilities.list_all(user_id=user_id)
        for asset in assets:
            self.rebalance_asset(asset.id, user_id=user_id)  # type: ignore[arg-type]
        for liability in liabilities:
            self.rebalance_liability(liability.id, user_id=user_id)  # type: ignore[arg-type]
        return {"assets": len(assets), "liabilities": len(liabilities)}


__all__ = [
    "NetWorthService",
    "NetWorthSummary",
    "TransactionOperation",
    "applies_to_asset",
    "applies_to_liability",
    "balance_effect",
    "compute_net_worth",
    "linked_asset_effect",
    "linked_liability_effect",
    "transaction_net_balance",
]
