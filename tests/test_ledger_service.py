"""Tests for transaction CRUD orchestration and balance sync."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from ledgerwise.errors import NotFoundError, ValidationError
from ledgerwise.models import LiabilityKind, TransactionKind
from ledgerwise.services.ledger_service import LedgerFilters, LedgerService, TransactionInput
from ledgerwise.services.net_worth import TransactionOperation

from .conftest import NOW


@pytest.fixture
def ledger(repos, net_worth_service, clock) -> LedgerService:
    return LedgerService(
        transactions=repos.transactions,
        assets=repos.assets,
        liabilities=repos.liabilities,
        net_worth=net_worth_service,
        clock=clock,
    )


def _input(**overrides) -> TransactionInput:
    data = {
        "amount": "25.50",
        "description": "Groceries",
        "category": "Food",
        "kind": "Expense",
    }
    data.update(overrides)
    return TransactionInput(**data)


def test_create_defaults_date_and_normalizes_fields(ledger, user):
    tx = ledger.create_transaction(_input(description="  Groceries  ", kind="expense"), user_id=user.id)

    assert tx.id is not None
    assert tx.amount == Decimal("25.50")
    assert tx.description == "Groceries"
    assert tx.kind == TransactionKind.EXPENSE
    assert tx.occurred_at == NOW


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"amount": "0"}, "amount"),
        ({"amount": "-5"}, "amount"),
        ({"amount": "abc"}, "amount"),
        ({"description": " "}, "description"),
        ({"description": "x" * 501}, "description"),
        ({"category": ""}, "category"),
        ({"kind": "Transfer"}, "type"),
        ({"payment_method": "Cheque"}, "paymentMethod"),
        ({"payment_method": "BankAccount"}, "sourceAssetId"),
        ({"payment_method": "CreditCard"}, "sourceLiabilityId"),
        ({"source_asset_id": 1, "source_liability_id": 2}, "sourceAssetId"),
        ({"payment_method": "BankAccount", "source_asset_id": 999}, "sourceAssetId"),
    ],
)
def test_create_rejects_invalid_input(ledger, user, overrides, field):
    with pytest.raises(ValidationError) as excinfo:
        ledger.create_transaction(_input(**overrides), user_id=user.id)

    assert field in excinfo.value.fields


def test_create_rejects_other_users_asset(ledger, user, user_factory, asset_factory):
    other = user_factory(email="other@example.com")
    foreign = asset_factory("100.00", owner=other)

    with pytest.raises(ValidationError):
        ledger.create_transaction(
            _input(payment_method="BankAccount", source_asset_id=foreign.id), user_id=user.id
        )


def test_bank_account_lifecycle_keeps_balance_in_step(ledger, repos, user, asset_factory):
    bank = asset_factory("1000.00")

    tx = ledger.create_transaction(
        _input(amount="200", payment_method="BankAccount", source_asset_id=bank.id),
        user_id=user.id,
    )
    assert repos.assets.get_by_id(bank.id, user_id=user.id).current_value == Decimal("800.00")

    ledger.update_transaction(
        tx.id,
        _input(amount="150", payment_method="BankAccount", source_asset_id=bank.id),
        user_id=user.id,
    )
    assert repos.assets.get_by_id(bank.id, user_id=user.id).current_value == Decimal("850.00")

    ledger.delete_transaction(tx.id, user_id=user.id)
    assert repos.assets.get_by_id(bank.id, user_id=user.id).current_value == Decimal("1000.00")
    with pytest.raises(NotFoundError):
        ledger.get_transaction(tx.id, user_id=user.id)


def test_switching_payment_method_moves_the_impact(ledger, repos, user, asset_factory, liability_factory):
    bank = asset_factory("1000.00")
    card = liability_factory("0.00", kind=LiabilityKind.CREDIT_CARD, credit_limit="2000")
    tx = ledger.create_transaction(
        _input(amount="100", payment_method="BankAccount", source_asset_id=bank.id),
        user_id=user.id,
    )

    ledger.update_transaction(
        tx.id,
        _input(amount="100", payment_method="CreditCard", source_liability_id=card.id),
        user_id=user.id,
    )

    assert repos.assets.get_by_id(bank.id, user_id=user.id).current_value == Decimal("1000.00")
    assert repos.liabilities.get_by_id(card.id, user_id=user.id).current_balance == Decimal("100.00")


def test_sync_failure_does_not_undo_write(repos, user, clock, caplog):
    net_worth = MagicMock()
    net_worth.sync_transaction_impact.side_effect = RuntimeError("store down")
    ledger = LedgerService(
        transactions=repos.transactions,
        assets=repos.assets,
        liabilities=repos.liabilities,
        net_worth=net_worth,
        clock=clock,
    )

    tx = ledger.create_transaction(_input(), user_id=user.id)

    assert repos.transactions.get_by_id(tx.id, user_id=user.id) is not None
    net_worth.sync_transaction_impact.assert_called_once()
    assert net_worth.sync_transaction_impact.call_args.args[1] == TransactionOperation.CREATE
    assert any(r.getMessage() == "Balance sync failed after transaction write" for r in caplog.records)


def test_list_filters_and_summary(ledger, user, transaction_factory):
    transaction_factory("1000", kind=TransactionKind.INCOME, category="Salary",
                        occurred_at=datetime(2024, 5, 1))
    transaction_factory("300", category="Rent", occurred_at=datetime(2024, 5, 2))
    transaction_factory("50", category="Food", occurred_at=datetime(2024, 6, 1))

    may = ledger.list_transactions(
        LedgerFilters(user_id=user.id, start_date=datetime(2024, 5, 1), end_date=datetime(2024, 5, 31))
    )
    assert [t.category for t in may] == ["Rent", "Salary"]

    food = ledger.list_transactions(LedgerFilters(user_id=user.id, category="Food"))
    assert len(food) == 1

    expenses = ledger.list_transactions(LedgerFilters(user_id=user.id, kind=TransactionKind.EXPENSE))
    assert {t.category for t in expenses} == {"Rent", "Food"}

    summary = ledger.get_summary(user_id=user.id)
    assert summary.income == Decimal("1000")
    assert summary.expenses == Decimal("350")
    assert summary.balance == Decimal("650")
    assert summary.transaction_count == 3


def test_list_rejects_inverted_range(ledger, user):
    with pytest.raises(ValidationError):
        ledger.list_transactions(
            LedgerFilters(user_id=user.id, start_date=NOW, end_date=datetime(2020, 1, 1))
        )
