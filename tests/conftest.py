"""Pytest configuration and shared fixtures for Ledgerwise tests.

Each test gets an isolated SQLite file, a session factory, a default user and
factories that persist records directly, bypassing balance sync.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from ledgerwise.infra.database import create_session_factory, init_database
from ledgerwise.infra.repositories import (
    SQLModelAssetRepository,
    SQLModelLiabilityRepository,
    SQLModelTransactionRepository,
    SQLModelUserRepository,
)
from ledgerwise.models import (
    Asset,
    AssetKind,
    Liability,
    LiabilityKind,
    PaymentMethod,
    Transaction,
    TransactionKind,
    User,
)
from ledgerwise.services.analytics import AnalyticsService
from ledgerwise.services.net_worth import NetWorthService
from sqlmodel import create_engine

NOW = datetime(2024, 6, 15, 12, 0)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test."""

    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    init_database(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def repos(session_factory):
    """The four SQLModel repositories sharing one session factory."""

    class _Repos:
        transactions = SQLModelTransactionRepository(session_factory)
        assets = SQLModelAssetRepository(session_factory)
        liabilities = SQLModelLiabilityRepository(session_factory)
        users = SQLModelUserRepository(session_factory)

    return _Repos()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def net_worth_service(repos, clock) -> NetWorthService:
    return NetWorthService(
        transactions=repos.transactions,
        assets=repos.assets,
        liabilities=repos.liabilities,
        clock=clock,
    )


@pytest.fixture
def analytics_service(repos, clock) -> AnalyticsService:
    return AnalyticsService(transactions=repos.transactions, clock=clock)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(repos):
    def _create_user(email: str = "tester@example.com", name: str = "Tester") -> User:
        return repos.users.create(User(name=name, email=email, password_hash="dummy-hash"))

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """Default user for scoping data."""

    return user_factory()


@pytest.fixture
def asset_factory(repos, user):
    """Factory for creating assets; ``opening_balance`` defaults to the value."""

    def _create_asset(
        value: str | Decimal = "1000.00",
        kind: AssetKind = AssetKind.BANK_ACCOUNT,
        name: str = "Checking",
        is_liquid: bool = True,
        owner: User | None = None,
    ) -> Asset:
        owner = owner or user
        amount = Decimal(str(value))
        asset = Asset(
            user_id=owner.id,
            name=name,
            kind=kind,
            current_value=amount,
            opening_balance=amount,
            is_liquid=is_liquid,
        )
        return repos.assets.create(asset, user_id=owner.id)

    return _create_asset


@pytest.fixture
def liability_factory(repos, user):
    """Factory for creating liabilities."""

    def _create_liability(
        balance: str | Decimal = "0.00",
        kind: LiabilityKind = LiabilityKind.CREDIT_CARD,
        name: str = "Visa",
        credit_limit: str | Decimal | None = None,
        owner: User | None = None,
    ) -> Liability:
        owner = owner or user
        amount = Decimal(str(balance))
        liability = Liability(
            user_id=owner.id,
            name=name,
            kind=kind,
            current_balance=amount,
            opening_balance=amount,
            credit_limit=Decimal(str(credit_limit)) if credit_limit is not None else None,
        )
        return repos.liabilities.create(liability, user_id=owner.id)

    return _create_liability


@pytest.fixture
def transaction_factory(repos, user):
    """Factory for persisting transactions without touching balances.

    ``amount`` is positive; ``kind`` carries the direction.
    """

    def _create_transaction(
        amount: str | Decimal,
        kind: TransactionKind = TransactionKind.EXPENSE,
        category: str = "Food",
        description: str = "Test transaction",
        occurred_at: datetime | None = None,
        payment_method: PaymentMethod | None = None,
        source_asset_id: int | None = None,
        source_liability_id: int | None = None,
        owner: User | None = None,
    ) -> Transaction:
        owner = owner or user
        transaction = Transaction(
            user_id=owner.id,
            amount=Decimal(str(amount)),
            kind=kind,
            category=category,
            description=description,
            occurred_at=occurred_at or NOW,
            payment_method=payment_method,
            source_asset_id=source_asset_id,
            source_liability_id=source_liability_id,
        )
        return repos.transactions.create(transaction, user_id=owner.id)

    return _create_transaction
