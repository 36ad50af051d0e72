"""SQLModel implementation of the Transaction repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import select

from ...models.enums import PaymentMethod, TransactionKind
from ...models.transaction import Transaction
from ..database import SessionFactory


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def search(
        self,
        *,
        user_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        kind: Optional[TransactionKind] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions newest first with optional filters."""
        with self.session_factory() as session:
            statement = select(Transaction).where(Transaction.user_id == user_id)
            if start_date is not None:
                statement = statement.where(Transaction.occurred_at >= start_date)
            if end_date is not None:
                statement = statement.where(Transaction.occurred_at <= end_date)
            if kind is not None:
                statement = statement.where(Transaction.kind == kind)
            if category:
                statement = statement.where(Transaction.category == category)
            statement = statement.order_by(
                Transaction.occurred_at.desc(), Transaction.id.desc()  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_by_asset(self, asset_id: int, *, user_id: int) -> list[Transaction]:
        """Transactions funded from an asset."""
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.source_asset_id == asset_id)
                .order_by(Transaction.occurred_at.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_by_liability(self, liability_id: int, *, user_id: int) -> list[Transaction]:
        """Transactions funded from a liability."""
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.source_liability_id == liability_id)
                .order_by(Transaction.occurred_at.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Create a new transaction."""
        with self.session_factory() as session:
            transaction.user_id = user_id
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            session.expunge(transaction)
            return transaction

    def update(self, transaction: Transaction, *, user_id: int) -> Transaction:
        """Update an existing transaction."""
        with self.session_factory() as session:
            transaction.user_id = user_id
            merged = session.merge(transaction)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, transaction_id: int, *, user_id: int) -> bool:
        """Delete a transaction by ID."""
        with self.session_factory() as session:
            transaction = session.exec(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
            ).first()
            if transaction is None:
                return False
            session.delete(transaction)
            session.commit()
            return True

    def detach_asset(self, asset_id: int, *, user_id: int) -> int:
        """Drop the funding link to a deleted asset; returns rows touched.

        Detached rows fall back to ``PaymentMethod.OTHER`` so they stay editable.
        """
        with self.session_factory() as session:
            rows = session.exec(
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.source_asset_id == asset_id)
            ).all()
            for row in rows:
                row.source_asset_id = None
                row.payment_method = PaymentMethod.OTHER
                session.add(row)
            session.commit()
            return len(rows)

    def detach_liability(self, liability_id: int, *, user_id: int) -> int:
        """Drop the funding link to a deleted liability; returns rows touched."""
        with self.session_factory() as session:
            rows = session.exec(
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.source_liability_id == liability_id)
            ).all()
            for row in rows:
                row.source_liability_id = None
                row.payment_method = PaymentMethod.OTHER
                session.add(row)
            session.commit()
            return len(rows)
