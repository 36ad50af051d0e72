"""SQLModel implementation of the Liability repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlmodel import select

from ...models.liability import Liability
from ...utils.decimal_utils import coerce_decimal
from ..database import SessionFactory


class SQLModelLiabilityRepository:
    """SQLModel-based liability repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, liability_id: int, *, user_id: int) -> Optional[Liability]:
        """Retrieve a liability by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Liability).where(Liability.id == liability_id, Liability.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Liability]:
        """List liabilities, largest balance first."""
        with self.session_factory() as session:
            statement = (
                select(Liability)
                .where(Liability.user_id == user_id)
                .order_by(Liability.current_balance.desc(), Liability.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, liability: Liability, *, user_id: int) -> Liability:
        with self.session_factory() as session:
            liability.user_id = user_id
            session.add(liability)
            session.commit()
            session.refresh(liability)
            session.expunge(liability)
            return liability

    def update(self, liability: Liability, *, user_id: int) -> Liability:
        with self.session_factory() as session:
            liability.user_id = user_id
            merged = session.merge(liability)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, liability_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            liability = session.exec(
                select(Liability).where(Liability.id == liability_id, Liability.user_id == user_id)
            ).first()
            if liability is None:
                return False
            session.delete(liability)
            session.commit()
            return True

    def get_total_debt(self, *, user_id: int) -> Decimal:
        """Sum of outstanding balances."""
        with self.session_factory() as session:
            total = session.exec(
                select(func.sum(Liability.current_balance)).where(Liability.user_id == user_id)
            ).one()
            return coerce_decimal(total)
