"""SQLModel implementation of the User repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.asset import Asset
from ...models.liability import Liability
from ...models.transaction import Transaction
from ...models.user import User
from ..database import SessionFactory


class SQLModelUserRepository:
    """SQLModel-based user repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self.session_factory() as session:
            user = session.get(User, user_id)
            if user:
                session.expunge(user)
            return user

    def get_by_email(self, email: str) -> Optional[User]:
        with self.session_factory() as session:
            user = session.exec(select(User).where(User.email == email)).first()
            if user:
                session.expunge(user)
            return user

    def create(self, user: User) -> User:
        with self.session_factory() as session:
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    def update(self, user: User) -> User:
        with self.session_factory() as session:
            merged = session.merge(user)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, user_id: int) -> bool:
        """Delete the user and every record they own."""
        with self.session_factory() as session:
            user = session.get(User, user_id)
            if user is None:
                return False
            # Transactions first: they reference assets and liabilities.
            for model in (Transaction, Asset, Liability):
                for row in session.exec(select(model).where(model.user_id == user_id)).all():
                    session.delete(row)
                session.flush()
            session.delete(user)
            session.commit()
            return True
