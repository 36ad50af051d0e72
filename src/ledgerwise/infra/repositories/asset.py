"""SQLModel implementation of the Asset repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlmodel import select

from ...models.asset import Asset
from ...utils.decimal_utils import coerce_decimal
from ..database import SessionFactory


class SQLModelAssetRepository:
    """SQLModel-based asset repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, asset_id: int, *, user_id: int) -> Optional[Asset]:
        """Retrieve an asset by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Asset).where(Asset.id == asset_id, Asset.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Asset]:
        """List assets, most valuable first."""
        with self.session_factory() as session:
            statement = (
                select(Asset)
                .where(Asset.user_id == user_id)
                .order_by(Asset.current_value.desc(), Asset.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, asset: Asset, *, user_id: int) -> Asset:
        with self.session_factory() as session:
            asset.user_id = user_id
            session.add(asset)
            session.commit()
            session.refresh(asset)
            session.expunge(asset)
            return asset

    def update(self, asset: Asset, *, user_id: int) -> Asset:
        with self.session_factory() as session:
            asset.user_id = user_id
            merged = session.merge(asset)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, asset_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            asset = session.exec(
                select(Asset).where(Asset.id == asset_id, Asset.user_id == user_id)
            ).first()
            if asset is None:
                return False
            session.delete(asset)
            session.commit()
            return True

    def get_total_value(self, *, user_id: int) -> Decimal:
        """Sum of current values."""
        with self.session_factory() as session:
            total = session.exec(
                select(func.sum(Asset.current_value)).where(Asset.user_id == user_id)
            ).one()
            return coerce_decimal(total)
