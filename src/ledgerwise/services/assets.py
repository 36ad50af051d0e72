"""Asset management per user."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from ..domain.repositories import AssetRepository, TransactionRepository
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.asset import Asset
from ..models.enums import AssetKind, parse_enum
from ..utils.dates import to_naive_utc, utcnow
from ..utils.decimal_utils import quantize_money
from .net_worth import linked_asset_effect

logger = get_logger(__name__)

MAX_NAME = 200
MAX_CURRENCY = 10
DEFAULT_ASSET_CURRENCY = "EUR"


def parse_money(raw: Any, *, field_name: str, errors: dict[str, list[str]], required: bool) -> Optional[Decimal]:
    """Parse a non-negative money value, recording problems in ``errors``."""

    if raw is None or raw == "":
        if required:
            errors.setdefault(field_name, []).append("Value is required.")
        return None
    try:
        value = quantize_money(raw)
    except (InvalidOperation, ValueError, TypeError):
        errors.setdefault(field_name, []).append("Value must be a number.")
        return None
    if value < 0:
        errors.setdefault(field_name, []).append("Value must not be negative.")
        return None
    return value


def clean_name(raw: Optional[str], errors: dict[str, list[str]]) -> str:
    name = (raw or "").strip()
    if not name:
        errors.setdefault("name", []).append("Name is required.")
    elif len(name) > MAX_NAME:
        errors.setdefault("name", []).append(f"Name must be at most {MAX_NAME} characters.")
    return name


def clean_currency(raw: Optional[str], default: str, errors: dict[str, list[str]]) -> str:
    currency = (raw or "").strip().upper() or default
    if len(currency) > MAX_CURRENCY:
        errors.setdefault("currency", []).append(
            f"Currency must be at most {MAX_CURRENCY} characters."
        )
    return currency


@dataclass
class AssetInput:
    name: Optional[str]
    kind: Any
    current_value: Any
    purchase_value: Any = None
    purchase_date: Optional[datetime] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    is_liquid: Optional[bool] = None


class AssetService:
    """CRUD for assets; bank account values stay reconcilable with the ledger."""

    def __init__(
        self,
        *,
        assets: AssetRepository,
        transactions: TransactionRepository,
        clock: Callable[[], datetime] = utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        self._assets = assets
        self._transactions = transactions
        self._clock = clock
        self._log = log or logger

    def _validate(self, data: AssetInput) -> dict[str, Any]:
        errors: dict[str, list[str]] = {}
        name = clean_name(data.name, errors)
        kind = parse_enum(AssetKind, data.kind)
        if kind is None:
            errors.setdefault("type", []).append("Unknown asset type.")
        value = parse_money(data.current_value, field_name="value", errors=errors, required=True)
        purchase_value = parse_money(
            data.purchase_value, field_name="purchaseValue", errors=errors, required=False
        )
        currency = clean_currency(data.currency, DEFAULT_ASSET_CURRENCY, errors)
        if errors:
            raise ValidationError("Invalid asset.", errors)
        return {
            "name": name,
            "kind": kind,
            "current_value": value,
            "purchase_value": purchase_value,
            "purchase_date": to_naive_utc(data.purchase_date) if data.purchase_date else None,
            "currency": currency,
            "description": (data.description or "").strip() or None,
            "is_liquid": (
                data.is_liquid if data.is_liquid is not None else kind == AssetKind.BANK_ACCOUNT
            ),
        }

    def list_assets(self, *, user_id: int) -> list[Asset]:
        return self._assets.list_all(user_id=user_id)

    def get_asset(self, asset_id: int, *, user_id: int) -> Asset:
        asset = self._assets.get_by_id(asset_id, user_id=user_id)
        if asset is None:
            raise NotFoundError(f"Asset {asset_id} not found.")
        return asset

    def create_asset(self, data: AssetInput, *, user_id: int) -> Asset:
        fields = self._validate(data)
        now = self._clock()
        asset = Asset(
            user_id=user_id,
            opening_balance=fields["current_value"],
            last_updated=now,
            created_at=now,
            **fields,
        )
        created = self._assets.create(asset, user_id=user_id)
        self._log.info(
            "Asset created", extra={"asset_id": created.id, "user_id": user_id, "kind": created.kind}
        )
        return created

    def update_asset(self, asset_id: int, data: AssetInput, *, user_id: int) -> Asset:
        asset = self.get_asset(asset_id, user_id=user_id)
        fields = self._validate(data)
        for key, value in fields.items():
            setattr(asset, key, value)
        # A directly edited value becomes the new baseline for ledger refolds.
        linked = self._transactions.list_by_asset(asset_id, user_id=user_id)
        asset.opening_balance = fields["current_value"] - linked_asset_effect(asset, linked)
        asset.last_updated = self._clock()
        updated = self._assets.update(asset, user_id=user_id)
        self._log.info("Asset updated", extra={"asset_id": asset_id, "user_id": user_id})
        return updated

    def delete_asset(self, asset_id: int, *, user_id: int) -> None:
        self.get_asset(asset_id, user_id=user_id)
        detached = self._transactions.detach_asset(asset_id, user_id=user_id)
        self._assets.delete(asset_id, user_id=user_id)
        self._log.info(
            "Asset deleted",
            extra={"asset_id": asset_id, "user_id": user_id, "detached_transactions": detached},
        )

    def total_value(self, *, user_id: int) -> Decimal:
        return self._assets.get_total_value(user_id=user_id)


__all__ = [
    "AssetInput",
    "AssetService",
    "DEFAULT_ASSET_CURRENCY",
    "clean_currency",
    "clean_name",
    "parse_money",
]
