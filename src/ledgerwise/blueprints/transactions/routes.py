"""Transaction routes."""

from __future__ import annotations

from typing import Any

from flask import jsonify, request

from ...errors import ValidationError
from ...extensions import get_services
from ...models.enums import TransactionKind, parse_enum
from ...services.ledger_service import LedgerFilters, TransactionInput
from ..common import (
    current_user_id,
    json_body,
    login_required,
    optional_datetime,
    optional_int,
    query_datetime,
)
from ..serializers import ledger_summary_to_dict, transaction_to_dict
from . import bp


def _input_from_body(body: dict[str, Any]) -> TransactionInput:
    return TransactionInput(
        amount=body.get("amount"),
        description=body.get("description"),
        category=body.get("category"),
        kind=body.get("type"),
        occurred_at=optional_datetime(body.get("date"), "date"),
        payment_method=body.get("paymentMethod"),
        source_asset_id=optional_int(body, "sourceAssetId"),
        source_liability_id=optional_int(body, "sourceLiabilityId"),
    )


@bp.get("")
@login_required
def list_transactions():
    kind = None
    raw_kind = request.args.get("type")
    if raw_kind:
        kind = parse_enum(TransactionKind, raw_kind)
        if kind is None:
            raise ValidationError.for_field("type", "Type must be Expense or Income.")
    filters = LedgerFilters(
        user_id=current_user_id(),
        start_date=query_datetime("startDate"),
        end_date=query_datetime("endDate"),
        kind=kind,
        category=request.args.get("category") or None,
    )
    rows = get_services().ledger.list_transactions(filters)
    return jsonify([transaction_to_dict(tx) for tx in rows])


@bp.get("/summary")
@login_required
def summary():
    result = get_services().ledger.get_summary(
        user_id=current_user_id(),
        start_date=query_datetime("startDate"),
        end_date=query_datetime("endDate"),
    )
    return jsonify(ledger_summary_to_dict(result))


@bp.get("/<int:transaction_id>")
@login_required
def get_transaction(transaction_id: int):
    tx = get_services().ledger.get_transaction(transaction_id, user_id=current_user_id())
    return jsonify(transaction_to_dict(tx))


@bp.post("")
@login_required
def create_transaction():
    tx = get_services().ledger.create_transaction(
        _input_from_body(json_body()), user_id=current_user_id()
    )
    return jsonify(transaction_to_dict(tx)), 201


@bp.put("/<int:transaction_id>")
@login_required
def update_transaction(transaction_id: int):
    tx = get_services().ledger.update_transaction(
        transaction_id, _input_from_body(json_body()), user_id=current_user_id()
    )
    return jsonify(transaction_to_dict(tx))


@bp.delete("/<int:transaction_id>")
@login_required
def delete_transaction(transaction_id: int):
    get_services().ledger.delete_transaction(transaction_id, user_id=current_user_id())
    return "", 204
