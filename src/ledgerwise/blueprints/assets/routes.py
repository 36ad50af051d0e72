"""Asset routes."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from ...extensions import get_services
from ...services.assets import AssetInput
from ..common import current_user_id, json_body, login_required, optional_datetime
from ..serializers import asset_to_dict, money
from . import bp


def _input_from_body(body: dict[str, Any]) -> AssetInput:
    is_liquid = body.get("isLiquid")
    return AssetInput(
        name=body.get("name"),
        kind=body.get("type"),
        current_value=body.get("value"),
        purchase_value=body.get("purchaseValue"),
        purchase_date=optional_datetime(body.get("purchaseDate"), "purchaseDate"),
        currency=body.get("currency"),
        description=body.get("description"),
        is_liquid=bool(is_liquid) if is_liquid is not None else None,
    )


@bp.get("")
@login_required
def list_assets():
    rows = get_services().assets.list_assets(user_id=current_user_id())
    return jsonify([asset_to_dict(asset) for asset in rows])


@bp.get("/total-value")
@login_required
def total_value():
    return jsonify({"totalValue": money(get_services().assets.total_value(user_id=current_user_id()))})


@bp.get("/<int:asset_id>")
@login_required
def get_asset(asset_id: int):
    return jsonify(asset_to_dict(get_services().assets.get_asset(asset_id, user_id=current_user_id())))


@bp.post("")
@login_required
def create_asset():
    asset = get_services().assets.create_asset(
        _input_from_body(json_body()), user_id=current_user_id()
    )
    return jsonify(asset_to_dict(asset)), 201


@bp.put("/<int:asset_id>")
@login_required
def update_asset(asset_id: int):
    asset = get_services().assets.update_asset(
        asset_id, _input_from_body(json_body()), user_id=current_user_id()
    )
    return jsonify(asset_to_dict(asset))


@bp.delete("/<int:asset_id>")
@login_required
def delete_asset(asset_id: int):
    get_services().assets.delete_asset(asset_id, user_id=current_user_id())
    return "", 204
