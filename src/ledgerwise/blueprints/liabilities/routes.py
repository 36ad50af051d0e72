"""Liability routes."""

from __future__ import annotations

from typing import Any

from flask import jsonify

from ...extensions import get_services
from ...services.liabilities import LiabilityInput
from ..common import current_user_id, json_body, login_required, optional_datetime
from ..serializers import liability_to_dict, money
from . import bp


def _input_from_body(body: dict[str, Any]) -> LiabilityInput:
    return LiabilityInput(
        name=body.get("name"),
        kind=body.get("type"),
        current_balance=body.get("currentBalance"),
        credit_limit=body.get("creditLimit"),
        interest_rate=body.get("interestRate"),
        monthly_payment=body.get("monthlyPayment"),
        maturity_date=optional_datetime(body.get("maturityDate"), "maturityDate"),
        currency=body.get("currency"),
        description=body.get("description"),
    )


@bp.get("")
@login_required
def list_liabilities():
    rows = get_services().liabilities.list_liabilities(user_id=current_user_id())
    return jsonify([liability_to_dict(item) for item in rows])


@bp.get("/total-debt")
@login_required
def total_debt():
    total = get_services().liabilities.total_debt(user_id=current_user_id())
    return jsonify({"totalDebt": money(total)})


@bp.get("/<int:liability_id>")
@login_required
def get_liability(liability_id: int):
    liability = get_services().liabilities.get_liability(liability_id, user_id=current_user_id())
    return jsonify(liability_to_dict(liability))


@bp.post("")
@login_required
def create_liability():
    liability = get_services().liabilities.create_liability(
        _input_from_body(json_body()), user_id=current_user_id()
    )
    return jsonify(liability_to_dict(liability)), 201


@bp.put("/<int:liability_id>")
@login_required
def update_liability(liability_id: int):
    liability = get_services().liabilities.update_liability(
        liability_id, _input_from_body(json_body()), user_id=current_user_id()
    )
    return jsonify(liability_to_dict(liability))


@bp.delete("/<int:liability_id>")
@login_required
def delete_liability(liability_id: int):
    get_services().liabilities.delete_liability(liability_id, user_id=current_user_id())
    return "", 204
