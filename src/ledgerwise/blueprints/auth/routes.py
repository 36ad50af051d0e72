"""Registration, login and account routes."""

from __future__ import annotations

from flask import jsonify, request

from ...errors import ValidationError
from ...extensions import get_services
from ..common import current_user_id, json_body, login_required
from ..serializers import user_to_dict
from . import bp


@bp.post("/register")
def register():
    body = json_body()
    user = get_services().auth.register(
        name=body.get("name"), email=body.get("email"), password=body.get("password")
    )
    return jsonify(user_to_dict(user)), 201


@bp.post("/login")
def login():
    body = json_body()
    result = get_services().auth.authenticate(
        email=body.get("email"), password=body.get("password")
    )
    return jsonify({"token": result.token, "user": user_to_dict(result.user)})


@bp.get("/check-email")
def check_email():
    email = request.args.get("email", "")
    if not email.strip():
        raise ValidationError.for_field("email", "Email is required.")
    return jsonify({"exists": get_services().auth.email_exists(email)})


@bp.get("/profile")
@login_required
def profile():
    return jsonify(user_to_dict(get_services().auth.get_profile(current_user_id())))


@bp.post("/change-password")
@login_required
def change_password():
    body = json_body()
    get_services().auth.change_password(
        current_user_id(),
        current_password=body.get("currentPassword") or "",
        new_password=body.get("newPassword") or "",
    )
    return jsonify({"message": "Password changed."})


@bp.delete("/delete-account")
@login_required
def delete_account():
    body = request.get_json(silent=True) or {}
    get_services().auth.delete_account(current_user_id(), password=body.get("password") or "")
    return jsonify({"message": "Account deleted."})
