"""Net worth route."""

from __future__ import annotations

from flask import jsonify

from ...extensions import get_services
from ..common import current_user_id, login_required
from ..serializers import net_worth_to_dict
from . import bp


@bp.get("")
@login_required
def net_worth():
    summary = get_services().net_worth.calculate_net_worth(current_user_id())
    return jsonify(net_worth_to_dict(summary))
