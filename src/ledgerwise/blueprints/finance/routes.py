"""Advice, analytics and insight routes."""

from __future__ import annotations

from flask import jsonify, request

from ...errors import ValidationError
from ...extensions import get_services
from ...utils.dates import subtract_months, utcnow
from ..common import current_user_id, json_body, login_required, query_datetime
from ..serializers import (
    anomaly_report_to_dict,
    recommendation_to_dict,
    spending_patterns_to_dict,
)
from . import bp

MIN_MONTHS = 1
MAX_MONTHS = 24


@bp.get("/advice")
@login_required
def advice():
    return jsonify({"advice": get_services().advice.financial_advice(current_user_id())})


@bp.get("/summary")
@login_required
def summary():
    end = query_datetime("endDate") or utcnow()
    start = query_datetime("startDate") or subtract_months(end, 1)
    text = get_services().advice.financial_summary(current_user_id(), start, end)
    return jsonify({"summary": text, "startDate": start.isoformat(), "endDate": end.isoformat()})


@bp.post("/chat")
@login_required
def chat():
    body = json_body()
    message = body.get("message")
    if not isinstance(message, str):
        raise ValidationError.for_field("message", "Message is required.")
    context = body.get("context")
    reply = get_services().advice.chat(
        current_user_id(), message, context if isinstance(context, str) else None
    )
    return jsonify({"response": reply})


@bp.get("/anomalies")
@login_required
def anomalies():
    return jsonify({"anomalies": get_services().advice.anomaly_insights(current_user_id())})


@bp.get("/spending-patterns")
@login_required
def spending_patterns():
    try:
        months = int(request.args.get("months", "3"))
    except ValueError:
        months = None
    if months is None or not MIN_MONTHS <= months <= MAX_MONTHS:
        raise ValidationError.for_field(
            "months", f"Months must be between {MIN_MONTHS} and {MAX_MONTHS}."
        )
    patterns = get_services().analytics.analyze_spending_patterns(current_user_id(), months)
    return jsonify(spending_patterns_to_dict(patterns))


@bp.get("/smart-anomalies")
@login_required
def smart_anomalies():
    report = get_services().analytics.detect_anomalies(current_user_id())
    return jsonify(anomaly_report_to_dict(report))


@bp.get("/recommendations")
@login_required
def recommendations():
    recs = get_services().analytics.generate_recommendations(current_user_id())
    return jsonify([recommendation_to_dict(rec) for rec in recs])


@bp.get("/portfolio-insights")
@login_required
def portfolio_insights():
    return jsonify({"insights": get_services().advice.portfolio_insights(current_user_id())})
