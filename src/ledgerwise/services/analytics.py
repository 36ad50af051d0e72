"""Spending patterns, anomaly detection and recommendations.

Everything here is recomputed from the ledger on each call. The module-level
functions work on already-loaded transactions so they can be exercised
without a database; :class:`AnalyticsService` wires them to a repository.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ..domain.repositories import TransactionRepository
from ..errors import ValidationError
from ..logging_config import get_logger
from ..models.enums import TransactionKind
from ..models.transaction import Transaction
from ..utils.dates import month_key, subtract_months, utcnow
from ..utils.decimal_utils import ZERO, coerce_decimal, quantize_money

logger = get_logger(__name__)

ANOMALY_WINDOW_MONTHS = 3
RECENT_PER_CATEGORY = 10
MAX_ANOMALIES = 10
CRITICAL_AMOUNT = Decimal("500")
RARE_CATEGORY_MAX_COUNT = 2
RARE_CATEGORY_RECENT_DAYS = 7
MONTHS_IN_TREND = 3

TREND_INCREASING = "Increasing"
TREND_DECREASING = "Decreasing"
TREND_NEUTRAL = "Neutral"

SEVERITY_HIGH = "High"
SEVERITY_MEDIUM = "Medium"
SEVERITY_LOW = "Low"

_PRIORITY_RANK = {"High": 3, "Medium": 2, "Low": 1}


@dataclass(slots=True)
class CategoryPattern:
    category: str
    total_spent: Decimal
    transaction_count: int
    average_transaction: Decimal
    percentage: float
    last_transaction: datetime
    is_recurring: bool


@dataclass(slots=True)
class SpendingPatterns:
    total_transactions: int = 0
    total_spent: Decimal = ZERO
    average_monthly_spending: Decimal = ZERO
    highest_spending_month: Decimal = ZERO
    lowest_spending_month: Decimal = ZERO
    spending_variance: float = 0.0
    trend_direction: str = TREND_NEUTRAL
    analysis_period: int = 3
    most_spent_category: str = "Other"
    # Ordered by descending total spend.
    categories: dict[str, CategoryPattern] = field(default_factory=dict)
    monthly_totals: dict[int, Decimal] = field(default_factory=dict)


@dataclass(slots=True)
class Anomaly:
    transaction_id: Optional[int]
    description: str
    category: str
    amount: Decimal
    date: datetime
    anomaly_type: str
    severity: str
    message: str
    expected_range: Optional[tuple[Decimal, Decimal]] = None


@dataclass(slots=True)
class AnomalyReport:
    user_id: int
    analysis_date: datetime
    total_anomalies: int = 0
    high_severity_count: int = 0
    medium_severity_count: int = 0
    low_severity_count: int = 0
    has_critical_anomalies: bool = False
    anomalies: list[Anomaly] = field(default_factory=list)


@dataclass(slots=True)
class PersonalizedRecommendation:
    type: str
    title: str
    description: str
    priority: str
    potential_savings: Decimal = ZERO
    category: Optional[str] = None
    icon: str = ""


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


def sample_std_dev(values: list[Decimal]) -> float:
    """Standard deviation with Bessel's correction; 0 for fewer than two values."""

    if len(values) < 2:
        return 0.0
    mean = sum(values, ZERO) / len(values)
    squares = sum(float(v - mean) ** 2 for v in values)
    return math.sqrt(squares / (len(values) - 1))


def spending_variance(monthly_totals: list[Decimal]) -> float:
    """Coefficient of variation (population std / mean) as a percentage."""

    if len(monthly_totals) < 2:
        return 0.0
    mean = sum(monthly_totals, ZERO) / len(monthly_totals)
    if mean <= 0:
        return 0.0
    variance = sum(float(t - mean) ** 2 for t in monthly_totals) / len(monthly_totals)
    return round(math.sqrt(variance) / float(mean) * 100, 2)


def spending_trend(monthly_totals: list[Decimal]) -> str:
    """Compare the two largest monthly totals.

    The comparison is by size, not by recency, so the result is never
    ``Increasing``. Kept as-is until the intended semantics are confirmed.
    """

    if len(monthly_totals) < 2:
        return TREND_NEUTRAL
    top = sorted(monthly_totals, reverse=True)[:2]
    if top[0] == 0:
        return TREND_NEUTRAL
    change = float((top[1] - top[0]) / top[0] * 100)
    if change > 10:
        return TREND_INCREASING
    if change < -10:
        return TREND_DECREASING
    return TREND_NEUTRAL


def is_recurring(transactions: list[Transaction]) -> bool:
    """Two most recent entries look like a monthly charge of a similar amount."""

    if len(transactions) < 2:
        return False
    latest, previous = sorted(transactions, key=lambda t: t.occurred_at, reverse=True)[:2]
    latest_amount = coerce_decimal(latest.amount)
    if latest_amount == 0:
        return False
    amount_difference = abs(latest_amount - coerce_decimal(previous.amount)) / latest_amount
    days_between = (latest.occurred_at - previous.occurred_at).total_seconds() / 86400
    return amount_difference < Decimal("0.1") and 20 < days_between < 40


def _group_by_category(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    grouped: dict[str, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        grouped[tx.category or "Other"].append(tx)
    return grouped


# ---------------------------------------------------------------------------
# Pure computations
# ---------------------------------------------------------------------------


def compute_spending_patterns(
    expenses: Iterable[Transaction], *, months_to_analyze: int = 3
) -> SpendingPatterns:
    """Summarize expense transactions already restricted to the lookback window."""

    expenses = list(expenses)
    if not expenses:
        return SpendingPatterns(analysis_period=months_to_analyze)

    total = sum((coerce_decimal(t.amount) for t in expenses), ZERO)

    categories: dict[str, CategoryPattern] = {}
    for name, rows in _group_by_category(expenses).items():
        spent = sum((coerce_decimal(t.amount) for t in rows), ZERO)
        categories[name] = CategoryPattern(
            category=name,
            total_spent=spent,
            transaction_count=len(rows),
            average_transaction=quantize_money(spent / len(rows)),
            percentage=round(float(spent / total) * 100, 2) if total > 0 else 0.0,
            last_transaction=max(t.occurred_at for t in rows),
            is_recurring=is_recurring(rows),
        )
    ordered = dict(sorted(categories.items(), key=lambda item: item[1].total_spent, reverse=True))

    by_month: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for tx in expenses:
        by_month[month_key(tx.occurred_at)] += coerce_decimal(tx.amount)
    # Only months that actually have spending count.
    recent_keys = sorted(by_month, reverse=True)[:MONTHS_IN_TREND]
    monthly_totals = {key: by_month[key] for key in recent_keys}
    values = list(monthly_totals.values())

    return SpendingPatterns(
        total_transactions=len(expenses),
        total_spent=total,
        average_monthly_spending=sum(values, ZERO) / len(values) if values else ZERO,
        highest_spending_month=max(values) if values else ZERO,
        lowest_spending_month=min(values) if values else ZERO,
        spending_variance=spending_variance(values),
        trend_direction=spending_trend(values),
        analysis_period=months_to_analyze,
        most_spent_category=next(iter(ordered), "Other"),
        categories=ordered,
        monthly_totals=monthly_totals,
    )


def _amount_anomalies(rows: list[Transaction]) -> list[Anomaly]:
    amounts = [coerce_decimal(t.amount) for t in rows]
    mean = sum(amounts, ZERO) / len(amounts)
    std_dev = Decimal(str(sample_std_dev(amounts)))
    threshold = mean + std_dev * 2

    found: list[Anomaly] = []
    recent = sorted(rows, key=lambda t: t.occurred_at, reverse=True)[:RECENT_PER_CATEGORY]
    for tx in recent:
        amount = coerce_decimal(tx.amount)
        if amount <= threshold or mean <= 0:
            continue
        excess = round(float((amount - mean) / mean) * 100, 2)
        found.append(
            Anomaly(
                transaction_id=tx.id,
                description=tx.description or "",
                category=tx.category or "Other",
                amount=amount,
                date=tx.occurred_at,
                anomaly_type="UnusualAmount",
                severity=SEVERITY_HIGH if excess > 100 else SEVERITY_MEDIUM,
                message=(
                    f"Unusually high spending in {tx.category}: {amount:,.2f} "
                    f"({excess}% above average)"
                ),
                expected_range=(quantize_money(mean - std_dev), quantize_money(mean + std_dev)),
            )
        )
    return found


def _rare_category_anomaly(rows: list[Transaction], *, now: datetime) -> Anomaly | None:
    if len(rows) > RARE_CATEGORY_MAX_COUNT:
        return None
    latest = max(rows, key=lambda t: t.occurred_at)
    if (now - latest.occurred_at).total_seconds() / 86400 >= RARE_CATEGORY_RECENT_DAYS:
        return None
    return Anomaly(
        transaction_id=latest.id,
        description=latest.description or "",
        category=latest.category or "Other",
        amount=coerce_decimal(latest.amount),
        date=latest.occurred_at,
        anomaly_type="UnusualCategory",
        severity=SEVERITY_LOW,
        message=f"Unusual category: {latest.category} (rarely used)",
    )


def compute_anomaly_report(
    expenses: Iterable[Transaction], *, user_id: int, now: datetime
) -> AnomalyReport:
    """Flag outlier amounts per category and recent spending in rare categories.

    Counts cover every anomaly found; the list keeps the largest amounts only.
    """

    grouped = _group_by_category(expenses)
    anomalies: list[Anomaly] = []
    for rows in grouped.values():
        anomalies.extend(_amount_anomalies(rows))
    for rows in grouped.values():
        rare = _rare_category_anomaly(rows, now=now)
        if rare is not None:
            anomalies.append(rare)

    return AnomalyReport(
        user_id=user_id,
        analysis_date=now,
        total_anomalies=len(anomalies),
        high_severity_count=sum(1 for a in anomalies if a.severity == SEVERITY_HIGH),
        medium_severity_count=sum(1 for a in anomalies if a.severity == SEVERITY_MEDIUM),
        low_severity_count=sum(1 for a in anomalies if a.severity == SEVERITY_LOW),
        has_critical_anomalies=any(
            a.severity == SEVERITY_HIGH and a.amount > CRITICAL_AMOUNT for a in anomalies
        ),
        anomalies=sorted(anomalies, key=lambda a: a.amount, reverse=True)[:MAX_ANOMALIES],
    )


def build_recommendations(
    patterns: SpendingPatterns, report: AnomalyReport
) -> list[PersonalizedRecommendation]:
    """Apply independent rules; High priority first, then Medium, then Low."""

    recommendations: list[PersonalizedRecommendation] = []

    if patterns.categories:
        top = max(patterns.categories.values(), key=lambda c: c.percentage)
        if top.percentage > 40:
            savings = quantize_money(top.total_spent * Decimal("0.1"))
            recommendations.append(
                PersonalizedRecommendation(
                    type="ReduceSpending",
                    category=top.category,
                    title=f"Cut back on {top.category}",
                    description=(
                        f"'{top.category}' accounts for {top.percentage}% of your spending. "
                        f"Trimming it by 10% would save about {savings:,.2f}."
                    ),
                    potential_savings=savings,
                    priority="High",
                    icon="📉",
                )
            )

    high = [a for a in report.anomalies if a.severity == SEVERITY_HIGH]
    if report.high_severity_count > 0 and high:
        flagged_total = sum((a.amount for a in high), ZERO)
        recommendations.append(
            PersonalizedRecommendation(
                type="ReviewAnomalies",
                title="Review unusual expenses",
                description=(
                    f"{len(high)} unusually large expense(s) totalling {flagged_total:,.2f}. "
                    "Check that they are legitimate."
                ),
                potential_savings=flagged_total,
                priority="High",
                icon="⚠️",
            )
        )

    recurring = [c for c in patterns.categories.values() if c.is_recurring and c.percentage > 5]
    if recurring:
        target = max(recurring, key=lambda c: c.percentage)
        recommendations.append(
            PersonalizedRecommendation(
                type="OptimizeRecurring",
                category=target.category,
                title=f"Optimize recurring {target.category} costs",
                description=(
                    f"You spend on {target.category} every month. "
                    "Look for cheaper plans or subscriptions to cancel."
                ),
                potential_savings=quantize_money(target.total_spent * Decimal("0.15")),
                priority="Medium",
                icon="🔄",
            )
        )

    if patterns.average_monthly_spending > 0:
        monthly = patterns.average_monthly_spending
        daily = quantize_money(monthly / 30 * Decimal("0.9"))
        recommendations.append(
            PersonalizedRecommendation(
                type="DailyBudget",
                title="Set a daily budget",
                description=(
                    f"You spend {monthly:,.2f} a month on average. "
                    f"A daily budget of {daily:,.2f} would save 10%."
                ),
                potential_savings=quantize_money(monthly * Decimal("0.1")),
                priority="Medium",
                icon="💰",
            )
        )

    if patterns.spending_variance > 30:
        recommendations.append(
            PersonalizedRecommendation(
                type="StabilizeSpending",
                title="Smooth out your spending",
                description=(
                    f"Your monthly spending varies by {patterns.spending_variance}%. "
                    "Spreading large purchases makes budgeting easier."
                ),
                priority="Low",
                icon="📊",
            )
        )

    return sorted(recommendations, key=lambda r: _PRIORITY_RANK.get(r.priority, 0), reverse=True)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AnalyticsService:
    """Per-user analytics over the ledger store."""

    def __init__(
        self,
        *,
        transactions: TransactionRepository,
        clock: Callable[[], datetime] = utcnow,
        log: logging.Logger | None = None,
    ) -> None:
        self._transactions = transactions
        self._clock = clock
        self._log = log or logger

    def _expenses_since(self, user_id: int, months: int, now: datetime) -> list[Transaction]:
        return self._transactions.search(
            user_id=user_id,
            start_date=subtract_months(now, months),
            kind=TransactionKind.EXPENSE,
        )

    def analyze_spending_patterns(self, user_id: int, months_to_analyze: int = 3) -> SpendingPatterns:
        if months_to_analyze <= 0:
            raise ValidationError.for_field(
                "months", "The lookback window must be at least one month."
            )
        try:
            expenses = self._expenses_since(user_id, months_to_analyze, self._clock())
            patterns = compute_spending_patterns(expenses, months_to_analyze=months_to_analyze)
        except Exception:
            self._log.exception("Spending pattern analysis failed", extra={"user_id": user_id})
            raise
        self._log.info(
            "Spending patterns computed",
            extra={
                "user_id": user_id,
                "months": months_to_analyze,
                "transactions": patterns.total_transactions,
            },
        )
        return patterns

    def detect_anomalies(self, user_id: int) -> AnomalyReport:
        try:
            now = self._clock()
            expenses = self._expenses_since(user_id, ANOMALY_WINDOW_MONTHS, now)
            report = compute_anomaly_report(expenses, user_id=user_id, now=now)
        except Exception:
            self._log.exception("Anomaly detection failed", extra={"user_id": user_id})
            raise
        self._log.info(
            "Anomalies detected",
            extra={"user_id": user_id, "total": report.total_anomalies},
        )
        return report

    def generate_recommendations(self, user_id: int) -> list[PersonalizedRecommendation]:
        patterns = self.analyze_spending_patterns(user_id)
        report = self.detect_anomalies(user_id)
        return build_recommendations(patterns, report)


__all__ = [
    "AnalyticsService",
    "Anomaly",
    "AnomalyReport",
    "CategoryPattern",
    "PersonalizedRecommendation",
    "SpendingPatterns",
    "build_recommendations",
    "compute_anomaly_report",
    "compute_spending_patterns",
    "is_recurring",
    "sample_std_dev",
    "spending_trend",
    "spending_variance",
]
