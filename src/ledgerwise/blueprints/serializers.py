"""Convert models and service results into camelCase JSON payloads."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from ..models.asset import Asset
from ..models.liability import Liability
from ..models.transaction import Transaction
from ..models.user import User
from ..services.analytics import (
    Anomaly,
    AnomalyReport,
    CategoryPattern,
    PersonalizedRecommendation,
    SpendingPatterns,
)
from ..services.ledger_service import LedgerSummary
from ..services.net_worth import NetWorthSummary
from ..utils.decimal_utils import round2


def money(value: Optional[Decimal]) -> Optional[float]:
    """Decimals leave the API as floats rounded to cents."""

    return None if value is None else round2(value)


def iso(value: Optional[datetime]) -> Optional[str]:
    return None if value is None else value.isoformat()


def enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "isActive": user.is_active,
        "createdAt": iso(user.created_at),
    }


def transaction_to_dict(tx: Transaction) -> dict[str, Any]:
    return {
        "id": tx.id,
        "userId": tx.user_id,
        "date": iso(tx.occurred_at),
        "amount": money(tx.amount),
        "description": tx.description,
        "category": tx.category,
        "type": enum_value(tx.kind),
        "paymentMethod": enum_value(tx.payment_method),
        "sourceAssetId": tx.source_asset_id,
        "sourceLiabilityId": tx.source_liability_id,
        "createdAt": iso(tx.created_at),
    }


def asset_to_dict(asset: Asset) -> dict[str, Any]:
    return {
        "id": asset.id,
        "userId": asset.user_id,
        "name": asset.name,
        "type": enum_value(asset.kind),
        "value": money(asset.current_value),
        "purchaseValue": money(asset.purchase_value),
        "purchaseDate": iso(asset.purchase_date),
        "currency": asset.currency,
        "description": asset.description,
        "isLiquid": asset.is_liquid,
        "lastUpdated": iso(asset.last_updated),
        "createdAt": iso(asset.created_at),
    }


def liability_to_dict(liability: Liability) -> dict[str, Any]:
    return {
        "id": liability.id,
        "userId": liability.user_id,
        "name": liability.name,
        "type": enum_value(liability.kind),
        "currentBalance": money(liability.current_balance),
        "creditLimit": money(liability.credit_limit),
        "interestRate": money(liability.interest_rate),
        "monthlyPayment": money(liability.monthly_payment),
        "maturityDate": iso(liability.maturity_date),
        "currency": liability.currency,
        "description": liability.description,
        "lastUpdated": iso(liability.last_updated),
        "createdAt": iso(liability.created_at),
    }


def ledger_summary_to_dict(summary: LedgerSummary) -> dict[str, Any]:
    return {
        "income": money(summary.income),
        "expenses": money(summary.expenses),
        "balance": money(summary.balance),
        "transactionCount": summary.transaction_count,
    }


def net_worth_to_dict(summary: NetWorthSummary) -> dict[str, Any]:
    return {
        "userId": summary.user_id,
        "totalAssets": money(summary.total_assets),
        "totalLiabilities": money(summary.total_liabilities),
        "netWorth": money(summary.net_worth),
        "liquidAssets": money(summary.liquid_assets),
        "transactionBalance": money(summary.transaction_balance),
        "creditUtilization": round2(summary.credit_utilization),
        "assetBreakdown": {k: money(v) for k, v in summary.asset_breakdown.items()},
        "liabilityBreakdown": {k: money(v) for k, v in summary.liability_breakdown.items()},
        "lastUpdated": iso(summary.last_updated),
    }


def category_pattern_to_dict(pattern: CategoryPattern) -> dict[str, Any]:
    return {
        "category": pattern.category,
        "totalSpent": money(pattern.total_spent),
        "transactionCount": pattern.transaction_count,
        "averageTransaction": money(pattern.average_transaction),
        "percentage": round2(pattern.percentage),
        "lastTransaction": iso(pattern.last_transaction),
        "isRecurring": pattern.is_recurring,
    }


def spending_patterns_to_dict(patterns: SpendingPatterns) -> dict[str, Any]:
    return {
        "totalTransactions": patterns.total_transactions,
        "totalSpent": money(patterns.total_spent),
        "averageMonthlySpending": money(patterns.average_monthly_spending),
        "highestSpendingMonth": money(patterns.highest_spending_month),
        "lowestSpendingMonth": money(patterns.lowest_spending_month),
        "spendingVariance": round2(patterns.spending_variance),
        "trendDirection": patterns.trend_direction,
        "analysisPeriod": patterns.analysis_period,
        "mostSpentCategory": patterns.most_spent_category,
        "categoryPatterns": {
            name: category_pattern_to_dict(p) for name, p in patterns.categories.items()
        },
        "monthlyTotals": {str(k): money(v) for k, v in patterns.monthly_totals.items()},
    }


def anomaly_to_dict(anomaly: Anomaly) -> dict[str, Any]:
    expected = None
    if anomaly.expected_range is not None:
        low, high = anomaly.expected_range
        expected = {"min": money(low), "max": money(high)}
    return {
        "transactionId": anomaly.transaction_id,
        "description": anomaly.description,
        "category": anomaly.category,
        "amount": money(anomaly.amount),
        "date": iso(anomaly.date),
        "anomalyType": anomaly.anomaly_type,
        "severity": anomaly.severity,
        "message": anomaly.message,
        "expectedRange": expected,
    }


def anomaly_report_to_dict(report: AnomalyReport) -> dict[str, Any]:
    return {
        "userId": report.user_id,
        "analysisDate": iso(report.analysis_date),
        "totalAnomalies": report.total_anomalies,
        "highSeverityCount": report.high_severity_count,
        "mediumSeverityCount": report.medium_severity_count,
        "lowSeverityCount": report.low_severity_count,
        "hasCriticalAnomalies": report.has_critical_anomalies,
        "anomalies": [anomaly_to_dict(a) for a in report.anomalies],
    }


def recommendation_to_dict(rec: PersonalizedRecommendation) -> dict[str, Any]:
    return {
        "type": rec.type,
        "title": rec.title,
        "description": rec.description,
        "priority": rec.priority,
        "potentialSavings": money(rec.potential_savings),
        "category": rec.category,
        "icon": rec.icon,
    }
