"""Short financial text generated by an OpenAI-compatible chat completion API.

Every public method builds a prompt from locally computed figures, asks the
provider for a completion and falls back to a deterministic message when the
provider is not configured or fails. Provider failures never escape the
public methods; :meth:`AdviceGenerator.complete` is the only call that raises.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import requests

from ..config import AIConfig
from ..domain.repositories import TransactionRepository
from ..errors import ProviderError, ValidationError
from ..logging_config import get_logger
from ..models.enums import TransactionKind
from ..models.transaction import Transaction
from ..utils.decimal_utils import ZERO, coerce_decimal
from .analytics import AnalyticsService
from .net_worth import NetWorthService

logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = "AI provider is not configured."
ONBOARDING_MESSAGE = "Start recording your transactions to receive personalized advice."
ADVICE_FALLBACK = "Unable to generate advice right now."
CHAT_FALLBACK = "I can't answer right now. Could you rephrase your question?"
CREDIT_UTILIZATION_WARNING = 30.0


def _money(value: Decimal) -> str:
    return f"{coerce_decimal(value):.2f}"


def _totals(transactions: list[Transaction]) -> tuple[Decimal, Decimal]:
    income = sum(
        (coerce_decimal(tx.amount) for tx in transactions if tx.kind == TransactionKind.INCOME), ZERO
    )
    expenses = sum(
        (coerce_decimal(tx.amount) for tx in transactions if tx.kind == TransactionKind.EXPENSE), ZERO
    )
    return income, expenses


def top_expense_categories(transactions: list[Transaction], limit: int = 3) -> list[tuple[str, Decimal]]:
    """Expense categories ordered by total spend, largest first."""

    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for tx in transactions:
        if tx.kind == TransactionKind.EXPENSE:
            totals[tx.category] += coerce_decimal(tx.amount)
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


class AdviceGenerator:
    """Builds prompts from the ledger and asks the provider for short answers."""

    def __init__(
        self,
        config: AIConfig,
        *,
        transactions: TransactionRepository,
        net_worth: NetWorthService,
        analytics: AnalyticsService,
        session: Optional[requests.Session] = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self._transactions = transactions
        self._net_worth = net_worth
        self._analytics = analytics
        self._session = session or requests.Session()
        self._log = log or logger

    # -- provider ---------------------------------------------------------

    def complete(self, prompt: str) -> str:
        """Send a single-message chat completion and return the trimmed reply.

        Raises:
            ProviderError: network failure, non-2xx status or unusable body
        """
        if not self.config.enabled:
            self._log.warning("Text-generation API key not configured")
            return NOT_CONFIGURED_MESSAGE

        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
        url = f"{self.config.base_url}/chat/completions"
        try:
            response = self._session.post(
                url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.config.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            self._log.error("Text-generation request failed", extra={"url": url, "error": str(exc)})
            raise ProviderError(f"Text-generation request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError("Text-generation response was not JSON") from exc

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("Text-generation response had no message content") from exc
        if not isinstance(content, str) or not content.strip():
            raise ProviderError("Text-generation response was empty")

        message = content.strip()
        self._log.info("Text generated", extra={"model": self.config.model, "chars": len(message)})
        return message

    # -- advice -----------------------------------------------------------

    def financial_advice(self, user_id: int) -> str:
        """One short tip based on lifetime income, expenses and top category."""

        transactions = self._transactions.search(user_id=user_id)
        if not transactions:
            return ONBOARDING_MESSAGE

        income, expenses = _totals(transactions)
        top = top_expense_categories(transactions, limit=1)
        top_text = f"{top[0][0]} ({_money(top[0][1])})" if top else "N/A"
        prompt = (
            "You are an expert financial advisor. Analyze this data and give ONE short "
            "piece of advice (15 words maximum).\n\n"
            "Financial data:\n"
            f"- Total income: {_money(income)}\n"
            f"- Total expenses: {_money(expenses)}\n"
            f"- Balance: {_money(income - expenses)}\n"
            f"- Top expense category: {top_text}\n"
            f"- Number of transactions: {len(transactions)}\n\n"
            "Advice (15 words max):"
        )
        try:
            return self.complete(prompt)
        except ProviderError:
            self._log.exception("Financial advice generation failed", extra={"user_id": user_id})
            return ADVICE_FALLBACK

    def financial_summary(self, user_id: int, start: datetime, end: datetime) -> str:
        """Concise summary of one period; locally computed when the provider fails."""

        if start > end:
            raise ValidationError.for_field("startDate", "Start date must not be after end date.")

        transactions = self._transactions.search(user_id=user_id, start_date=start, end_date=end)
        period = f"{start:%Y-%m-%d} to {end:%Y-%m-%d}"
        if not transactions:
            return f"No transactions recorded from {period}."

        income, expenses = _totals(transactions)
        top = top_expense_categories(transactions, limit=3)
        categories = ", ".join(f"{name} ({_money(total)})" for name, total in top) or "none"
        prompt = (
            f"Write a concise, educational financial summary for the period {period}.\n\n"
            "Financial data:\n"
            f"- Total income: {_money(income)}\n"
            f"- Total expenses: {_money(expenses)}\n"
            f"- Balance: {_money(income - expenses)}\n"
            f"- Number of transactions: {len(transactions)}\n"
            f"- Top 3 expense categories: {categories}\n\n"
            "Write 30-40 words maximum with:\n"
            "1. An overall assessment\n"
            "2. One point of attention or congratulation\n"
            "3. A short recommendation"
        )
        try:
            return self.complete(prompt)
        except ProviderError:
            self._log.exception("Financial summary generation failed", extra={"user_id": user_id})
            return (
                f"From {period}: income {_money(income)}, expenses {_money(expenses)}, "
                f"balance {_money(income - expenses)} across {len(transactions)} transactions. "
                f"Top categories: {categories}."
            )

    def build_context(self, user_id: int) -> str:
        """Plain-text snapshot of net worth and recent spending for chat prompts."""

        summary = self._net_worth.calculate_net_worth(user_id)
        patterns = self._analytics.analyze_spending_patterns(user_id)
        lines = [
            f"Net worth: {_money(summary.net_worth)}",
            f"Total assets: {_money(summary.total_assets)}",
            f"Total liabilities: {_money(summary.total_liabilities)}",
            f"Liquid assets: {_money(summary.liquid_assets)}",
            f"Credit utilization: {summary.credit_utilization:.1f}%",
            f"Spending over the last {patterns.analysis_period} months: {_money(patterns.total_spent)}",
            f"Average monthly spending: {_money(patterns.average_monthly_spending)}",
            f"Most spent category: {patterns.most_spent_category}",
        ]
        return "\n".join(lines)

    def chat(self, user_id: int, message: str, context: Optional[str] = None) -> str:
        if not message or not message.strip():
            raise ValidationError.for_field("message", "Message is required.")

        try:
            safe_context = context.strip() if context and context.strip() else self.build_context(user_id)
            prompt = (
                "You are a conversational financial assistant. You have access to the "
                f"following data:\n{safe_context}\n\n"
                "Rules:\n"
                "- Answer concisely\n"
                "- Be precise and actionable\n"
                "- For transaction details, point the user to [/transactions]\n"
                "- For statistics or charts, point the user to [/statistics]\n"
                "- For assets and net worth, point the user to [/networth]\n"
                "- For profile changes, point the user to [/profile]\n\n"
                f"User question: {message.strip()}\n\n"
                "Answer:"
            )
            return self.complete(prompt)
        except ProviderError:
            self._log.exception("Chat response generation failed", extra={"user_id": user_id})
            return CHAT_FALLBACK

    # -- insights ---------------------------------------------------------

    def anomaly_insights(self, user_id: int) -> list[str]:
        """Short lines describing unusual spending."""

        report = self._analytics.detect_anomalies(user_id)
        local = [anomaly.message for anomaly in report.anomalies]
        if not report.anomalies or not self.config.enabled:
            return local

        listing = "\n".join(
            f"- {a.date:%Y-%m-%d} {a.category}: {_money(a.amount)} ({a.severity}) {a.description}"
            for a in report.anomalies
        )
        prompt = (
            "You are a financial assistant. These transactions were flagged as unusual:\n"
            f"{listing}\n\n"
            "Write at most 3 short insights, one per line, without numbering."
        )
        try:
            text = self.complete(prompt)
        except ProviderError:
            self._log.exception("Anomaly insight generation failed", extra={"user_id": user_id})
            return local
        lines = [line.strip().lstrip("-*").strip() for line in text.splitlines()]
        return [line for line in lines if line] or local

    def portfolio_insights(self, user_id: int) -> list[str]:
        """Observations on the asset and debt mix."""

        summary = self._net_worth.calculate_net_worth(user_id)
        local = [f"Your net worth is {_money(summary.net_worth)}."]
        if summary.total_assets > 0:
            liquidity = float(summary.liquid_assets / summary.total_assets * 100)
            local.append(f"{liquidity:.1f}% of your assets are liquid.")
        if summary.credit_utilization > CREDIT_UTILIZATION_WARNING:
            local.append(
                f"Credit utilization is {summary.credit_utilization:.1f}%; "
                f"keep it under {CREDIT_UTILIZATION_WARNING:.0f}%."
            )
        if not self.config.enabled:
            return local

        assets = ", ".join(f"{k} {_money(v)}" for k, v in summary.asset_breakdown.items()) or "none"
        debts = ", ".join(f"{k} {_money(v)}" for k, v in summary.liability_breakdown.items()) or "none"
        prompt = (
            "You are a financial advisor. Review this portfolio:\n"
            f"- Net worth: {_money(summary.net_worth)}\n"
            f"- Assets: {assets}\n"
            f"- Liabilities: {debts}\n"
            f"- Credit utilization: {summary.credit_utilization:.1f}%\n\n"
            "Write at most 3 short insights, one per line, without numbering."
        )
        try:
            text = self.complete(prompt)
        except ProviderError:
            self._log.exception("Portfolio insight generation failed", extra={"user_id": user_id})
            return local
        lines = [line.strip().lstrip("-*").strip() for line in text.splitlines()]
        return [line for line in lines if line] or local


__all__ = [
    "ADVICE_FALLBACK",
    "AdviceGenerator",
    "CHAT_FALLBACK",
    "NOT_CONFIGURED_MESSAGE",
    "ONBOARDING_MESSAGE",
    "top_expense_categories",
]
