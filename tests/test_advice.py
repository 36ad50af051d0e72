"""Tests for the text-generation advice layer; the provider is always mocked."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
import requests

from ledgerwise.config import AIConfig
from ledgerwise.errors import ProviderError, ValidationError
from ledgerwise.models import LiabilityKind, TransactionKind
from ledgerwise.services.advice import (
    ADVICE_FALLBACK,
    CHAT_FALLBACK,
    NOT_CONFIGURED_MESSAGE,
    ONBOARDING_MESSAGE,
    AdviceGenerator,
)

from .conftest import NOW


def _reply(content: str) -> MagicMock:
    response = MagicMock()
    response.json.return_value = {"choices": [{"message": {"content": content}}]}
    return response


@pytest.fixture
def http_session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def make_generator(repos, net_worth_service, analytics_service, http_session):
    def _make(api_key: str | None = "test-key") -> AdviceGenerator:
        config = AIConfig(api_key=api_key, base_url="https://llm.test/v1", max_tokens=99)
        return AdviceGenerator(
            config,
            transactions=repos.transactions,
            net_worth=net_worth_service,
            analytics=analytics_service,
            session=http_session,
        )

    return _make


def test_complete_without_key_skips_network(make_generator, http_session):
    generator = make_generator(api_key=None)

    assert generator.complete("hello") == NOT_CONFIGURED_MESSAGE
    http_session.post.assert_not_called()


def test_complete_posts_chat_completion(make_generator, http_session):
    http_session.post.return_value = _reply("  Spend less on takeout.  ")
    generator = make_generator()

    assert generator.complete("hello") == "Spend less on takeout."

    args, kwargs = http_session.post.call_args
    assert args[0] == "https://llm.test/v1/chat/completions"
    assert kwargs["json"] == {
        "model": "mixtral-8x7b-32768",
        "messages": [{"role": "user", "content": "hello"}],
        "temperature": 0.3,
        "max_tokens": 99,
    }
    assert kwargs["headers"]["Authorization"] == "Bearer test-key"


def test_complete_wraps_network_errors(make_generator, http_session):
    http_session.post.side_effect = requests.ConnectionError("boom")

    with pytest.raises(ProviderError):
        make_generator().complete("hello")


def test_complete_rejects_http_errors(make_generator, http_session):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    http_session.post.return_value = response

    with pytest.raises(ProviderError):
        make_generator().complete("hello")


def test_complete_rejects_body_without_choices(make_generator, http_session):
    response = MagicMock()
    response.json.return_value = {"choices": []}
    http_session.post.return_value = response

    with pytest.raises(ProviderError):
        make_generator().complete("hello")


def test_advice_without_transactions_is_onboarding(make_generator, user, http_session):
    assert make_generator().financial_advice(user.id) == ONBOARDING_MESSAGE
    http_session.post.assert_not_called()


def test_advice_prompt_includes_totals(make_generator, user, transaction_factory, http_session):
    transaction_factory("1000.00", kind=TransactionKind.INCOME, category="Salary")
    transaction_factory("250.00", category="Rent")
    http_session.post.return_value = _reply("Keep saving.")

    assert make_generator().financial_advice(user.id) == "Keep saving."

    prompt = http_session.post.call_args.kwargs["json"]["messages"][0]["content"]
    assert "Total income: 1000.00" in prompt
    assert "Balance: 750.00" in prompt
    assert "Rent (250.00)" in prompt


def test_advice_falls_back_on_provider_failure(
    make_generator, user, transaction_factory, http_session
):
    transaction_factory("10.00")
    http_session.post.side_effect = requests.Timeout("slow")

    assert make_generator().financial_advice(user.id) == ADVICE_FALLBACK


def test_summary_rejects_inverted_period(make_generator, user):
    with pytest.raises(ValidationError):
        make_generator().financial_summary(user.id, NOW, NOW - timedelta(days=1))


def test_summary_of_empty_period(make_generator, user, http_session):
    text = make_generator().financial_summary(user.id, datetime(2024, 1, 1), datetime(2024, 1, 31))

    assert text == "No transactions recorded from 2024-01-01 to 2024-01-31."
    http_session.post.assert_not_called()


def test_summary_falls_back_to_local_figures(
    make_generator, user, transaction_factory, http_session
):
    transaction_factory("100.00", kind=TransactionKind.INCOME, occurred_at=datetime(2024, 1, 5))
    transaction_factory("40.00", category="Food", occurred_at=datetime(2024, 1, 6))
    http_session.post.side_effect = requests.ConnectionError("down")

    text = make_generator().financial_summary(user.id, datetime(2024, 1, 1), datetime(2024, 1, 31))

    assert "income 100.00" in text
    assert "balance 60.00" in text
    assert "Food (40.00)" in text


def test_chat_requires_message(make_generator, user):
    with pytest.raises(ValidationError):
        make_generator().chat(user.id, "   ")


def test_chat_builds_context_when_missing(make_generator, user, asset_factory, http_session):
    asset_factory("1500.00")
    http_session.post.return_value = _reply("See [/networth].")

    assert make_generator().chat(user.id, "How am I doing?") == "See [/networth]."

    prompt = http_session.post.call_args.kwargs["json"]["messages"][0]["content"]
    assert "Net worth: 1500.00" in prompt
    assert "User question: How am I doing?" in prompt


def test_chat_apologizes_on_failure(make_generator, user, http_session):
    http_session.post.side_effect = requests.ConnectionError("down")

    assert make_generator().chat(user.id, "hi", context="ctx") == CHAT_FALLBACK


def test_portfolio_insights_warn_on_high_utilization(
    make_generator, user, asset_factory, liability_factory
):
    asset_factory("2000.00")
    liability_factory("400.00", kind=LiabilityKind.CREDIT_CARD, credit_limit="1000.00")

    lines = make_generator(api_key=None).portfolio_insights(user.id)

    assert lines[0] == "Your net worth is 1600.00."
    assert any("Credit utilization is 40.0%" in line for line in lines)


def test_anomaly_insights_without_provider_use_messages(
    make_generator, user, transaction_factory, http_session
):
    transaction_factory("120.00", category="Travel", occurred_at=NOW - timedelta(days=1))

    lines = make_generator(api_key=None).anomaly_insights(user.id)

    assert lines == ["Unusual category: Travel (rarely used)"]
    http_session.post.assert_not_called()
