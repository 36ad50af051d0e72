"""Date helpers used by the analytics and ledger services."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Stored timestamps are naive UTC; SQLite drops tzinfo on round trip.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def subtract_months(value: datetime, months: int) -> datetime:
    """Move ``value`` back by calendar months, clamping the day to the month length."""

    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def month_key(value: datetime) -> int:
    """Return ``YYYYMM`` as an int so keys sort chronologically."""

    return value.year * 100 + value.month


def parse_datetime(raw: str) -> datetime:
    """Parse ``YYYY-MM-DD`` or ISO-8601 input into naive UTC."""

    raw = raw.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    if len(raw) == 10:
        return datetime.strptime(raw, "%Y-%m-%d")
    return to_naive_utc(datetime.fromisoformat(raw))


__all__ = ["month_key", "parse_datetime", "subtract_months", "to_naive_utc", "utcnow"]
