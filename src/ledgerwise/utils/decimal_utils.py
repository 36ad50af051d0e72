"""Helpers for Decimal normalization."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    ``None`` becomes zero; floats go through ``str`` so ``0.1`` stays ``0.1``.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    """Round to cents the way the ledger stores amounts."""

    return coerce_decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def round2(value: float) -> float:
    return round(float(value), 2)


__all__ = ["CENT", "ZERO", "coerce_decimal", "quantize_money", "round2"]
