"""Helpers for Decimal money arithmetic."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
CENTS = Decimal("0.01")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Coerce a stored or user-supplied amount to Decimal; None becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_cents(value: Optional[Number]) -> Decimal:
    """Round an amount to whole cents."""
    return to_decimal(value).quantize(CENTS)


def monthly_rate(annual_percent: Optional[Number]) -> Decimal:
    """Convert an annual percentage (APR or AER) into a monthly fraction."""
    return to_decimal(annual_percent) / HUNDRED / MONTHS_PER_YEAR


def format_amount(amount: Optional[Number], symbol: str = "£", places: int = 2) -> str:
    """Format an amount for alert text, e.g. £1,234.50."""
    quantum = Decimal(1).scaleb(-places)
    value = to_decimal(amount).quantize(quantum)
    return f"{symbol}{value:,.{places}f}"
