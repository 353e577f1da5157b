"""Planning helpers for payment dates and month arithmetic."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Optional


def add_months(base_date: date, months: int) -> date:
    """Add months to a date while clamping invalid day numbers."""
    month_index = (base_date.month - 1) + months
    year = base_date.year + month_index // 12
    month = month_index % 12 + 1
    max_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(base_date.day, max_day))


def payment_date_in_month(year: int, month: int, payment_day: int) -> date:
    """Return the payment date for a month, clamping e.g. day 31 to 30 Apr."""
    max_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(payment_day, max_day))


def next_payment_date(payment_day: Optional[int], today: date, include_today: bool = True) -> Optional[date]:
    """
    Next date a fixed monthly payment is taken.

    With include_today a payment due today is still "next"; otherwise it is
    treated as already taken and next month's date is returned.
    """
    if not payment_day:
        return None

    candidate = payment_date_in_month(today.year, today.month, payment_day)
    if candidate < today or (candidate == today and not include_today):
        following = add_months(date(today.year, today.month, 1), 1)
        candidate = payment_date_in_month(following.year, following.month, payment_day)
    return candidate


def days_until(target: date, today: date) -> int:
    """Whole days from today until target (negative when already passed)."""
    return (target - today).days
