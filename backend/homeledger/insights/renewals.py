"""
Renewals (contracts with an agreement end date).

Days left on each agreement, urgency bands, cost totals and list ordering.
Like the other insights modules this works on any object exposing the
Renewal attributes and never touches the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from homeledger.insights.planner import days_until
from homeledger.utils.money import ZERO, to_decimal

RENEWAL_SORT_OPTIONS = ("expiry", "value", "name")
ENDING_SOON_DAYS = 30
URGENT_DAYS = 7


@dataclass(frozen=True)
class ExpiryStatus:
    days_until_end: int
    level: str  # expired | urgent | soon | ok
    label: str


def days_until_end(renewal: Any, today: Optional[date] = None) -> Optional[int]:
    if renewal.agreement_end is None:
        return None
    return days_until(renewal.agreement_end, today or date.today())


def expiry_status(renewal: Any, today: Optional[date] = None) -> Optional[ExpiryStatus]:
    """Urgency band for an agreement; None when it has no end date."""
    days = days_until_end(renewal, today)
    if days is None:
        return None
    if days < 0:
        return ExpiryStatus(days_until_end=days, level="expired", label="Expired")
    if days <= URGENT_DAYS:
        level = "urgent"
    elif days <= ENDING_SOON_DAYS:
        level = "soon"
    else:
        level = "ok"
    return ExpiryStatus(days_until_end=days, level=level, label=f"{days}d")


def is_ending_soon(renewal: Any, today: Optional[date] = None, window_days: int = ENDING_SOON_DAYS) -> bool:
    days = days_until_end(renewal, today)
    return days is not None and 0 <= days <= window_days


def renewal_people(renewals: Iterable[Any]) -> List[str]:
    """Distinct people/addresses the renewals are held for, alphabetically."""
    return sorted({r.person_or_address for r in renewals if r.person_or_address})


def filter_by_person(renewals: Iterable[Any], person: Optional[str]) -> List[Any]:
    items = list(renewals)
    if not person:
        return items
    return [r for r in items if r.person_or_address == person]


def sort_renewals(renewals: Iterable[Any], sort_by: str = "expiry") -> List[Any]:
    """Order by soonest end date (undated last), by total cost, or by name."""
    items = list(renewals)
    if sort_by == "value":
        return sorted(items, key=lambda r: to_decimal(r.total_cost), reverse=True)
    if sort_by == "name":
        return sorted(items, key=lambda r: r.name.lower())
    return sorted(items, key=lambda r: (r.agreement_end is None, r.agreement_end or date.min))


def renewal_totals(
    renewals: Iterable[Any],
    today: Optional[date] = None,
    window_days: int = ENDING_SOON_DAYS,
) -> Dict[str, Any]:
    """Annual and monthly cost totals plus the number ending within the window."""
    items = list(renewals)
    return {
        "annual_total": sum((to_decimal(r.total_cost) for r in items), ZERO),
        "monthly_total": sum((to_decimal(r.monthly_amount) for r in items), ZERO),
        "ending_soon": sum(1 for r in items if is_ending_soon(r, today, window_days)),
    }


def expense_fields_for(renewal: Any) -> Dict[str, Any]:
    """
    Expense item fields for a renewal added to the household outgoings.

    A monthly amount is carried over as-is; a contract paid only as a lump
    sum becomes an annual expense of its total cost.
    """
    monthly = to_decimal(renewal.monthly_amount)
    if monthly > ZERO:
        amount: Decimal = monthly
        frequency = "monthly"
    else:
        amount = to_decimal(renewal.total_cost)
        frequency = "annual"
    return {
        "name": renewal.name,
        "provider": renewal.provider,
        "monthly_amount": amount,
        "frequency": frequency,
    }
