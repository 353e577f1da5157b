"""
Dashboard alert rules.

Produces the dashboard alerts: payments due this month and over the next
three months, 0% promotions about to end, payments due soon, high APR
debts and renewals whose agreement ends soon. Alerts are sorted by
severity (danger, warning, info).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from homeledger.insights.planner import add_months, days_until, next_payment_date
from homeledger.insights.renewals import ENDING_SOON_DAYS, URGENT_DAYS, days_until_end
from homeledger.insights.summary import debt_payment_due
from homeledger.utils.money import ZERO, format_amount, to_decimal

SEVERITY_ORDER = {"danger": 0, "warning": 1, "info": 2}


def build_alerts(
    debts: Iterable[Any],
    today: Optional[date] = None,
    high_apr_threshold: Decimal = Decimal("20"),
    promo_window_days: int = 90,
    payment_due_window_days: int = 14,
    currency_symbol: str = "£",
    renewals: Iterable[Any] = (),
    renewal_window_days: int = ENDING_SOON_DAYS,
) -> List[Dict[str, Any]]:
    """
    Alerts for the given debts and renewals as of today.

    Monthly payment totals skip paid-off debts. Promo and payment-due alerts
    fire when the date is 0 to N days away; renewals within URGENT_DAYS of
    their end date are danger, otherwise warning.
    """
    today = today or date.today()
    debts = list(debts)
    alerts: List[Dict[str, Any]] = []

    this_month_total = sum((debt_payment_due(d, today) for d in debts), ZERO)
    if this_month_total > ZERO:
        alerts.append(
            {
                "id": "monthly-payments",
                "type": "monthly_payments",
                "title": "Debt Payments This Month",
                "description": f"Total due: {format_amount(this_month_total, currency_symbol)}",
                "severity": "info",
                "debt_id": None,
            }
        )

        # Same total each month; payoffs inside the window are not modelled.
        month_start = date(today.year, today.month, 1)
        upcoming = [
            f"{add_months(month_start, i).strftime('%b')}: {format_amount(this_month_total, currency_symbol, places=0)}"
            for i in range(1, 4)
        ]
        alerts.append(
            {
                "id": "upcoming-payments",
                "type": "upcoming_payments",
                "title": "Next 3 Months",
                "description": ", ".join(upcoming),
                "severity": "info",
                "debt_id": None,
            }
        )

    for debt in debts:
        if debt.is_promo_0 and debt.promo_end_date:
            days_left = days_until(debt.promo_end_date, today)
            if 0 <= days_left <= promo_window_days:
                alerts.append(
                    {
                        "id": f"promo-{debt.id}",
                        "type": "promo_ending",
                        "title": "0% Period Ending Soon",
                        "description": f"{debt.name}: {days_left} days remaining",
                        "severity": "danger" if days_left <= 30 else "warning",
                        "debt_id": debt.id,
                    }
                )

        due = next_payment_date(debt.payment_day, today)
        if due:
            days_left = days_until(due, today)
            if 0 <= days_left <= payment_due_window_days:
                alerts.append(
                    {
                        "id": f"payment-{debt.id}",
                        "type": "payment_due",
                        "title": "Payment Due Soon",
                        "description": f"{debt.name}: Due in {days_left} days",
                        "severity": "danger" if days_left <= 3 else "info",
                        "debt_id": debt.id,
                    }
                )

        apr = to_decimal(debt.apr)
        if not debt.is_promo_0 and apr >= to_decimal(high_apr_threshold):
            alerts.append(
                {
                    "id": f"apr-{debt.id}",
                    "type": "high_apr",
                    "title": "High Interest Rate",
                    "description": f"{debt.name}: {apr.normalize():f}% APR",
                    "severity": "warning",
                    "debt_id": debt.id,
                }
            )

    for renewal in renewals:
        days_left = days_until_end(renewal, today)
        if days_left is not None and 0 <= days_left <= renewal_window_days:
            alerts.append(
                {
                    "id": f"renewal-{renewal.id}",
                    "type": "renewal_ending",
                    "title": "Renewal Due Soon",
                    "description": f"{renewal.name}: ends in {days_left} days",
                    "severity": "danger" if days_left <= URGENT_DAYS else "warning",
                    "debt_id": None,
                    "renewal_id": renewal.id,
                }
            )

    alerts.sort(key=lambda a: SEVERITY_ORDER.get(a["severity"], 9))
    return alerts
