"""
Debt projections.

Pure functions over debt snapshots: estimate how far a stored balance has
been paid down since it was entered, and project a month-by-month payoff
schedule. Nothing here touches the database; callers pass ORM rows or any
object exposing the same attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from homeledger.insights.planner import (
    add_months,
    days_until,
    next_payment_date,
    payment_date_in_month,
)
from homeledger.utils.money import (
    CENTS,
    HUNDRED,
    ZERO,
    Number,
    monthly_rate,
    to_cents,
    to_decimal,
)

# Upper bound on schedule length regardless of what the caller asks for.
MAX_PROJECTION_MONTHS = 600

SORT_OPTIONS = ("balance", "apr", "promo_ending")


@dataclass(frozen=True)
class BalanceAdjustment:
    adjusted_balance: Decimal
    payments_made: int


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    date: date
    payment_amount: Decimal
    interest_amount: Decimal
    principal_amount: Decimal
    balance_after: Decimal


@dataclass(frozen=True)
class DebtOverview:
    """Display figures for one debt as of a given day."""

    recorded_balance: Decimal
    adjusted_balance: Decimal
    payments_made: int
    monthly_payment: Decimal
    paid_off: Decimal
    progress_percent: Decimal
    effective_apr: Decimal
    next_payment_date: Optional[date]
    months_remaining: Optional[int]
    payoff_status: str
    status: str


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def monthly_payment_for(debt: Any) -> Decimal:
    """Planned payment when set and positive, otherwise the minimum payment."""
    planned = to_decimal(debt.planned_payment)
    if planned > ZERO:
        return planned
    return to_decimal(debt.minimum_payment)


def adjust_balance(
    recorded_balance: Number,
    payment_day: Optional[int],
    monthly_payment: Number,
    created_at: Union[date, datetime],
    today: Optional[date] = None,
) -> BalanceAdjustment:
    """
    Subtract one monthly payment for every payment date passed since creation.

    A payment date counts when it falls after the creation day and on or
    before today. Payment days beyond a month's length fall on its last day.
    """
    balance = to_decimal(recorded_balance)
    payment = to_decimal(monthly_payment)
    if not payment_day or payment <= ZERO:
        return BalanceAdjustment(adjusted_balance=balance, payments_made=0)

    today = today or date.today()
    created = _as_date(created_at)
    month_start = date(created.year, created.month, 1)

    check = payment_date_in_month(created.year, created.month, payment_day)
    if check <= created:
        month_start = add_months(month_start, 1)
        check = payment_date_in_month(month_start.year, month_start.month, payment_day)

    payments_made = 0
    while check <= today:
        payments_made += 1
        month_start = add_months(month_start, 1)
        check = payment_date_in_month(month_start.year, month_start.month, payment_day)

    adjusted = max(ZERO, balance - payment * payments_made)
    return BalanceAdjustment(adjusted_balance=adjusted, payments_made=payments_made)


def project_amortization(
    starting_balance: Number,
    apr_percent: Number,
    monthly_payment: Number,
    start_date: date,
    max_months: int = MAX_PROJECTION_MONTHS,
    *,
    promo_until: Optional[date] = None,
) -> Iterator[AmortizationRow]:
    """
    Yield a level-payment payoff schedule with monthly compounding.

    The first row is dated start_date and each following row one month
    later. Rows dated before promo_until accrue no interest. The schedule
    ends on the row that clears the balance, or after max_months rows.
    """
    balance = to_cents(starting_balance)
    payment = to_cents(monthly_payment)
    if payment <= ZERO or balance <= ZERO:
        return

    rate = monthly_rate(apr_percent)
    for month in range(1, min(max_months, MAX_PROJECTION_MONTHS) + 1):
        row_date = add_months(start_date, month - 1)
        month_rate = ZERO if promo_until and row_date < promo_until else rate

        interest = (balance * month_rate).quantize(CENTS)
        payment_amount = min(payment, balance + interest)
        balance_after = max(ZERO, balance + interest - payment_amount)

        yield AmortizationRow(
            month=month,
            date=row_date,
            payment_amount=payment_amount,
            interest_amount=interest,
            principal_amount=payment_amount - interest,
            balance_after=balance_after,
        )

        balance = balance_after
        if balance == ZERO:
            return


def build_payoff_plan(
    current_balance: Number,
    monthly_payment: Number,
    apr_percentage: Number,
    start_date: date,
    max_months: int = MAX_PROJECTION_MONTHS,
    promo_until: Optional[date] = None,
) -> Dict[str, Any]:
    """Summarise a payoff schedule: months, totals, payoff date and status."""
    balance = to_cents(current_balance)
    payment = to_cents(monthly_payment)

    if balance <= ZERO:
        return {
            "months_to_payoff": 0,
            "total_interest": ZERO,
            "total_paid": ZERO,
            "payoff_date": start_date,
            "schedule": [],
            "status": "paid",
        }

    if payment <= ZERO:
        return {
            "months_to_payoff": None,
            "total_interest": None,
            "total_paid": None,
            "payoff_date": None,
            "schedule": [],
            "status": "no_payment",
        }

    if promo_until is None or start_date >= promo_until:
        interest_now = (balance * monthly_rate(apr_percentage)).quantize(CENTS)
        if interest_now > ZERO and payment <= interest_now:
            return {
                "months_to_payoff": None,
                "total_interest": None,
                "total_paid": None,
                "payoff_date": None,
                "schedule": [],
                "status": "payment_too_low",
            }

    schedule = list(
        project_amortization(
            balance,
            apr_percentage,
            payment,
            start_date,
            max_months,
            promo_until=promo_until,
        )
    )

    if not schedule or schedule[-1].balance_after > ZERO:
        return {
            "months_to_payoff": None,
            "total_interest": None,
            "total_paid": None,
            "payoff_date": None,
            "schedule": schedule,
            "status": "max_months_exceeded",
        }

    return {
        "months_to_payoff": len(schedule),
        "total_interest": sum((row.interest_amount for row in schedule), ZERO),
        "total_paid": sum((row.payment_amount for row in schedule), ZERO),
        "payoff_date": schedule[-1].date,
        "schedule": schedule,
        "status": "ok",
    }


def effective_apr(debt: Any, on: date) -> Decimal:
    """APR charged on a given day, honouring a 0% promotional period."""
    if debt.is_promo_0:
        if debt.promo_end_date is None or on < debt.promo_end_date:
            return ZERO
        if debt.post_promo_apr is not None:
            return to_decimal(debt.post_promo_apr)
    return to_decimal(debt.apr)


def project_debt(
    debt: Any,
    today: Optional[date] = None,
    max_months: int = 240,
) -> Dict[str, Any]:
    """
    Project a stored debt from today.

    The balance is first adjusted for payments assumed since the record was
    created; the schedule then starts at the next payment date after today.
    """
    today = today or date.today()
    payment = monthly_payment_for(debt)
    adjustment = adjust_balance(debt.balance, debt.payment_day, payment, debt.created_at, today)

    start_date = next_payment_date(debt.payment_day, today, include_today=False) or add_months(today, 1)

    promo_until = None
    apr = to_decimal(debt.apr)
    if debt.is_promo_0:
        if debt.promo_end_date is None:
            apr = ZERO
        else:
            promo_until = debt.promo_end_date
            if debt.post_promo_apr is not None:
                apr = to_decimal(debt.post_promo_apr)

    plan = build_payoff_plan(
        current_balance=adjustment.adjusted_balance,
        monthly_payment=payment,
        apr_percentage=apr,
        start_date=start_date,
        max_months=max_months,
        promo_until=promo_until,
    )
    return {
        "adjustment": adjustment,
        "monthly_payment": payment,
        "apr_percentage": apr,
        "promo_until": promo_until,
        "start_date": start_date,
        "plan": plan,
    }


def debt_overview(debt: Any, today: Optional[date] = None, max_months: int = 240) -> DebtOverview:
    """Adjusted balance, progress and payoff estimate for one debt."""
    today = today or date.today()
    projection = project_debt(debt, today, max_months)
    adjustment: BalanceAdjustment = projection["adjustment"]
    plan = projection["plan"]
    payment: Decimal = projection["monthly_payment"]

    recorded = to_decimal(debt.balance)
    starting = to_decimal(debt.starting_balance) or recorded
    paid_off = starting - adjustment.adjusted_balance
    if starting > ZERO:
        progress = min(HUNDRED, max(ZERO, paid_off / starting * HUNDRED)).quantize(Decimal("0.1"))
    else:
        progress = ZERO

    if adjustment.adjusted_balance <= ZERO:
        status = "paid_off"
    elif payment <= ZERO:
        status = "no_payment"
    else:
        status = "active"

    return DebtOverview(
        recorded_balance=recorded,
        adjusted_balance=adjustment.adjusted_balance,
        payments_made=adjustment.payments_made,
        monthly_payment=payment,
        paid_off=paid_off,
        progress_percent=progress,
        effective_apr=effective_apr(debt, today),
        next_payment_date=next_payment_date(debt.payment_day, today, include_today=False),
        months_remaining=plan["months_to_payoff"],
        payoff_status=plan["status"],
        status=status,
    )


def sort_debts(debts: Iterable[Any], sort_by: str = "balance", today: Optional[date] = None) -> List[Any]:
    """Order debts for display: by balance, by APR, or by promo ending soonest."""
    today = today or date.today()
    items = list(debts)

    if sort_by == "apr":
        return sorted(items, key=lambda d: ZERO if d.is_promo_0 else to_decimal(d.apr), reverse=True)
    if sort_by == "promo_ending":
        return sorted(
            items,
            key=lambda d: (
                d.promo_end_date is None,
                days_until(d.promo_end_date, today) if d.promo_end_date else 0,
            ),
        )
    return sorted(items, key=lambda d: to_decimal(d.balance), reverse=True)
