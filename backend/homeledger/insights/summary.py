"""Household totals: net position, monthly cashflow and funds runway."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from homeledger.insights.debts import BalanceAdjustment, adjust_balance, monthly_payment_for
from homeledger.insights.savings import simple_annual_interest
from homeledger.utils.money import ZERO, to_decimal

COUPLES_SHARE = Decimal("0.5")


@dataclass(frozen=True)
class FinanceSummary:
    total_debts: Decimal
    total_savings: Decimal
    net_position: Decimal
    monthly_incoming: Decimal
    permanent_income: Decimal
    temporary_income: Decimal
    monthly_expenses: Decimal
    monthly_debt_payments: Decimal
    monthly_outgoings: Decimal
    monthly_surplus: Decimal


@dataclass(frozen=True)
class Runway:
    months: Optional[int]
    net_position: Decimal
    monthly_net: Decimal
    total_income: Decimal


def monthly_expense_amount(expense: Any) -> Decimal:
    """Household share of an expense per month."""
    amount = to_decimal(expense.monthly_amount)
    if expense.couples_mode:
        amount *= COUPLES_SHARE
    if expense.frequency == "annual":
        amount /= 12
    return amount


def _debt_position(debt: Any, today: Optional[date]) -> Tuple[BalanceAdjustment, Decimal]:
    """Adjusted balance plus the payment still due on it; paid-off debts owe nothing."""
    payment = monthly_payment_for(debt)
    adjusted = adjust_balance(debt.balance, debt.payment_day, payment, debt.created_at, today)
    if adjusted.adjusted_balance <= ZERO:
        return adjusted, ZERO
    return adjusted, payment


def debt_payment_due(debt: Any, today: Optional[date] = None) -> Decimal:
    """Monthly payment for a debt that still has a balance; zero once paid off."""
    return _debt_position(debt, today)[1]


def build_finance_summary(
    debts: Iterable[Any],
    savings: Iterable[Any],
    incomes: Iterable[Any],
    expenses: Iterable[Any],
    today: Optional[date] = None,
) -> FinanceSummary:
    today = today or date.today()
    debts = list(debts)

    total_debts = ZERO
    debt_payments = ZERO
    for debt in debts:
        adjusted, due = _debt_position(debt, today)
        total_debts += adjusted.adjusted_balance
        debt_payments += due

    total_savings = sum((to_decimal(account.balance) for account in savings), ZERO)

    permanent = ZERO
    temporary = ZERO
    for income in incomes:
        if income.end_date:
            temporary += to_decimal(income.monthly_amount)
        else:
            permanent += to_decimal(income.monthly_amount)
    monthly_incoming = permanent + temporary

    monthly_expenses = sum((monthly_expense_amount(expense) for expense in expenses), ZERO)
    monthly_outgoings = monthly_expenses + debt_payments

    return FinanceSummary(
        total_debts=total_debts,
        total_savings=total_savings,
        net_position=total_savings - total_debts,
        monthly_incoming=monthly_incoming,
        permanent_income=permanent,
        temporary_income=temporary,
        monthly_expenses=monthly_expenses,
        monthly_debt_payments=debt_payments,
        monthly_outgoings=monthly_outgoings,
        monthly_surplus=monthly_incoming - monthly_outgoings,
    )


def calculate_runway(summary: FinanceSummary) -> Runway:
    """
    How many months the net position covers a monthly deficit.

    None means income covers outgoings; 0 means there is nothing to draw on.
    """
    monthly_net = summary.monthly_surplus
    if monthly_net >= ZERO:
        months = None
    elif summary.net_position <= ZERO:
        months = 0
    else:
        months = int((summary.net_position / abs(monthly_net)).to_integral_value(rounding=ROUND_FLOOR))

    return Runway(
        months=months,
        net_position=summary.net_position,
        monthly_net=monthly_net,
        total_income=summary.monthly_incoming,
    )


def projected_annual_interest(savings: Iterable[Any]) -> Decimal:
    """Simple interest on current savings balances over a year."""
    return sum((simple_annual_interest(account) for account in savings), ZERO)


def cashflow_breakdown(
    debts: Iterable[Any],
    incomes: Iterable[Any],
    expenses: Iterable[Any],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Monthly and annual expense totals alongside income and debt payments."""
    expenses = list(expenses)
    monthly_items: List[Any] = [e for e in expenses if e.frequency != "annual"]
    annual_items: List[Any] = [e for e in expenses if e.frequency == "annual"]

    monthly_total = sum((monthly_expense_amount(e) for e in monthly_items), ZERO)
    annual_as_monthly = sum((monthly_expense_amount(e) for e in annual_items), ZERO)
    debt_payments = sum((debt_payment_due(d, today) for d in debts), ZERO)
    income_total = sum((to_decimal(i.monthly_amount) for i in incomes), ZERO)
    outgoings = monthly_total + annual_as_monthly + debt_payments

    return {
        "total_income": income_total,
        "monthly_expenses": monthly_total,
        "annual_expenses_monthly": annual_as_monthly,
        "debt_payments": debt_payments,
        "total_outgoings": outgoings,
        "surplus": income_total - outgoings,
    }
