"""Savings growth projections and the interest statement."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from homeledger.insights.planner import add_months
from homeledger.utils.money import CENTS, HUNDRED, ZERO, Number, monthly_rate, to_cents, to_decimal


@dataclass(frozen=True)
class SavingsProjectionRow:
    month_index: int
    balance_after: Decimal
    interest_this_month: Decimal


def project_savings_growth(
    starting_balance: Number,
    aer_percent: Number,
    months: int = 12,
) -> Iterator[SavingsProjectionRow]:
    """Yield the balance after each month of compounding at AER / 12."""
    balance = to_cents(starting_balance)
    rate = monthly_rate(aer_percent)

    for month_index in range(1, months + 1):
        interest = (balance * rate).quantize(CENTS)
        balance += interest
        yield SavingsProjectionRow(
            month_index=month_index,
            balance_after=balance,
            interest_this_month=interest,
        )


def projected_interest(balance: Number, aer_percent: Number, months: int = 12) -> Decimal:
    """Total compounded interest earned over the projection."""
    return sum(
        (row.interest_this_month for row in project_savings_growth(balance, aer_percent, months)),
        ZERO,
    )


def simple_annual_interest(account: Any) -> Decimal:
    return to_decimal(account.balance) * to_decimal(account.aer) / HUNDRED


def is_tax_free_isa(account: Any, keywords: Sequence[str]) -> bool:
    """An account counts as a tax-free ISA when its name contains every keyword."""
    name = (account.name or "").lower()
    return bool(keywords) and all(keyword.lower() in name for keyword in keywords)


def build_interest_statement(
    accounts: Iterable[Any],
    today: Optional[date] = None,
    allowance: Number = Decimal("1000"),
    tax_rate: Number = Decimal("0.20"),
    isa_cap: Number = Decimal("20000"),
    isa_keywords: Sequence[str] = ("isa",),
) -> Dict[str, Any]:
    """
    Monthly interest breakdown (one month back, twelve ahead) plus a UK tax summary.

    Monthly figures are simple interest on today's balances; the tax summary
    compares taxable interest with the personal savings allowance.
    """
    today = today or date.today()
    accounts = list(accounts)
    allowance = to_decimal(allowance)
    isa_cap = to_decimal(isa_cap)

    breakdown = [
        {
            "account_id": getattr(account, "id", None),
            "account": account.name,
            "interest": (to_decimal(account.balance) * monthly_rate(account.aer)).quantize(CENTS),
        }
        for account in accounts
    ]
    month_total = sum((item["interest"] for item in breakdown), ZERO)

    months: List[Dict[str, Any]] = []
    for offset in range(-1, 13):
        month = add_months(today, offset)
        months.append(
            {
                "month": month,
                "interest": month_total,
                "is_past": month < today,
                "breakdown": breakdown,
            }
        )

    total_annual = sum((simple_annual_interest(account) for account in accounts), ZERO)
    tax_free = sum(
        (
            min(to_decimal(account.balance), isa_cap) * to_decimal(account.aer) / HUNDRED
            for account in accounts
            if is_tax_free_isa(account, isa_keywords)
        ),
        ZERO,
    )
    taxable = max(ZERO, total_annual - tax_free)
    over_allowance = taxable - allowance
    taxable_amount = max(ZERO, over_allowance)

    return {
        "months": months,
        "total_annual_interest": total_annual.quantize(CENTS),
        "tax_free_interest": tax_free.quantize(CENTS),
        "taxable_interest": taxable.quantize(CENTS),
        "allowance": allowance,
        "over_allowance": over_allowance.quantize(CENTS),
        "taxable_amount": taxable_amount.quantize(CENTS),
        "estimated_tax": (taxable_amount * to_decimal(tax_rate)).quantize(CENTS),
    }
