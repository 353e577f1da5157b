"""API routes for ad-hoc what-if projections (payoff and savings growth)."""

from dataclasses import asdict
from datetime import date
from decimal import Decimal

from fastapi import APIRouter

from homeledger.api.schemas import (
    PayoffPlanRequest,
    PayoffPlanResponse,
    SavingsGrowthRequest,
    SavingsProjectionResponse,
)
from homeledger.insights.debts import build_payoff_plan
from homeledger.insights.savings import project_savings_growth

router = APIRouter()


@router.post("/payoff-plan", response_model=PayoffPlanResponse)
def payoff_plan(payload: PayoffPlanRequest):
    """Compute a payoff plan for an arbitrary balance, APR and payment."""
    result = build_payoff_plan(
        current_balance=payload.current_balance,
        monthly_payment=payload.monthly_payment,
        apr_percentage=payload.apr_percentage,
        start_date=payload.start_date or date.today(),
        max_months=payload.max_months,
        promo_until=payload.promo_until,
    )

    return PayoffPlanResponse(
        current_balance=payload.current_balance,
        monthly_payment=payload.monthly_payment,
        apr_percentage=payload.apr_percentage,
        months_to_payoff=result["months_to_payoff"],
        total_interest=result["total_interest"],
        total_paid=result["total_paid"],
        payoff_date=result["payoff_date"],
        schedule=[asdict(row) for row in result["schedule"]],
        status=result["status"],
    )


@router.post("/savings-growth", response_model=SavingsProjectionResponse)
def savings_growth(payload: SavingsGrowthRequest):
    """Project compounding growth for an arbitrary balance and AER."""
    rows = list(project_savings_growth(payload.starting_balance, payload.aer_percent, payload.months))
    return SavingsProjectionResponse(
        starting_balance=payload.starting_balance,
        aer_percent=payload.aer_percent,
        months=payload.months,
        total_interest=sum((row.interest_this_month for row in rows), Decimal("0")),
        final_balance=rows[-1].balance_after,
        rows=[asdict(row) for row in rows],
    )
