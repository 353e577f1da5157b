"""API routes for the dashboard: net position, runway, alerts and household."""

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from homeledger.api.schemas import (
    AlertsResponse,
    FinanceSummaryResponse,
    HouseholdResponse,
    RunwayResponse,
)
from homeledger.config import settings
from homeledger.db.models import Debt, ExpenseItem, IncomeSource, Renewal, SavingsAccount
from homeledger.db.session import get_db
from homeledger.insights.alerts import build_alerts
from homeledger.insights.summary import (
    FinanceSummary,
    build_finance_summary,
    calculate_runway,
    projected_annual_interest,
)

router = APIRouter()


def _load_summary(db: Session, today: date) -> FinanceSummary:
    return build_finance_summary(
        debts=db.query(Debt).all(),
        savings=db.query(SavingsAccount).all(),
        incomes=db.query(IncomeSource).all(),
        expenses=db.query(ExpenseItem).all(),
        today=today,
    )


@router.get("/summary", response_model=FinanceSummaryResponse)
def summary(db: Session = Depends(get_db)):
    """Totals, net position and monthly surplus."""
    result = _load_summary(db, date.today())
    return FinanceSummaryResponse(
        **asdict(result),
        projected_annual_interest=projected_annual_interest(db.query(SavingsAccount).all()),
    )


@router.get("/runway", response_model=RunwayResponse)
def runway(db: Session = Depends(get_db)):
    """Months the net position would cover a monthly shortfall."""
    result = calculate_runway(_load_summary(db, date.today()))
    return RunwayResponse(**asdict(result), in_surplus=result.months is None)


@router.get("/alerts", response_model=AlertsResponse)
def alerts(db: Session = Depends(get_db)):
    """Debt and renewal alerts sorted by severity."""
    items = build_alerts(
        db.query(Debt).all(),
        today=date.today(),
        high_apr_threshold=settings.high_apr_threshold,
        promo_window_days=settings.promo_alert_days,
        payment_due_window_days=settings.payment_due_alert_days,
        currency_symbol=settings.currency_symbol,
        renewals=db.query(Renewal).all(),
        renewal_window_days=settings.renewal_alert_days,
    )
    return AlertsResponse(alerts=items)


@router.get("/household", response_model=HouseholdResponse)
def household():
    """Configured household members."""
    return HouseholdResponse(members=[member.model_dump() for member in settings.household_members])
