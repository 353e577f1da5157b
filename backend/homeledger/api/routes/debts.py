"""
API Routes for debts, recorded payments and payoff projections.
"""

import logging
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from homeledger.config import settings
from homeledger.db.session import get_db
from homeledger.db.models import Debt, DebtPayment
from homeledger.api.schemas import (
    DebtCreate,
    DebtListResponse,
    DebtOverviewSchema,
    DebtPaymentCreate,
    DebtPaymentResponse,
    DebtProjectionResponse,
    DebtResponse,
    DebtUpdate,
)
from homeledger.insights.debts import debt_overview, monthly_payment_for, project_debt, sort_debts

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_debt_or_404(db: Session, debt_id: int) -> Debt:
    debt = db.query(Debt).filter(Debt.id == debt_id).first()
    if not debt:
        raise HTTPException(status_code=404, detail="Debt not found")
    return debt


def _debt_to_response(debt: Debt, today: date) -> DebtResponse:
    response = DebtResponse.model_validate(debt)
    response.overview = DebtOverviewSchema.model_validate(
        debt_overview(debt, today, settings.projection_months)
    )
    return response


@router.get("/", response_model=DebtListResponse)
def list_debts(
    sort: Literal["balance", "apr", "promo_ending"] = Query("balance"),
    db: Session = Depends(get_db),
):
    """List debts with adjusted balances and payoff estimates."""
    today = date.today()
    debts = sort_debts(db.query(Debt).all(), sort, today)
    items = [_debt_to_response(d, today) for d in debts]

    total_debt = sum((item.overview.adjusted_balance for item in items), Decimal("0"))
    total_minimums = sum((d.minimum_payment or Decimal("0") for d in debts), Decimal("0"))
    total_planned = sum((monthly_payment_for(d) for d in debts), Decimal("0"))

    return DebtListResponse(
        debts=items,
        total=len(items),
        total_debt=total_debt,
        total_minimums=total_minimums,
        total_planned=total_planned,
    )


@router.post("/", response_model=DebtResponse, status_code=201)
def create_debt(body: DebtCreate, db: Session = Depends(get_db)):
    """Create a debt."""
    data = body.model_dump(exclude_none=True)
    debt = Debt(**data)
    db.add(debt)
    db.commit()
    db.refresh(debt)
    logger.info(f"Created debt {debt.id} ({debt.name})")
    return _debt_to_response(debt, date.today())


@router.get("/{debt_id}", response_model=DebtResponse)
def get_debt(debt_id: int, db: Session = Depends(get_db)):
    """Get a single debt."""
    return _debt_to_response(_get_debt_or_404(db, debt_id), date.today())


@router.patch("/{debt_id}", response_model=DebtResponse)
def update_debt(debt_id: int, body: DebtUpdate, db: Session = Depends(get_db)):
    """Update a debt's fields."""
    debt = _get_debt_or_404(db, debt_id)
    changes = body.model_dump(exclude_unset=True)

    start = changes.get("promo_start_date", debt.promo_start_date)
    end = changes.get("promo_end_date", debt.promo_end_date)
    if start and end and end < start:
        logger.warning(f"Rejected update to debt {debt.id}: promo end {end} before start {start}")
        raise HTTPException(status_code=400, detail="Promo end date cannot be before promo start date")

    for field, value in changes.items():
        setattr(debt, field, value)
    debt.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(debt)
    logger.info(f"Updated debt {debt.id}: {sorted(changes)}")
    return _debt_to_response(debt, date.today())


@router.delete("/{debt_id}")
def delete_debt(debt_id: int, db: Session = Depends(get_db)):
    """Delete a debt and its payment history."""
    debt = _get_debt_or_404(db, debt_id)
    db.delete(debt)
    db.commit()
    logger.info(f"Deleted debt {debt_id}")
    return {"ok": True}


@router.get("/{debt_id}/payments", response_model=List[DebtPaymentResponse])
def list_payments(debt_id: int, db: Session = Depends(get_db)):
    """Payment history for a debt, newest first."""
    _get_debt_or_404(db, debt_id)
    return (
        db.query(DebtPayment)
        .filter(DebtPayment.debt_id == debt_id)
        .order_by(DebtPayment.paid_on.desc(), DebtPayment.id.desc())
        .all()
    )


@router.post("/{debt_id}/payments", response_model=DebtPaymentResponse, status_code=201)
def record_payment(debt_id: int, body: DebtPaymentCreate, db: Session = Depends(get_db)):
    """Record a payment and reduce the debt's balance (never below zero)."""
    debt = _get_debt_or_404(db, debt_id)

    payment = DebtPayment(debt_id=debt.id, paid_on=body.paid_on, amount=body.amount, note=body.note)
    db.add(payment)

    debt.balance = max(Decimal("0"), Decimal(str(debt.balance)) - body.amount)
    debt.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(payment)
    logger.info(f"Recorded payment of {body.amount} on debt {debt.id}; balance now {debt.balance}")
    return payment


@router.get("/{debt_id}/projection", response_model=DebtProjectionResponse)
def debt_projection(
    debt_id: int,
    months: Optional[int] = Query(None, ge=1, le=600),
    db: Session = Depends(get_db),
):
    """Payoff schedule from today, starting at the balance adjusted for assumed payments."""
    debt = _get_debt_or_404(db, debt_id)
    projection = project_debt(debt, date.today(), months or settings.projection_months)
    plan = projection["plan"]
    adjustment = projection["adjustment"]

    return DebtProjectionResponse(
        debt_id=debt.id,
        recorded_balance=debt.balance,
        payments_made=adjustment.payments_made,
        current_balance=adjustment.adjusted_balance,
        monthly_payment=projection["monthly_payment"],
        apr_percentage=projection["apr_percentage"],
        start_date=projection["start_date"],
        promo_until=projection["promo_until"],
        months_to_payoff=plan["months_to_payoff"],
        total_interest=plan["total_interest"],
        total_paid=plan["total_paid"],
        payoff_date=plan["payoff_date"],
        schedule=[asdict(row) for row in plan["schedule"]],
        status=plan["status"],
    )
