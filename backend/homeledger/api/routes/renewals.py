"""
API Routes for renewals (contracts with an end date) and linking them into expenses.
"""

import logging
from datetime import date, datetime
from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from homeledger.config import settings
from homeledger.db.session import get_db
from homeledger.db.models import ExpenseCategory, ExpenseItem, Renewal
from homeledger.api.schemas import (
    ExpenseItemResponse,
    ExpiryStatusSchema,
    RenewalCreate,
    RenewalListResponse,
    RenewalResponse,
    RenewalUpdate,
)
from homeledger.insights.renewals import (
    expense_fields_for,
    expiry_status,
    filter_by_person,
    renewal_people,
    renewal_totals,
    sort_renewals,
)
from homeledger.insights.summary import monthly_expense_amount

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_renewal_or_404(db: Session, renewal_id: int) -> Renewal:
    renewal = db.query(Renewal).filter(Renewal.id == renewal_id).first()
    if not renewal:
        raise HTTPException(status_code=404, detail="Renewal not found")
    return renewal


def _renewal_to_response(renewal: Renewal, today: date) -> RenewalResponse:
    response = RenewalResponse.model_validate(renewal)
    status = expiry_status(renewal, today)
    response.expiry = ExpiryStatusSchema.model_validate(status) if status else None
    return response


@router.get("/", response_model=RenewalListResponse)
def list_renewals(
    sort: Literal["expiry", "value", "name"] = Query("expiry"),
    person: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List renewals with cost totals; optionally only those for one person/address."""
    today = date.today()
    all_renewals = db.query(Renewal).all()
    renewals = sort_renewals(filter_by_person(all_renewals, person), sort)
    totals = renewal_totals(renewals, today, settings.renewal_alert_days)

    return RenewalListResponse(
        renewals=[_renewal_to_response(r, today) for r in renewals],
        total=len(renewals),
        people=renewal_people(all_renewals),
        **totals,
    )


@router.post("/", response_model=RenewalResponse, status_code=201)
def create_renewal(body: RenewalCreate, db: Session = Depends(get_db)):
    """Add a renewal."""
    renewal = Renewal(**body.model_dump())
    db.add(renewal)
    db.commit()
    db.refresh(renewal)
    logger.info(f"Created renewal {renewal.id} ({renewal.name})")
    return _renewal_to_response(renewal, date.today())


@router.get("/{renewal_id}", response_model=RenewalResponse)
def get_renewal(renewal_id: int, db: Session = Depends(get_db)):
    """Get a single renewal."""
    return _renewal_to_response(_get_renewal_or_404(db, renewal_id), date.today())


@router.patch("/{renewal_id}", response_model=RenewalResponse)
def update_renewal(renewal_id: int, body: RenewalUpdate, db: Session = Depends(get_db)):
    """Update a renewal."""
    renewal = _get_renewal_or_404(db, renewal_id)
    changes = body.model_dump(exclude_unset=True)

    start = changes.get("agreement_start", renewal.agreement_start)
    end = changes.get("agreement_end", renewal.agreement_end)
    if start and end and end < start:
        logger.warning(f"Rejected update to renewal {renewal.id}: agreement end {end} before start {start}")
        raise HTTPException(status_code=400, detail="Agreement end date cannot be before agreement start date")

    for field, value in changes.items():
        setattr(renewal, field, value)
    renewal.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(renewal)
    logger.info(f"Updated renewal {renewal.id}: {sorted(changes)}")
    return _renewal_to_response(renewal, date.today())


@router.delete("/{renewal_id}")
def delete_renewal(renewal_id: int, db: Session = Depends(get_db)):
    """Delete a renewal. A linked expense is kept."""
    renewal = _get_renewal_or_404(db, renewal_id)
    db.delete(renewal)
    db.commit()
    logger.info(f"Deleted renewal {renewal_id}")
    return {"ok": True}


@router.post("/{renewal_id}/add-to-expenses", response_model=ExpenseItemResponse, status_code=201)
def add_to_expenses(renewal_id: int, db: Session = Depends(get_db)):
    """Create a subscriptions expense from a renewal and link the two."""
    renewal = _get_renewal_or_404(db, renewal_id)
    if renewal.linked_expense_id is not None:
        logger.warning(f"Renewal {renewal.id} is already linked to expense {renewal.linked_expense_id}")
        raise HTTPException(status_code=400, detail="Renewal already added to expenses")

    expense = ExpenseItem(category=ExpenseCategory.SUBSCRIPTIONS, **expense_fields_for(renewal))
    db.add(expense)
    db.flush()

    renewal.linked_expense_id = expense.id
    renewal.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(expense)
    logger.info(f"Added renewal {renewal.id} to expenses as expense {expense.id}")

    response = ExpenseItemResponse.model_validate(expense)
    response.monthly_equivalent = monthly_expense_amount(expense)
    return response
