"""
API Routes for income sources, expenses and the monthly cashflow breakdown.
"""

import logging
from datetime import date, datetime
from typing import List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from homeledger.db.session import get_db
from homeledger.db.models import Debt, ExpenseItem, IncomeSource, Renewal
from homeledger.api.schemas import (
    CashflowResponse,
    ExpenseItemCreate,
    ExpenseItemResponse,
    ExpenseItemUpdate,
    IncomeSourceCreate,
    IncomeSourceResponse,
    IncomeSourceUpdate,
)
from homeledger.insights.summary import cashflow_breakdown, monthly_expense_amount

logger = logging.getLogger(__name__)

router = APIRouter()


def _expense_to_response(expense: ExpenseItem) -> ExpenseItemResponse:
    response = ExpenseItemResponse.model_validate(expense)
    response.monthly_equivalent = monthly_expense_amount(expense)
    return response


def _sort_expenses(expenses: List[ExpenseItem], sort: str) -> List[ExpenseItem]:
    if sort == "name":
        return sorted(expenses, key=lambda e: e.name.lower())
    return sorted(expenses, key=lambda e: e.monthly_amount, reverse=True)


@router.get("/", response_model=CashflowResponse)
def cashflow(
    sort: Literal["value", "name"] = Query("value"),
    db: Session = Depends(get_db),
):
    """Income against expenses and debt payments for a typical month."""
    incomes = db.query(IncomeSource).order_by(IncomeSource.monthly_amount.desc()).all()
    expenses = _sort_expenses(db.query(ExpenseItem).all(), sort)
    debts = db.query(Debt).all()

    totals = cashflow_breakdown(debts, incomes, expenses, date.today())
    return CashflowResponse(
        **totals,
        incomes=[IncomeSourceResponse.model_validate(i) for i in incomes],
        expenses=[_expense_to_response(e) for e in expenses],
    )


# --- Income ---


@router.get("/income", response_model=List[IncomeSourceResponse])
def list_income(db: Session = Depends(get_db)):
    """List income sources, largest first."""
    return db.query(IncomeSource).order_by(IncomeSource.monthly_amount.desc()).all()


@router.post("/income", response_model=IncomeSourceResponse, status_code=201)
def create_income(body: IncomeSourceCreate, db: Session = Depends(get_db)):
    """Add an income source."""
    income = IncomeSource(**body.model_dump())
    db.add(income)
    db.commit()
    db.refresh(income)
    logger.info(f"Created income source {income.id} ({income.name})")
    return income


@router.patch("/income/{income_id}", response_model=IncomeSourceResponse)
def update_income(income_id: int, body: IncomeSourceUpdate, db: Session = Depends(get_db)):
    """Update an income source."""
    income = db.query(IncomeSource).filter(IncomeSource.id == income_id).first()
    if not income:
        raise HTTPException(status_code=404, detail="Income source not found")

    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(income, field, value)
    income.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(income)
    logger.info(f"Updated income source {income.id}: {sorted(changes)}")
    return income


@router.delete("/income/{income_id}")
def delete_income(income_id: int, db: Session = Depends(get_db)):
    """Delete an income source."""
    income = db.query(IncomeSource).filter(IncomeSource.id == income_id).first()
    if not income:
        raise HTTPException(status_code=404, detail="Income source not found")
    db.delete(income)
    db.commit()
    logger.info(f"Deleted income source {income_id}")
    return {"ok": True}


# --- Expenses ---


@router.get("/expenses", response_model=List[ExpenseItemResponse])
def list_expenses(
    sort: Literal["value", "name"] = Query("value"),
    db: Session = Depends(get_db),
):
    """List expenses with their monthly household share."""
    return [_expense_to_response(e) for e in _sort_expenses(db.query(ExpenseItem).all(), sort)]


@router.post("/expenses", response_model=ExpenseItemResponse, status_code=201)
def create_expense(body: ExpenseItemCreate, db: Session = Depends(get_db)):
    """Add an expense."""
    expense = ExpenseItem(**body.model_dump())
    db.add(expense)
    db.commit()
    db.refresh(expense)
    logger.info(f"Created expense {expense.id} ({expense.name}, {expense.frequency})")
    return _expense_to_response(expense)


@router.patch("/expenses/{expense_id}", response_model=ExpenseItemResponse)
def update_expense(expense_id: int, body: ExpenseItemUpdate, db: Session = Depends(get_db)):
    """Update an expense."""
    expense = db.query(ExpenseItem).filter(ExpenseItem.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")

    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(expense, field, value)
    expense.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(expense)
    logger.info(f"Updated expense {expense.id}: {sorted(changes)}")
    return _expense_to_response(expense)


@router.delete("/expenses/{expense_id}")
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    """Delete an expense."""
    expense = db.query(ExpenseItem).filter(ExpenseItem.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    db.query(Renewal).filter(Renewal.linked_expense_id == expense_id).update(
        {Renewal.linked_expense_id: None}, synchronize_session=False
    )
    db.delete(expense)
    db.commit()
    logger.info(f"Deleted expense {expense_id}")
    return {"ok": True}
