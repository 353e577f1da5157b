"""
API Routes for savings accounts, deposits/withdrawals and interest projections.
"""

import logging
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from homeledger.config import settings
from homeledger.db.session import get_db
from homeledger.db.models import SavingsAccount, SavingsTransaction, SavingsTransactionType
from homeledger.api.schemas import (
    InterestStatementResponse,
    SavingsAccountCreate,
    SavingsAccountResponse,
    SavingsAccountUpdate,
    SavingsListResponse,
    SavingsProjectionResponse,
    SavingsTransactionCreate,
    SavingsTransactionResponse,
)
from homeledger.insights.savings import (
    build_interest_statement,
    project_savings_growth,
    projected_interest,
)
from homeledger.insights.summary import projected_annual_interest
from homeledger.utils.money import CENTS, monthly_rate

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_account_or_404(db: Session, account_id: int) -> SavingsAccount:
    account = db.query(SavingsAccount).filter(SavingsAccount.id == account_id).first()
    if not account:
        raise HTTPException(status_code=404, detail="Savings account not found")
    return account


def _account_to_response(account: SavingsAccount) -> SavingsAccountResponse:
    response = SavingsAccountResponse.model_validate(account)
    response.monthly_interest = (account.balance * monthly_rate(account.aer)).quantize(CENTS)
    response.projected_interest = projected_interest(account.balance, account.aer, 12)
    return response


@router.get("/", response_model=SavingsListResponse)
def list_accounts(db: Session = Depends(get_db)):
    """List savings accounts, largest balance first."""
    accounts = db.query(SavingsAccount).order_by(SavingsAccount.balance.desc()).all()
    return SavingsListResponse(
        accounts=[_account_to_response(a) for a in accounts],
        total=len(accounts),
        total_savings=sum((a.balance for a in accounts), Decimal("0")),
        estimated_annual_interest=projected_annual_interest(accounts).quantize(CENTS),
    )


@router.get("/interest-statement", response_model=InterestStatementResponse)
def interest_statement(db: Session = Depends(get_db)):
    """Monthly interest breakdown and UK savings tax estimate."""
    accounts = db.query(SavingsAccount).order_by(SavingsAccount.name).all()
    statement = build_interest_statement(
        accounts,
        today=date.today(),
        allowance=settings.savings_allowance,
        tax_rate=settings.savings_tax_rate,
        isa_cap=settings.isa_tax_free_cap,
        isa_keywords=settings.isa_name_keywords,
    )
    return InterestStatementResponse(**statement)


@router.post("/", response_model=SavingsAccountResponse, status_code=201)
def create_account(body: SavingsAccountCreate, db: Session = Depends(get_db)):
    """Create a savings account."""
    account = SavingsAccount(**body.model_dump())
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info(f"Created savings account {account.id} ({account.name})")
    return _account_to_response(account)


@router.get("/{account_id}", response_model=SavingsAccountResponse)
def get_account(account_id: int, db: Session = Depends(get_db)):
    """Get a single savings account."""
    return _account_to_response(_get_account_or_404(db, account_id))


@router.patch("/{account_id}", response_model=SavingsAccountResponse)
def update_account(account_id: int, body: SavingsAccountUpdate, db: Session = Depends(get_db)):
    """Update a savings account."""
    account = _get_account_or_404(db, account_id)
    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(account, field, value)
    account.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(account)
    logger.info(f"Updated savings account {account.id}: {sorted(changes)}")
    return _account_to_response(account)


@router.delete("/{account_id}")
def delete_account(account_id: int, db: Session = Depends(get_db)):
    """Delete a savings account and its transactions."""
    account = _get_account_or_404(db, account_id)
    db.delete(account)
    db.commit()
    logger.info(f"Deleted savings account {account_id}")
    return {"ok": True}


@router.get("/{account_id}/transactions", response_model=List[SavingsTransactionResponse])
def list_transactions(account_id: int, db: Session = Depends(get_db)):
    """Deposits and withdrawals for an account, newest first."""
    _get_account_or_404(db, account_id)
    return (
        db.query(SavingsTransaction)
        .filter(SavingsTransaction.savings_account_id == account_id)
        .order_by(SavingsTransaction.trans_on.desc(), SavingsTransaction.id.desc())
        .all()
    )


@router.post("/{account_id}/transactions", response_model=SavingsTransactionResponse, status_code=201)
def record_transaction(account_id: int, body: SavingsTransactionCreate, db: Session = Depends(get_db)):
    """Record a deposit or withdrawal and update the account balance."""
    account = _get_account_or_404(db, account_id)
    balance = Decimal(str(account.balance))

    if body.type == SavingsTransactionType.WITHDRAWAL:
        if body.amount > balance:
            logger.warning(f"Rejected withdrawal of {body.amount} from savings account {account.id} (balance {balance})")
            raise HTTPException(status_code=400, detail="Withdrawal exceeds account balance")
        account.balance = balance - body.amount
    else:
        account.balance = balance + body.amount

    transaction = SavingsTransaction(
        savings_account_id=account.id,
        trans_on=body.trans_on,
        amount=body.amount,
        type=body.type,
        note=body.note,
    )
    db.add(transaction)
    account.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(transaction)
    logger.info(f"Recorded {body.type.value} of {body.amount} on savings account {account.id}")
    return transaction


@router.get("/{account_id}/projection", response_model=SavingsProjectionResponse)
def account_projection(
    account_id: int,
    months: int = Query(12, ge=1, le=600),
    db: Session = Depends(get_db),
):
    """Month-by-month compounding projection for an account."""
    account = _get_account_or_404(db, account_id)
    rows = list(project_savings_growth(account.balance, account.aer, months))
    return SavingsProjectionResponse(
        account_id=account.id,
        starting_balance=account.balance,
        aer_percent=account.aer,
        months=months,
        total_interest=sum((row.interest_this_month for row in rows), Decimal("0")),
        final_balance=rows[-1].balance_after,
        rows=[asdict(row) for row in rows],
    )
