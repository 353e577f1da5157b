"""SQLAlchemy database models."""

import enum
from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Enum,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship, DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class DebtType(str, enum.Enum):
    """Kind of borrowing."""

    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    OVERDRAFT = "overdraft"
    BNPL = "bnpl"
    MORTGAGE = "mortgage"
    CAR_FINANCE = "car_finance"
    STUDENT_LOAN = "student_loan"
    OTHER = "other"


class SavingsTransactionType(str, enum.Enum):
    """Direction of a savings movement."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class ExpenseFrequency(str, enum.Enum):
    """How often an expense amount is charged."""

    MONTHLY = "monthly"
    ANNUAL = "annual"


class ExpenseCategory(str, enum.Enum):
    HOUSING = "housing"
    UTILITIES = "utilities"
    GROCERIES = "groceries"
    TRANSPORT = "transport"
    INSURANCE = "insurance"
    SUBSCRIPTIONS = "subscriptions"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    OTHER = "other"


class Debt(Base):
    """A debt being paid down (card, loan, overdraft...)."""

    __tablename__ = "debts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    type = Column(Enum(DebtType), default=DebtType.OTHER, nullable=False)
    lender = Column(String(255))

    # Balances
    starting_balance = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False, default=0)

    # Interest
    apr = Column(Numeric(5, 2), nullable=False, default=0)  # percent
    is_promo_0 = Column(Boolean, default=False, nullable=False)
    promo_start_date = Column(Date)
    promo_end_date = Column(Date)
    post_promo_apr = Column(Numeric(5, 2))

    # Payments
    payment_day = Column(Integer)  # 1-31
    minimum_payment = Column(Numeric(12, 2), nullable=False, default=0)
    planned_payment = Column(Numeric(12, 2))

    notes = Column(Text)

    # Audit
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    payments = relationship("DebtPayment", back_populates="debt", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_debts_balance_non_negative"),
        CheckConstraint(
            "payment_day IS NULL OR (payment_day >= 1 AND payment_day <= 31)",
            name="ck_debts_payment_day_range",
        ),
    )

    def __repr__(self):
        return f"<Debt {self.id}: {self.name} {self.balance}>"


class DebtPayment(Base):
    """A payment recorded against a debt."""

    __tablename__ = "debt_payments"

    id = Column(Integer, primary_key=True, index=True)
    debt_id = Column(Integer, ForeignKey("debts.id"), nullable=False)
    paid_on = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    note = Column(String(500))
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    debt = relationship("Debt", back_populates="payments")

    __table_args__ = (Index("ix_debt_payments_debt_paid_on", "debt_id", "paid_on"),)

    def __repr__(self):
        return f"<DebtPayment {self.id}: {self.paid_on} {self.amount}>"


class SavingsAccount(Base):
    """A savings pot earning interest at an AER."""

    __tablename__ = "savings_accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    provider = Column(String(255))
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    aer = Column(Numeric(5, 2), nullable=False, default=0)  # percent
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    transactions = relationship(
        "SavingsTransaction", back_populates="account", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_savings_balance_non_negative"),
        CheckConstraint("aer >= 0", name="ck_savings_aer_non_negative"),
    )

    def __repr__(self):
        return f"<SavingsAccount {self.id}: {self.name} {self.balance}>"


class SavingsTransaction(Base):
    """Deposit into or withdrawal from a savings account."""

    __tablename__ = "savings_transactions"

    id = Column(Integer, primary_key=True, index=True)
    savings_account_id = Column(Integer, ForeignKey("savings_accounts.id"), nullable=False)
    trans_on = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(Enum(SavingsTransactionType), nullable=False)
    note = Column(String(500))
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    account = relationship("SavingsAccount", back_populates="transactions")

    def __repr__(self):
        return f"<SavingsTransaction {self.id}: {self.type.value} {self.amount}>"


class IncomeSource(Base):
    """Recurring monthly income; an end date marks it as temporary."""

    __tablename__ = "income_sources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    monthly_amount = Column(Numeric(12, 2), nullable=False, default=0)
    start_date = Column(Date)
    end_date = Column(Date)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<IncomeSource {self.id}: {self.name} {self.monthly_amount}>"


class ExpenseItem(Base):
    """Household outgoing, stored as entered (monthly or annual amount)."""

    __tablename__ = "expense_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    monthly_amount = Column(Numeric(12, 2), nullable=False, default=0)
    category = Column(Enum(ExpenseCategory), default=ExpenseCategory.OTHER)
    frequency = Column(String(10), default=ExpenseFrequency.MONTHLY.value, nullable=False)
    couples_mode = Column(Boolean, default=False, nullable=False)  # household pays half
    provider = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (Index("ix_expense_items_category", "category"),)

    def __repr__(self):
        return f"<ExpenseItem {self.id}: {self.name} {self.monthly_amount}/{self.frequency}>"


class Renewal(Base):
    """A contract or policy with an agreement end date (insurance, broadband...)."""

    __tablename__ = "renewals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    provider = Column(String(255))
    total_cost = Column(Numeric(12, 2), nullable=False, default=0)
    monthly_amount = Column(Numeric(12, 2), nullable=False, default=0)
    is_monthly_payment = Column(Boolean, default=False, nullable=False)
    agreement_start = Column(Date)
    agreement_end = Column(Date)
    person_or_address = Column(String(255))  # who or where the contract covers
    notes = Column(Text)
    linked_expense_id = Column(Integer, ForeignKey("expense_items.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("total_cost >= 0", name="ck_renewals_total_cost_non_negative"),
        CheckConstraint("monthly_amount >= 0", name="ck_renewals_monthly_amount_non_negative"),
        Index("ix_renewals_agreement_end", "agreement_end"),
    )

    @property
    def added_to_expenses(self) -> bool:
        return self.linked_expense_id is not None

    def __repr__(self):
        return f"<Renewal {self.id}: {self.name} ends {self.agreement_end}>"
