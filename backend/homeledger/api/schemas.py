"""API schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator

from homeledger.db.models import DebtType, ExpenseCategory, SavingsTransactionType


def reject_explicit_nulls(model: BaseModel, fields: tuple[str, ...]) -> None:
    """Partial updates may omit a NOT NULL column but may not set it to null."""
    for field in fields:
        if field in model.model_fields_set and getattr(model, field) is None:
            raise ValueError(f"{field} cannot be null")


# --- Debt Schemas ---


class DebtBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: DebtType = DebtType.OTHER
    lender: Optional[str] = None
    starting_balance: Decimal = Field(Decimal("0"), ge=0)
    balance: Decimal = Field(..., ge=0)
    apr: Decimal = Field(Decimal("0"), ge=0, le=100)
    is_promo_0: bool = False
    promo_start_date: Optional[date] = None
    promo_end_date: Optional[date] = None
    post_promo_apr: Optional[Decimal] = Field(None, ge=0, le=100)
    payment_day: Optional[int] = Field(None, ge=1, le=31)
    minimum_payment: Decimal = Field(Decimal("0"), ge=0)
    planned_payment: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_promo_period(self):
        if self.promo_start_date and self.promo_end_date and self.promo_end_date < self.promo_start_date:
            raise ValueError("Promo end date cannot be before promo start date")
        return self


class DebtCreate(DebtBase):
    # Allows entering a debt that was set up earlier than today
    created_at: Optional[datetime] = None


class DebtUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[DebtType] = None
    lender: Optional[str] = None
    starting_balance: Optional[Decimal] = Field(None, ge=0)
    balance: Optional[Decimal] = Field(None, ge=0)
    apr: Optional[Decimal] = Field(None, ge=0, le=100)
    is_promo_0: Optional[bool] = None
    promo_start_date: Optional[date] = None
    promo_end_date: Optional[date] = None
    post_promo_apr: Optional[Decimal] = Field(None, ge=0, le=100)
    payment_day: Optional[int] = Field(None, ge=1, le=31)
    minimum_payment: Optional[Decimal] = Field(None, ge=0)
    planned_payment: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_required_fields(self):
        reject_explicit_nulls(
            self, ("name", "type", "starting_balance", "balance", "apr", "is_promo_0", "minimum_payment")
        )
        return self


class DebtOverviewSchema(BaseModel):
    recorded_balance: Decimal
    adjusted_balance: Decimal
    payments_made: int
    monthly_payment: Decimal
    paid_off: Decimal
    progress_percent: Decimal
    effective_apr: Decimal
    next_payment_date: Optional[date] = None
    months_remaining: Optional[int] = None
    payoff_status: str
    status: str

    class Config:
        from_attributes = True


class DebtResponse(DebtBase):
    id: int
    created_at: datetime
    updated_at: datetime
    overview: Optional[DebtOverviewSchema] = None

    class Config:
        from_attributes = True


class DebtListResponse(BaseModel):
    debts: list[DebtResponse]
    total: int
    total_debt: Decimal = Decimal("0")
    total_minimums: Decimal = Decimal("0")
    total_planned: Decimal = Decimal("0")


class DebtPaymentCreate(BaseModel):
    paid_on: date
    amount: Decimal = Field(..., gt=0)
    note: Optional[str] = Field(None, max_length=500)


class DebtPaymentResponse(DebtPaymentCreate):
    id: int
    debt_id: int
    created_at: datetime

    class Config:
        from_attributes = True


# --- Projection Schemas ---


class AmortizationRowSchema(BaseModel):
    month: int
    date: date
    payment_amount: Decimal
    interest_amount: Decimal
    principal_amount: Decimal
    balance_after: Decimal

    class Config:
        from_attributes = True


class PayoffPlanRequest(BaseModel):
    current_balance: Decimal = Field(..., ge=0)
    monthly_payment: Decimal = Field(..., ge=0)
    apr_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    start_date: Optional[date] = None
    max_months: int = Field(240, ge=1, le=600)
    promo_until: Optional[date] = None


class PayoffPlanResponse(BaseModel):
    current_balance: Decimal
    monthly_payment: Decimal
    apr_percentage: Decimal
    months_to_payoff: Optional[int] = None
    total_interest: Optional[Decimal] = None
    total_paid: Optional[Decimal] = None
    payoff_date: Optional[date] = None
    schedule: list[AmortizationRowSchema] = []
    status: str


class DebtProjectionResponse(PayoffPlanResponse):
    debt_id: int
    recorded_balance: Decimal
    payments_made: int
    start_date: date
    promo_until: Optional[date] = None


# --- Savings Schemas ---


class SavingsAccountBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    provider: Optional[str] = None
    balance: Decimal = Field(..., ge=0)
    aer: Decimal = Field(Decimal("0"), ge=0, le=100)
    notes: Optional[str] = None


class SavingsAccountCreate(SavingsAccountBase):
    pass


class SavingsAccountUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    provider: Optional[str] = None
    balance: Optional[Decimal] = Field(None, ge=0)
    aer: Optional[Decimal] = Field(None, ge=0, le=100)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_required_fields(self):
        reject_explicit_nulls(self, ("name", "balance", "aer"))
        return self


class SavingsAccountResponse(SavingsAccountBase):
    id: int
    created_at: datetime
    updated_at: datetime
    monthly_interest: Decimal = Decimal("0")
    projected_interest: Decimal = Decimal("0")  # next 12 months, compounded

    class Config:
        from_attributes = True


class SavingsListResponse(BaseModel):
    accounts: list[SavingsAccountResponse]
    total: int
    total_savings: Decimal = Decimal("0")
    estimated_annual_interest: Decimal = Decimal("0")


class SavingsTransactionCreate(BaseModel):
    trans_on: date
    amount: Decimal = Field(..., gt=0)
    type: SavingsTransactionType
    note: Optional[str] = Field(None, max_length=500)


class SavingsTransactionResponse(SavingsTransactionCreate):
    id: int
    savings_account_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class SavingsProjectionRowSchema(BaseModel):
    month_index: int
    balance_after: Decimal
    interest_this_month: Decimal

    class Config:
        from_attributes = True


class SavingsGrowthRequest(BaseModel):
    starting_balance: Decimal = Field(..., ge=0)
    aer_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    months: int = Field(12, ge=1, le=600)


class SavingsProjectionResponse(BaseModel):
    account_id: Optional[int] = None
    starting_balance: Decimal
    aer_percent: Decimal
    months: int
    total_interest: Decimal
    final_balance: Decimal
    rows: list[SavingsProjectionRowSchema]


class InterestBreakdownItem(BaseModel):
    account_id: Optional[int] = None
    account: str
    interest: Decimal


class InterestMonth(BaseModel):
    month: date
    interest: Decimal
    is_past: bool
    breakdown: list[InterestBreakdownItem]


class InterestStatementResponse(BaseModel):
    months: list[InterestMonth]
    total_annual_interest: Decimal
    tax_free_interest: Decimal
    taxable_interest: Decimal
    allowance: Decimal
    over_allowance: Decimal
    taxable_amount: Decimal
    estimated_tax: Decimal


# --- Cashflow Schemas ---


class IncomeSourceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    monthly_amount: Decimal = Field(..., ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class IncomeSourceCreate(IncomeSourceBase):
    pass


class IncomeSourceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    monthly_amount: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_required_fields(self):
        reject_explicit_nulls(self, ("name", "monthly_amount"))
        return self


class IncomeSourceResponse(IncomeSourceBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExpenseItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    monthly_amount: Decimal = Field(..., ge=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    frequency: Literal["monthly", "annual"] = "monthly"
    couples_mode: bool = False
    provider: Optional[str] = None


class ExpenseItemCreate(ExpenseItemBase):
    pass


class ExpenseItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    monthly_amount: Optional[Decimal] = Field(None, ge=0)
    category: Optional[ExpenseCategory] = None
    frequency: Optional[Literal["monthly", "annual"]] = None
    couples_mode: Optional[bool] = None
    provider: Optional[str] = None

    @model_validator(mode="after")
    def check_required_fields(self):
        reject_explicit_nulls(self, ("name", "monthly_amount", "frequency", "couples_mode"))
        return self


class ExpenseItemResponse(ExpenseItemBase):
    id: int
    created_at: datetime
    updated_at: datetime
    monthly_equivalent: Decimal = Decimal("0")

    class Config:
        from_attributes = True


class CashflowResponse(BaseModel):
    total_income: Decimal
    monthly_expenses: Decimal
    annual_expenses_monthly: Decimal
    debt_payments: Decimal
    total_outgoings: Decimal
    surplus: Decimal
    incomes: list[IncomeSourceResponse]
    expenses: list[ExpenseItemResponse]


# --- Renewal Schemas ---


class RenewalBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    provider: Optional[str] = None
    total_cost: Decimal = Field(Decimal("0"), ge=0)
    monthly_amount: Decimal = Field(Decimal("0"), ge=0)
    is_monthly_payment: bool = False
    agreement_start: Optional[date] = None
    agreement_end: Optional[date] = None
    person_or_address: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_agreement_period(self):
        if self.agreement_start and self.agreement_end and self.agreement_end < self.agreement_start:
            raise ValueError("Agreement end date cannot be before agreement start date")
        return self


class RenewalCreate(RenewalBase):
    pass


class RenewalUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    provider: Optional[str] = None
    total_cost: Optional[Decimal] = Field(None, ge=0)
    monthly_amount: Optional[Decimal] = Field(None, ge=0)
    is_monthly_payment: Optional[bool] = None
    agreement_start: Optional[date] = None
    agreement_end: Optional[date] = None
    person_or_address: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_required_fields(self):
        reject_explicit_nulls(self, ("name", "total_cost", "monthly_amount", "is_monthly_payment"))
        return self


class ExpiryStatusSchema(BaseModel):
    days_until_end: int
    level: Literal["expired", "urgent", "soon", "ok"]
    label: str

    class Config:
        from_attributes = True


class RenewalResponse(RenewalBase):
    id: int
    linked_expense_id: Optional[int] = None
    added_to_expenses: bool = False
    created_at: datetime
    updated_at: datetime
    expiry: Optional[ExpiryStatusSchema] = None

    class Config:
        from_attributes = True


class RenewalListResponse(BaseModel):
    renewals: list[RenewalResponse]
    total: int
    annual_total: Decimal = Decimal("0")
    monthly_total: Decimal = Decimal("0")
    ending_soon: int = 0
    people: list[str] = []


# --- Overview Schemas ---


class FinanceSummaryResponse(BaseModel):
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
    projected_annual_interest: Decimal = Decimal("0")


class RunwayResponse(BaseModel):
    months: Optional[int] = None
    net_position: Decimal
    monthly_net: Decimal
    total_income: Decimal
    in_surplus: bool


class AlertItem(BaseModel):
    id: str
    type: Literal[
        "promo_ending", "payment_due", "high_apr", "monthly_payments", "upcoming_payments", "renewal_ending"
    ]
    title: str
    description: str
    severity: Literal["danger", "warning", "info"]
    debt_id: Optional[int] = None
    renewal_id: Optional[int] = None


class AlertsResponse(BaseModel):
    alerts: list[AlertItem]


class HouseholdMemberResponse(BaseModel):
    email: str
    name: str


class HouseholdResponse(BaseModel):
    members: list[HouseholdMemberResponse]
