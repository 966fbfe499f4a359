"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from debtnote.models.loan import AllocationPolicy, InterestMethod, LoanStatus, PaymentMethod


# ---- Request schemas ----

class AmortizationRequest(BaseModel):
    principal: Decimal = Field(..., description="Amount borrowed")
    annual_rate: Decimal = Field(..., description="Annual interest rate in percent, e.g. 12")
    tenure_months: int
    method: InterestMethod
    fee_percentage: Decimal = Decimal("0")
    fee_flat: Decimal = Decimal("0")


class AllocationRequest(BaseModel):
    payment: Decimal = Field(..., decimal_places=2)
    principal: Decimal = Field(..., decimal_places=2)
    principal_paid: Decimal = Field(Decimal("0"), decimal_places=2)
    total_interest: Decimal = Field(..., decimal_places=2)
    interest_paid: Decimal = Field(Decimal("0"), decimal_places=2)
    policy: AllocationPolicy = AllocationPolicy.PRINCIPAL_FIRST


class CustomerCreate(BaseModel):
    first_name: str
    middle_name: str | None = None
    last_name: str
    date_of_birth: date | None = None
    gender: str | None = None
    civil_status: str | None = None
    email: str | None = None
    phone: str
    alternate_phone: str | None = None
    address_line1: str
    address_line2: str | None = None
    barangay: str | None = None
    city: str
    province: str
    postal_code: str | None = None
    id_type: str | None = None
    id_number: str | None = None
    occupation: str | None = None
    employer_name: str | None = None
    monthly_income: Decimal | None = None
    bank_name: str | None = None
    bank_account_number: str | None = None
    gcash_number: str | None = None
    paymaya_number: str | None = None


class LoanQuoteRequest(BaseModel):
    loan_product_id: UUID
    principal_amount: Decimal = Field(..., gt=0, decimal_places=2)
    tenure_months: int


class LoanCreate(BaseModel):
    customer_id: UUID
    loan_product_id: UUID
    principal_amount: Decimal = Field(..., gt=0, decimal_places=2)
    tenure_months: int
    application_date: date = Field(default_factory=date.today)
    repayment_frequency: str | None = None
    notes: str | None = None


class LoanStatusUpdate(BaseModel):
    status: LoanStatus


class PaymentCreate(BaseModel):
    loan_id: UUID
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_date: date = Field(default_factory=date.today)
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_reference: str | None = None
    notes: str | None = None


# ---- Response schemas ----

class AmortizationResponse(BaseModel):
    interest_rate: Decimal
    total_interest: Decimal
    total_amount: Decimal
    monthly_installment: Decimal
    processing_fee: Decimal


class AllocationResponse(BaseModel):
    principal_paid: Decimal
    interest_paid: Decimal
    unallocated: Decimal


class LoanQuoteResponse(AmortizationResponse):
    principal_amount: Decimal
    tenure_months: int
    interest_calculation: str
    net_disbursement: Decimal


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_code: str
    first_name: str
    last_name: str
    phone: str
    email: str | None = None
    city: str
    province: str
    status: str


class CustomerSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_code: str
    first_name: str
    last_name: str


class LoanProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    name: str
    interest_rate: Decimal
    interest_calculation: str
    processing_fee_percentage: Decimal
    processing_fee_flat: Decimal
    min_amount: Decimal
    max_amount: Decimal
    min_tenure_months: int
    max_tenure_months: int
    repayment_frequency: str


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    loan_id: UUID
    payment_date: date
    amount: Decimal
    principal_paid: Decimal
    interest_paid: Decimal
    payment_method: str
    payment_reference: str | None = None
    status: str


class PaymentListItem(PaymentResponse):
    customer: CustomerSummaryResponse | None = None
    loan_number: str | None = None


class LoanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    loan_number: str
    customer_id: UUID
    loan_product_id: UUID
    principal_amount: Decimal
    interest_rate: Decimal
    tenure_months: int
    repayment_frequency: str
    total_interest: Decimal
    total_amount: Decimal
    monthly_installment: Decimal
    processing_fee: Decimal
    principal_paid: Decimal
    interest_paid: Decimal
    outstanding_balance: Decimal
    application_date: date
    maturity_date: date
    status: str
    notes: str | None = None


class LoanListItem(LoanResponse):
    customer: CustomerSummaryResponse | None = None
    product_name: str | None = None
    branch_name: str | None = None


class LoanScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    installment_number: int
    due_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    status: str
    current_status: str  # status, or "overdue" when unpaid past due


class LoanDetailResponse(LoanListItem):
    payments: list[PaymentResponse] = []
    schedules: list[LoanScheduleResponse] = []


class PortfolioResponse(BaseModel):
    total_loans: int
    active: int
    pending: int
    total_outstanding: Decimal


class LoanListResponse(BaseModel):
    summary: PortfolioResponse
    loans: list[LoanListItem]


class CollectionResponse(BaseModel):
    payment_count: int
    total_collected: Decimal
    today_count: int
    today_collected: Decimal


class PaymentListResponse(BaseModel):
    summary: CollectionResponse
    payments: list[PaymentListItem]


class DashboardResponse(BaseModel):
    total_customers: int
    active_loans: int
    pending_loans: int
    recent_payments: list[PaymentListItem]
