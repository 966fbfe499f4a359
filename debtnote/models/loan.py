from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class InterestMethod(Enum):
    DECLINING = "declining"  # Reducing balance / annuity
    FLAT = "flat"
    SIMPLE = "simple"


class AllocationPolicy(Enum):
    PRINCIPAL_FIRST = "principal_first"
    INTEREST_FIRST = "interest_first"


@dataclass(frozen=True)
class LoanTerms:
    principal: Decimal
    annual_rate: Decimal  # Percent, e.g. Decimal("12") for 12% p.a.
    tenure_months: int
    method: InterestMethod | str
    fee_percentage: Decimal = Decimal("0")  # Percent of principal
    fee_flat: Decimal = Decimal("0")


@dataclass(frozen=True)
class AmortizationResult:
    interest_rate: Decimal
    total_interest: Decimal
    total_amount: Decimal
    monthly_installment: Decimal
    processing_fee: Decimal


@dataclass(frozen=True)
class LoanBalances:
    principal: Decimal
    principal_paid: Decimal
    total_interest: Decimal
    interest_paid: Decimal

    @property
    def principal_remaining(self) -> Decimal:
        return self.principal - self.principal_paid

    @property
    def interest_remaining(self) -> Decimal:
        return self.total_interest - self.interest_paid


@dataclass(frozen=True)
class PaymentAllocation:
    principal_paid: Decimal
    interest_paid: Decimal
    # Excess over what the loan still owes. Not applied anywhere; the caller
    # decides whether to reject, credit or carry it forward.
    unallocated: Decimal = Decimal("0")

    @property
    def allocated(self) -> Decimal:
        return self.principal_paid + self.interest_paid


@dataclass(frozen=True)
class ProductLimits:
    """Amount and tenure bounds a loan product accepts."""
    min_amount: Decimal
    max_amount: Decimal
    min_tenure_months: int
    max_tenure_months: int


class LoanStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DISBURSED = "disbursed"
    ACTIVE = "active"
    FULLY_PAID = "fully_paid"


class PaymentMethod(Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    GCASH = "gcash"
    PAYMAYA = "paymaya"
    CHECK = "check"


@dataclass(frozen=True)
class LoanQuote:
    """What a loan product would cost for a given amount and tenure."""
    principal: Decimal
    tenure_months: int
    method: InterestMethod
    amortization: AmortizationResult
    net_disbursement: Decimal


class InstallmentStatus(Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"  # Derived on read, never stored


@dataclass(frozen=True)
class ScheduledInstallment:
    installment_number: int
    due_date: date
    principal: Decimal
    interest: Decimal
    total_amount: Decimal
