"""Loan amortization summary: installment, total interest, processing fee.

Pure functions: Decimal in, dataclass out. No I/O.

All money is rounded to cents with ROUND_HALF_UP (half away from zero for the
non-negative amounts handled here). total_amount is derived from the rounded
total_interest so that principal + total_interest == total_amount holds to
the cent.
"""

import calendar
from dataclasses import replace
from datetime import MAXYEAR, date
from decimal import (
    MAX_EMAX,
    MIN_EMIN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DecimalException,
    localcontext,
)

from debtnote.models.errors import InvalidInput
from debtnote.models.loan import (
    AmortizationResult,
    InterestMethod,
    LoanTerms,
    ProductLimits,
    ScheduledInstallment,
)

TWO_PLACES = Decimal("0.01")

# Working context for the calculator. The default 28 digits cannot tell
# 1 + r from 1 for tiny monthly rates, and (1 + r) ** n overflows the default
# exponent range for long tenures.
WIDE_CONTEXT = Context(prec=60, Emax=MAX_EMAX, Emin=MIN_EMIN)


def _cents(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)


def coerce_method(method: InterestMethod | str) -> InterestMethod:
    if isinstance(method, InterestMethod):
        return method
    try:
        return InterestMethod(str(method).strip().lower())
    except ValueError:
        raise InvalidInput(
            f"Unknown interest calculation method: {method!r}"
            " (expected declining, flat or simple)"
        ) from None


def _as_decimal(value) -> Decimal:
    # Via str so 0.1 stays 0.1
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _decimal_terms(terms: LoanTerms) -> LoanTerms:
    return replace(
        terms,
        principal=_as_decimal(terms.principal),
        annual_rate=_as_decimal(terms.annual_rate),
        fee_percentage=_as_decimal(terms.fee_percentage),
        fee_flat=_as_decimal(terms.fee_flat),
    )


def _validate_terms(terms: LoanTerms) -> None:
    if terms.principal <= 0:
        raise InvalidInput("Principal must be positive")
    if terms.tenure_months <= 0:
        raise InvalidInput("Tenure must be a positive number of months")
    if terms.annual_rate < 0:
        raise InvalidInput("Interest rate cannot be negative")
    if terms.fee_percentage < 0 or terms.fee_flat < 0:
        raise InvalidInput("Processing fee cannot be negative")


def declining_installment(principal: Decimal, annual_rate: Decimal, tenure_months: int) -> Decimal:
    """Level installment on a reducing balance (unrounded).

    installment = P * r * (1 + r)^n / ((1 + r)^n - 1), r = annual_rate / 12 / 100

    A zero rate collapses to P / n, and so does a rate too small to move
    (1 + r)^n off 1 at the working precision.
    """
    r = annual_rate / 12 / 100
    if r == 0:
        return principal / tenure_months
    factor = (1 + r) ** tenure_months
    if factor == 1:
        return principal / tenure_months
    return principal * r * factor / (factor - 1)


def _declining(terms: LoanTerms) -> tuple[Decimal, Decimal]:
    installment = declining_installment(terms.principal, terms.annual_rate, terms.tenure_months)
    if terms.annual_rate == 0:
        return installment, Decimal("0")
    total_amount = installment * terms.tenure_months
    return installment, max(total_amount - terms.principal, Decimal("0"))


def _flat(terms: LoanTerms) -> tuple[Decimal, Decimal]:
    # Interest on the original principal for the whole tenure
    total_interest = terms.principal * terms.annual_rate * terms.tenure_months / (12 * 100)
    installment = (terms.principal + total_interest) / terms.tenure_months
    return installment, total_interest


def _simple(terms: LoanTerms) -> tuple[Decimal, Decimal]:
    years = Decimal(terms.tenure_months) / 12
    total_interest = terms.principal * terms.annual_rate * years / 100
    installment = (terms.principal + total_interest) / terms.tenure_months
    return installment, total_interest


_METHODS = {
    InterestMethod.DECLINING: _declining,
    InterestMethod.FLAT: _flat,
    InterestMethod.SIMPLE: _simple,
}


def processing_fee(principal: Decimal, fee_percentage: Decimal, fee_flat: Decimal) -> Decimal:
    """Upfront fee: percentage of principal plus a flat amount."""
    return _cents(principal * fee_percentage / 100 + fee_flat)


def compute_amortization(terms: LoanTerms) -> AmortizationResult:
    """Summarize a loan under its interest calculation method.

    Raises InvalidInput for a non-positive principal or tenure, a negative
    rate or fee, an unrecognized method, or terms whose figures fall outside
    what Decimal can represent.
    """
    method = coerce_method(terms.method)
    terms = _decimal_terms(terms)
    _validate_terms(terms)

    with localcontext(WIDE_CONTEXT):
        try:
            installment, total_interest = _METHODS[method](terms)
            total_interest = _cents(total_interest)
            return AmortizationResult(
                interest_rate=terms.annual_rate,
                total_interest=total_interest,
                total_amount=_cents(terms.principal + total_interest),
                monthly_installment=_cents(installment),
                processing_fee=processing_fee(terms.principal, terms.fee_percentage, terms.fee_flat),
            )
        except DecimalException as e:
            raise InvalidInput(
                f"Loan terms cannot be computed: {type(e).__name__} for"
                f" principal={terms.principal} rate={terms.annual_rate} tenure={terms.tenure_months}"
            ) from None


def net_disbursement(principal: Decimal, fee: Decimal) -> Decimal:
    """Cash handed to the borrower after the processing fee is withheld."""
    return _cents(principal - fee)


def maturity_date(application_date: date, tenure_months: int) -> date:
    """Application date moved forward by the tenure.

    The day is clamped to the last valid day of the target month
    (Jan 31 + 1 month -> Feb 28/29).
    """
    if tenure_months <= 0:
        raise InvalidInput("Tenure must be a positive number of months")
    months = application_date.month - 1 + tenure_months
    year = application_date.year + months // 12
    if year > MAXYEAR:
        raise InvalidInput(f"Tenure of {tenure_months} months runs past the year {MAXYEAR}")
    month = months % 12 + 1
    day = min(application_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def check_product_limits(limits: ProductLimits, principal: Decimal, tenure_months: int) -> None:
    """Raise InvalidInput if the amount or tenure falls outside a product's bounds."""
    if not limits.min_amount <= principal <= limits.max_amount:
        raise InvalidInput(
            f"Loan amount {principal} is outside the product range"
            f" {limits.min_amount} - {limits.max_amount}"
        )
    if not limits.min_tenure_months <= tenure_months <= limits.max_tenure_months:
        raise InvalidInput(
            f"Tenure of {tenure_months} months is outside the product range"
            f" {limits.min_tenure_months}-{limits.max_tenure_months} months"
        )


def require_cents(amount: Decimal, label: str = "Amount") -> None:
    """Raise InvalidInput unless amount is a whole number of cents."""
    if amount % TWO_PLACES != 0:
        raise InvalidInput(f"{label} {amount} has fractions of a cent")


def _period_interest(method: InterestMethod, balance: Decimal, terms: LoanTerms, total_interest: Decimal) -> Decimal:
    if method is InterestMethod.DECLINING:
        return _cents(balance * terms.annual_rate / 1200)
    # Flat and simple loans spread their fixed interest evenly
    return _cents(total_interest / terms.tenure_months)


def repayment_schedule(terms: LoanTerms, start_date: date) -> list[ScheduledInstallment]:
    """Installment-by-installment breakdown of a loan.

    Every installment but the last is the rounded monthly installment, split
    into interest (on the remaining balance for declining loans, an even share
    of total interest otherwise) and principal. The last installment takes
    whatever principal and interest are left, so the schedule sums exactly to
    the loan's principal, total interest and total amount.

    Installment k falls due k months after start_date, clamped to month end.
    """
    result = compute_amortization(terms)
    method = coerce_method(terms.method)
    terms = _decimal_terms(terms)

    principal_left = terms.principal
    interest_left = result.total_interest
    installments: list[ScheduledInstallment] = []

    for number in range(1, terms.tenure_months + 1):
        if number == terms.tenure_months:
            principal, interest = principal_left, interest_left
        else:
            interest = min(
                _period_interest(method, principal_left, terms, result.total_interest),
                interest_left,
                result.monthly_installment,
            )
            principal = max(min(result.monthly_installment - interest, principal_left), Decimal("0"))

        principal_left -= principal
        interest_left -= interest
        installments.append(ScheduledInstallment(
            installment_number=number,
            due_date=maturity_date(start_date, number),
            principal=principal,
            interest=interest,
            total_amount=principal + interest,
        ))

    return installments
