"""Loan products, loan applications and the loan portfolio.

The figures stored on a loan come from the calculator engine; this module only
looks records up, checks them, and writes the result.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from debtnote.config import settings
from debtnote.engine.amortization import (
    check_product_limits,
    coerce_method,
    compute_amortization,
    maturity_date,
    net_disbursement,
    repayment_schedule,
    require_cents,
)
from debtnote.models.applications import LoanApplication
from debtnote.models.context import RequestContext
from debtnote.models.db import CustomerRecord, LoanProductRecord, LoanRecord, LoanScheduleRecord
from debtnote.models.errors import InvalidInput, RecordNotFound
from debtnote.models.loan import LoanQuote, LoanStatus, LoanTerms, ProductLimits

logger = logging.getLogger(__name__)

# Manual transitions. FULLY_PAID is only reached by recording payments.
ALLOWED_TRANSITIONS: dict[LoanStatus, set[LoanStatus]] = {
    LoanStatus.PENDING: {LoanStatus.APPROVED, LoanStatus.REJECTED},
    LoanStatus.APPROVED: {LoanStatus.DISBURSED, LoanStatus.REJECTED},
    LoanStatus.DISBURSED: {LoanStatus.ACTIVE},
}


@dataclass(frozen=True)
class PortfolioSummary:
    total_loans: int
    active: int
    pending: int
    total_outstanding: Decimal


def product_limits(product: LoanProductRecord) -> ProductLimits:
    return ProductLimits(
        min_amount=Decimal(product.min_amount),
        max_amount=Decimal(product.max_amount),
        min_tenure_months=product.min_tenure_months,
        max_tenure_months=product.max_tenure_months,
    )


def _terms(product: LoanProductRecord, principal: Decimal, tenure_months: int) -> LoanTerms:
    return LoanTerms(
        principal=principal,
        annual_rate=Decimal(product.interest_rate),
        tenure_months=tenure_months,
        method=coerce_method(product.interest_calculation),
        fee_percentage=Decimal(product.processing_fee_percentage or 0),
        fee_flat=Decimal(product.processing_fee_flat or 0),
    )


def quote_loan(product: LoanProductRecord, principal: Decimal, tenure_months: int) -> LoanQuote:
    """Price a loan under a product's configuration."""
    require_cents(principal, "Loan amount")
    check_product_limits(product_limits(product), principal, tenure_months)
    terms = _terms(product, principal, tenure_months)
    result = compute_amortization(terms)
    return LoanQuote(
        principal=principal,
        tenure_months=tenure_months,
        method=terms.method,
        amortization=result,
        net_disbursement=net_disbursement(principal, result.processing_fee),
    )


def generate_loan_number(application_date: date) -> str:
    return f"LN-{application_date:%Y%m}-{uuid.uuid4().hex[:6].upper()}"


async def get_loan_product(session: AsyncSession, product_id: uuid.UUID) -> LoanProductRecord:
    product = await session.get(LoanProductRecord, product_id)
    if product is None:
        raise RecordNotFound("Loan product", product_id)
    return product


async def list_loan_products(session: AsyncSession, active_only: bool = True) -> list[LoanProductRecord]:
    stmt = select(LoanProductRecord).order_by(LoanProductRecord.name)
    if active_only:
        stmt = stmt.where(LoanProductRecord.is_active.is_(True))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_loan_application(
    session: AsyncSession,
    ctx: RequestContext,
    application: LoanApplication,
) -> LoanRecord:
    """Price and insert a new loan in PENDING status with its repayment schedule.

    Raises RecordNotFound for an unknown customer or product and InvalidInput
    for an inactive customer/product or terms outside the product's limits.
    """
    customer = await session.get(CustomerRecord, application.customer_id)
    if customer is None:
        raise RecordNotFound("Customer", application.customer_id)
    if customer.status != "active":
        raise InvalidInput(f"Customer {customer.customer_code} is not active")

    product = await get_loan_product(session, application.loan_product_id)
    if not product.is_active:
        raise InvalidInput(f"Loan product {product.code} is not active")

    quote = quote_loan(product, application.principal_amount, application.tenure_months)
    amort = quote.amortization

    loan = LoanRecord(
        loan_number=generate_loan_number(application.application_date),
        customer_id=customer.id,
        loan_product_id=product.id,
        branch_id=ctx.branch_id,
        loan_officer_id=ctx.user_id,
        created_by=ctx.user_id,
        principal_amount=application.principal_amount,
        interest_rate=amort.interest_rate,
        tenure_months=application.tenure_months,
        repayment_frequency=application.repayment_frequency or product.repayment_frequency,
        total_interest=amort.total_interest,
        total_amount=amort.total_amount,
        monthly_installment=amort.monthly_installment,
        processing_fee=amort.processing_fee,
        principal_paid=Decimal("0"),
        interest_paid=Decimal("0"),
        outstanding_balance=amort.total_amount,
        application_date=application.application_date,
        maturity_date=maturity_date(application.application_date, application.tenure_months),
        status=LoanStatus.PENDING.value,
        notes=application.notes,
    )
    loan.schedules = [
        LoanScheduleRecord(
            installment_number=item.installment_number,
            due_date=item.due_date,
            principal_amount=item.principal,
            interest_amount=item.interest,
            total_amount=item.total_amount,
            paid_amount=Decimal("0"),
            status="pending",
        )
        for item in repayment_schedule(
            _terms(product, application.principal_amount, application.tenure_months),
            application.application_date,
        )
    ]
    session.add(loan)
    await session.commit()
    await session.refresh(loan)

    logger.info(
        "Created loan %s for customer %s: principal=%s total=%s installment=%s",
        loan.loan_number, customer.customer_code, loan.principal_amount,
        loan.total_amount, loan.monthly_installment,
    )
    return loan


async def update_loan_status(
    session: AsyncSession,
    ctx: RequestContext,
    loan_id: uuid.UUID,
    new_status: LoanStatus | str,
) -> LoanRecord:
    """Move a loan along pending -> approved -> disbursed -> active."""
    try:
        target = LoanStatus(new_status)
    except ValueError:
        raise InvalidInput(f"Unknown loan status: {new_status!r}") from None

    loan = await session.get(LoanRecord, loan_id)
    if loan is None:
        raise RecordNotFound("Loan", loan_id)

    current = LoanStatus(loan.status)
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidInput(f"Cannot move loan {loan.loan_number} from {current.value} to {target.value}")

    loan.status = target.value
    if target is LoanStatus.APPROVED:
        loan.approved_by = ctx.user_id
    await session.commit()
    await session.refresh(loan)

    logger.info("Loan %s moved %s -> %s by %s", loan.loan_number, current.value, target.value, ctx.user_id)
    return loan


async def list_loans(
    session: AsyncSession,
    status: str | None = None,
    limit: int | None = None,
) -> list[LoanRecord]:
    """Newest loans first, with customer, product and branch loaded."""
    stmt = (
        select(LoanRecord)
        .options(
            selectinload(LoanRecord.customer),
            selectinload(LoanRecord.product),
            selectinload(LoanRecord.branch),
        )
        .order_by(LoanRecord.created_at.desc())
    )
    if status:
        stmt = stmt.where(LoanRecord.status == status)
    stmt = stmt.limit(limit or settings.loans_page_size)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_loan(session: AsyncSession, loan_id: uuid.UUID) -> LoanRecord:
    stmt = (
        select(LoanRecord)
        .where(LoanRecord.id == loan_id)
        .options(
            selectinload(LoanRecord.customer),
            selectinload(LoanRecord.product),
            selectinload(LoanRecord.branch),
            selectinload(LoanRecord.payments),
            selectinload(LoanRecord.schedules),
        )
    )
    result = await session.execute(stmt)
    loan = result.scalar_one_or_none()
    if loan is None:
        raise RecordNotFound("Loan", loan_id)
    return loan


def portfolio_summary(loans: Iterable[LoanRecord]) -> PortfolioSummary:
    loans = list(loans)
    return PortfolioSummary(
        total_loans=len(loans),
        active=sum(1 for loan in loans if loan.status == LoanStatus.ACTIVE.value),
        pending=sum(1 for loan in loans if loan.status == LoanStatus.PENDING.value),
        total_outstanding=sum(
            (Decimal(loan.outstanding_balance or 0) for loan in loans), Decimal("0")
        ),
    )
