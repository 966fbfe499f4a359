"""Payment recording and collection views."""

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
from debtnote.engine.allocation import (
    allocate_payment,
    apply_to_installments,
    installment_status,
    outstanding_balance,
)
from debtnote.engine.amortization import require_cents
from debtnote.models.applications import PaymentEntry
from debtnote.models.context import RequestContext
from debtnote.models.db import LoanRecord, LoanScheduleRecord, PaymentRecord
from debtnote.models.errors import InvalidInput, RecordNotFound
from debtnote.models.loan import AllocationPolicy, LoanBalances, LoanStatus

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = {LoanStatus.ACTIVE.value, LoanStatus.DISBURSED.value}


@dataclass(frozen=True)
class CollectionSummary:
    payment_count: int
    total_collected: Decimal
    today_count: int
    today_collected: Decimal


def loan_balances(loan: LoanRecord) -> LoanBalances:
    return LoanBalances(
        principal=Decimal(loan.principal_amount),
        principal_paid=Decimal(loan.principal_paid or 0),
        total_interest=Decimal(loan.total_interest),
        interest_paid=Decimal(loan.interest_paid or 0),
    )


async def _credit_schedule(session: AsyncSession, loan_id: uuid.UUID, amount: Decimal) -> None:
    result = await session.execute(
        select(LoanScheduleRecord)
        .where(LoanScheduleRecord.loan_id == loan_id)
        .order_by(LoanScheduleRecord.installment_number)
    )
    rows = list(result.scalars().all())
    amounts_due = [Decimal(row.total_amount) - Decimal(row.paid_amount or 0) for row in rows]
    for row, applied in zip(rows, apply_to_installments(amount, amounts_due)):
        if applied == 0:
            continue
        row.paid_amount = Decimal(row.paid_amount or 0) + applied
        row.status = installment_status(Decimal(row.total_amount), row.paid_amount).value


async def record_payment(
    session: AsyncSession,
    ctx: RequestContext,
    entry: PaymentEntry,
    policy: AllocationPolicy | str | None = None,
) -> PaymentRecord:
    """Allocate a payment against a loan, insert it and update the loan totals.

    Overpayments are rejected: a payment larger than what the loan still owes
    raises InvalidInput instead of being partly applied. So are amounts with
    fractions of a cent, which the cent-precision columns could not store.
    The payment is also credited to the loan's schedule, earliest installment
    first.
    """
    require_cents(entry.amount, "Payment amount")
    loan = await session.get(LoanRecord, entry.loan_id)
    if loan is None:
        raise RecordNotFound("Loan", entry.loan_id)
    if loan.status not in PAYABLE_STATUSES:
        raise InvalidInput(f"Loan {loan.loan_number} is {loan.status}; payments need an active or disbursed loan")

    allocation = allocate_payment(
        entry.amount,
        loan_balances(loan),
        policy or settings.allocation_policy,
    )
    if allocation.unallocated > 0:
        raise InvalidInput(
            f"Payment of {entry.amount} exceeds the remaining balance of"
            f" loan {loan.loan_number} by {allocation.unallocated}"
        )

    payment = PaymentRecord(
        loan_id=loan.id,
        customer_id=loan.customer_id,
        payment_date=entry.payment_date,
        amount=entry.amount,
        principal_paid=allocation.principal_paid,
        interest_paid=allocation.interest_paid,
        payment_method=entry.payment_method.value,
        payment_reference=entry.payment_reference or None,
        collected_by=ctx.user_id,
        status="completed",
        notes=entry.notes or None,
    )

    loan.principal_paid = Decimal(loan.principal_paid or 0) + allocation.principal_paid
    loan.interest_paid = Decimal(loan.interest_paid or 0) + allocation.interest_paid
    loan.outstanding_balance = outstanding_balance(
        Decimal(loan.total_amount), loan.principal_paid + loan.interest_paid
    )
    if loan.outstanding_balance == 0:
        loan.status = LoanStatus.FULLY_PAID.value

    await _credit_schedule(session, loan.id, entry.amount)

    session.add(payment)
    await session.commit()
    await session.refresh(payment)

    logger.info(
        "Recorded payment %s on loan %s: amount=%s principal=%s interest=%s outstanding=%s",
        payment.id, loan.loan_number, entry.amount, allocation.principal_paid,
        allocation.interest_paid, loan.outstanding_balance,
    )
    if loan.status == LoanStatus.FULLY_PAID.value:
        logger.info("Loan %s fully paid", loan.loan_number)
    return payment


async def list_payments(
    session: AsyncSession,
    loan_id: uuid.UUID | None = None,
    limit: int | None = None,
) -> list[PaymentRecord]:
    """Latest payments first, with customer and loan loaded."""
    stmt = (
        select(PaymentRecord)
        .options(selectinload(PaymentRecord.customer), selectinload(PaymentRecord.loan))
        .order_by(PaymentRecord.payment_date.desc(), PaymentRecord.created_at.desc())
    )
    if loan_id is not None:
        stmt = stmt.where(PaymentRecord.loan_id == loan_id)
    stmt = stmt.limit(limit or settings.payments_page_size)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def recent_payments(session: AsyncSession, limit: int | None = None) -> list[PaymentRecord]:
    """Most recently entered payments, whatever their payment date."""
    stmt = (
        select(PaymentRecord)
        .options(selectinload(PaymentRecord.customer), selectinload(PaymentRecord.loan))
        .order_by(PaymentRecord.created_at.desc())
        .limit(limit or settings.recent_payments_limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


def collection_summary(payments: Iterable[PaymentRecord], today: date | None = None) -> CollectionSummary:
    today = today or date.today()
    payments = list(payments)
    todays = [p for p in payments if p.payment_date == today]
    return CollectionSummary(
        payment_count=len(payments),
        total_collected=sum((Decimal(p.amount) for p in payments), Decimal("0")),
        today_count=len(todays),
        today_collected=sum((Decimal(p.amount) for p in todays), Decimal("0")),
    )
