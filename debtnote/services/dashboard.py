"""Headline numbers for the back-office landing page."""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from debtnote.config import settings
from debtnote.models.db import CustomerRecord, LoanRecord, PaymentRecord
from debtnote.models.loan import LoanStatus
from debtnote.services.payments import recent_payments


@dataclass(frozen=True)
class DashboardSummary:
    total_customers: int
    active_loans: int
    pending_loans: int
    recent_payments: list[PaymentRecord]


async def _count_loans(session: AsyncSession, status: LoanStatus) -> int:
    stmt = select(func.count()).select_from(LoanRecord).where(LoanRecord.status == status.value)
    return await session.scalar(stmt) or 0


async def dashboard_summary(session: AsyncSession) -> DashboardSummary:
    total_customers = await session.scalar(select(func.count()).select_from(CustomerRecord)) or 0
    return DashboardSummary(
        total_customers=total_customers,
        active_loans=await _count_loans(session, LoanStatus.ACTIVE),
        pending_loans=await _count_loans(session, LoanStatus.PENDING),
        recent_payments=await recent_payments(session, limit=settings.recent_payments_limit),
    )
