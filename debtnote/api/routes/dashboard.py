"""Dashboard route."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from debtnote.api.deps import get_db
from debtnote.api.schemas import DashboardResponse, PaymentListItem
from debtnote.services.dashboard import dashboard_summary

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def dashboard(db: AsyncSession = Depends(get_db)):
    summary = await dashboard_summary(db)
    return DashboardResponse(
        total_customers=summary.total_customers,
        active_loans=summary.active_loans,
        pending_loans=summary.pending_loans,
        recent_payments=[PaymentListItem.model_validate(p) for p in summary.recent_payments],
    )
