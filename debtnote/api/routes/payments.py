"""Payment routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from debtnote.api.deps import get_context, get_db
from debtnote.api.schemas import (
    CollectionResponse,
    PaymentCreate,
    PaymentListItem,
    PaymentListResponse,
    PaymentResponse,
)
from debtnote.models.applications import PaymentEntry
from debtnote.models.context import RequestContext
from debtnote.models.errors import InvalidInput, RecordNotFound
from debtnote.services import payments

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    loan_id: UUID | None = None,
    limit: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    records = await payments.list_payments(db, loan_id=loan_id, limit=limit)
    summary = payments.collection_summary(records)
    return PaymentListResponse(
        summary=CollectionResponse(
            payment_count=summary.payment_count,
            total_collected=summary.total_collected,
            today_count=summary.today_count,
            today_collected=summary.today_collected,
        ),
        payments=[PaymentListItem.model_validate(r) for r in records],
    )


@router.post("", response_model=PaymentResponse, status_code=201)
async def record_payment(
    req: PaymentCreate,
    ctx: RequestContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    """Record a payment; principal is retired before interest by default."""
    entry = PaymentEntry(
        loan_id=req.loan_id,
        amount=req.amount,
        payment_date=req.payment_date,
        payment_method=req.payment_method,
        payment_reference=req.payment_reference,
        notes=req.notes,
    )
    try:
        return await payments.record_payment(db, ctx, entry)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))
