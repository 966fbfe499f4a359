"""Loan product and loan application routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from debtnote.api.deps import get_context, get_db
from debtnote.api.schemas import (
    LoanCreate,
    LoanDetailResponse,
    LoanListItem,
    LoanListResponse,
    LoanProductResponse,
    LoanQuoteRequest,
    LoanQuoteResponse,
    LoanResponse,
    LoanStatusUpdate,
    PortfolioResponse,
)
from debtnote.models.applications import LoanApplication
from debtnote.models.context import RequestContext
from debtnote.models.errors import InvalidInput, RecordNotFound
from debtnote.services import loans

router = APIRouter(prefix="/api/v1", tags=["loans"])


@router.get("/loan-products", response_model=list[LoanProductResponse])
async def list_loan_products(db: AsyncSession = Depends(get_db)):
    return await loans.list_loan_products(db)


@router.post("/loans/quote", response_model=LoanQuoteResponse)
async def quote_loan(req: LoanQuoteRequest, db: AsyncSession = Depends(get_db)):
    """Loan summary for a product, amount and tenure. Nothing is saved."""
    try:
        product = await loans.get_loan_product(db, req.loan_product_id)
        quote = loans.quote_loan(product, req.principal_amount, req.tenure_months)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))

    a = quote.amortization
    return LoanQuoteResponse(
        principal_amount=quote.principal,
        tenure_months=quote.tenure_months,
        interest_calculation=quote.method.value,
        interest_rate=a.interest_rate,
        total_interest=a.total_interest,
        total_amount=a.total_amount,
        monthly_installment=a.monthly_installment,
        processing_fee=a.processing_fee,
        net_disbursement=quote.net_disbursement,
    )


@router.get("/loans", response_model=LoanListResponse)
async def list_loans(
    status: str | None = None,
    limit: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Loan table with portfolio totals for the listed loans."""
    records = await loans.list_loans(db, status=status, limit=limit)
    summary = loans.portfolio_summary(records)
    return LoanListResponse(
        summary=PortfolioResponse(
            total_loans=summary.total_loans,
            active=summary.active,
            pending=summary.pending,
            total_outstanding=summary.total_outstanding,
        ),
        loans=[LoanListItem.model_validate(r) for r in records],
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
async def create_loan(
    req: LoanCreate,
    ctx: RequestContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    application = LoanApplication(
        customer_id=req.customer_id,
        loan_product_id=req.loan_product_id,
        principal_amount=req.principal_amount,
        tenure_months=req.tenure_months,
        application_date=req.application_date,
        repayment_frequency=req.repayment_frequency,
        notes=req.notes,
    )
    try:
        return await loans.create_loan_application(db, ctx, application)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/loans/{loan_id}", response_model=LoanDetailResponse)
async def get_loan(loan_id: UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await loans.get_loan(db, loan_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/loans/{loan_id}/status", response_model=LoanResponse)
async def update_loan_status(
    loan_id: UUID,
    req: LoanStatusUpdate,
    ctx: RequestContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await loans.update_loan_status(db, ctx, loan_id, req.status)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))
