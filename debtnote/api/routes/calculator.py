"""Calculator routes: stateless loan pricing and payment splitting."""

from fastapi import APIRouter, HTTPException

from debtnote.api.schemas import (
    AllocationRequest,
    AllocationResponse,
    AmortizationRequest,
    AmortizationResponse,
)
from debtnote.engine.allocation import allocate_payment
from debtnote.engine.amortization import compute_amortization
from debtnote.models.errors import InvalidInput
from debtnote.models.loan import LoanBalances, LoanTerms

router = APIRouter(prefix="/api/v1/calculator", tags=["calculator"])


@router.post("/amortization", response_model=AmortizationResponse)
async def amortization(req: AmortizationRequest):
    """Total interest, total amount, installment and processing fee for given terms."""
    terms = LoanTerms(
        principal=req.principal,
        annual_rate=req.annual_rate,
        tenure_months=req.tenure_months,
        method=req.method,
        fee_percentage=req.fee_percentage,
        fee_flat=req.fee_flat,
    )
    try:
        result = compute_amortization(terms)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))

    return AmortizationResponse(
        interest_rate=result.interest_rate,
        total_interest=result.total_interest,
        total_amount=result.total_amount,
        monthly_installment=result.monthly_installment,
        processing_fee=result.processing_fee,
    )


@router.post("/allocation", response_model=AllocationResponse)
async def allocation(req: AllocationRequest):
    """Split a payment into principal and interest. Excess is reported, not applied."""
    balances = LoanBalances(
        principal=req.principal,
        principal_paid=req.principal_paid,
        total_interest=req.total_interest,
        interest_paid=req.interest_paid,
    )
    try:
        result = allocate_payment(req.payment, balances, req.policy)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))

    return AllocationResponse(
        principal_paid=result.principal_paid,
        interest_paid=result.interest_paid,
        unallocated=result.unallocated,
    )
