"""Customer routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from debtnote.api.deps import get_context, get_db
from debtnote.api.schemas import CustomerCreate, CustomerResponse
from debtnote.models.context import RequestContext
from debtnote.models.errors import InvalidInput, RecordNotFound
from debtnote.services import customers

router = APIRouter(prefix="/api/v1/customers", tags=["customers"])


@router.get("", response_model=list[CustomerResponse])
async def list_customers(
    status: str | None = None,
    limit: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    return await customers.list_customers(db, status=status, limit=limit)


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    req: CustomerCreate,
    ctx: RequestContext = Depends(get_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await customers.create_customer(db, ctx, req.model_dump())
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await customers.get_customer(db, customer_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
