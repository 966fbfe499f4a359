"""Customer intake and listing."""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from debtnote.config import settings
from debtnote.models.context import RequestContext
from debtnote.models.db import CustomerRecord
from debtnote.models.errors import InvalidInput, RecordNotFound

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "phone", "address_line1", "city", "province")


def generate_customer_code(today: date | None = None) -> str:
    today = today or date.today()
    return f"C{today:%y%m}-{uuid.uuid4().hex[:6].upper()}"


async def create_customer(
    session: AsyncSession,
    ctx: RequestContext,
    data: dict[str, Any],
) -> CustomerRecord:
    """Insert a customer, stamped with the writer's branch and user id."""
    missing = [f for f in REQUIRED_FIELDS if not (data.get(f) or "").strip()]
    if missing:
        raise InvalidInput(f"Missing required customer fields: {', '.join(missing)}")

    income = data.get("monthly_income")
    if income is not None and Decimal(income) < 0:
        raise InvalidInput("Monthly income cannot be negative")

    # Empty form fields are stored as NULL rather than ""
    fields = {k: (v if v != "" else None) for k, v in data.items()}

    customer = CustomerRecord(
        **fields,
        customer_code=generate_customer_code(),
        branch_id=ctx.branch_id,
        created_by=ctx.user_id,
        status="active",
    )
    session.add(customer)
    await session.commit()
    await session.refresh(customer)

    logger.info("Created customer %s (%s) for branch %s", customer.customer_code, customer.id, ctx.branch_id)
    return customer


async def get_customer(session: AsyncSession, customer_id: uuid.UUID) -> CustomerRecord:
    customer = await session.get(CustomerRecord, customer_id)
    if customer is None:
        raise RecordNotFound("Customer", customer_id)
    return customer


async def list_customers(
    session: AsyncSession,
    status: str | None = None,
    limit: int | None = None,
) -> list[CustomerRecord]:
    """Newest customers first, optionally filtered by status."""
    stmt = select(CustomerRecord).order_by(CustomerRecord.created_at.desc())
    if status:
        stmt = stmt.where(CustomerRecord.status == status)
    stmt = stmt.limit(limit or settings.customers_page_size)
    result = await session.execute(stmt)
    return list(result.scalars().all())
