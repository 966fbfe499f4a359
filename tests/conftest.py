"""Canonical test fixtures used across engine, service and API tests.

Fixture: Micro Business Loan product, 12% p.a. flat, 2% + 100 processing fee,
5,000-100,000 over 3-24 months. One active customer, one active 10,000 loan.
"""

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from debtnote.models.context import RequestContext
from debtnote.models.db import CustomerRecord, LoanProductRecord, LoanRecord
from debtnote.models.loan import InterestMethod, LoanBalances, LoanTerms

USER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
BRANCH_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id=USER_ID, branch_id=BRANCH_ID)


@pytest.fixture
def session() -> MagicMock:
    """AsyncSession stand-in: async methods become AsyncMocks automatically."""
    session = MagicMock(spec=AsyncSession)
    result = MagicMock()
    result.scalars.return_value.all.return_value = []
    session.execute = AsyncMock(return_value=result)
    return session


@pytest.fixture
def flat_terms() -> LoanTerms:
    return LoanTerms(
        principal=Decimal("10000"),
        annual_rate=Decimal("12"),
        tenure_months=12,
        method=InterestMethod.FLAT,
    )


@pytest.fixture
def fresh_balances() -> LoanBalances:
    """Flat loan above, nothing paid yet."""
    return LoanBalances(
        principal=Decimal("10000"),
        principal_paid=Decimal("0"),
        total_interest=Decimal("1200"),
        interest_paid=Decimal("0"),
    )


@pytest.fixture
def product() -> LoanProductRecord:
    return LoanProductRecord(
        id=uuid.uuid4(),
        code="MBL",
        name="Micro Business Loan",
        interest_rate=Decimal("12"),
        interest_calculation="flat",
        processing_fee_percentage=Decimal("2"),
        processing_fee_flat=Decimal("100"),
        min_amount=Decimal("5000"),
        max_amount=Decimal("100000"),
        min_tenure_months=3,
        max_tenure_months=24,
        repayment_frequency="monthly",
        is_active=True,
    )


@pytest.fixture
def customer() -> CustomerRecord:
    return CustomerRecord(
        id=uuid.uuid4(),
        customer_code="C2410-ABC123",
        branch_id=BRANCH_ID,
        created_by=USER_ID,
        status="active",
        first_name="Maria",
        last_name="Santos",
        phone="09171234567",
        email=None,
        address_line1="12 Rizal St",
        city="Quezon City",
        province="Metro Manila",
    )


@pytest.fixture
def active_loan(customer, product) -> LoanRecord:
    return LoanRecord(
        id=uuid.uuid4(),
        loan_number="LN-202410-0000AA",
        customer_id=customer.id,
        loan_product_id=product.id,
        branch_id=BRANCH_ID,
        loan_officer_id=USER_ID,
        created_by=USER_ID,
        principal_amount=Decimal("10000.00"),
        interest_rate=Decimal("12"),
        tenure_months=12,
        repayment_frequency="monthly",
        total_interest=Decimal("1200.00"),
        total_amount=Decimal("11200.00"),
        monthly_installment=Decimal("933.33"),
        processing_fee=Decimal("300.00"),
        principal_paid=Decimal("0"),
        interest_paid=Decimal("0"),
        outstanding_balance=Decimal("11200.00"),
        application_date=date(2024, 10, 1),
        maturity_date=date(2025, 10, 1),
        status="active",
        notes=None,
    )
