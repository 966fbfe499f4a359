"""Validated form input handed from the API layer to the services."""

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from debtnote.models.loan import PaymentMethod


@dataclass(frozen=True)
class LoanApplication:
    customer_id: uuid.UUID
    loan_product_id: uuid.UUID
    principal_amount: Decimal
    tenure_months: int
    application_date: date
    repayment_frequency: str | None = None  # Falls back to the product's
    notes: str | None = None


@dataclass(frozen=True)
class PaymentEntry:
    loan_id: uuid.UUID
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_reference: str | None = None
    notes: str | None = None
