"""Payment allocation against a loan's remaining principal and interest.

Pure functions: Decimal in, dataclass out. No I/O.

Amounts are split with exact Decimal arithmetic (no division), so no rounding
happens here. Callers that persist the split check their inputs with
engine.amortization.require_cents first, so the portions stay in cents.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from debtnote.models.errors import InvalidInput
from debtnote.models.loan import (
    AllocationPolicy,
    InstallmentStatus,
    LoanBalances,
    PaymentAllocation,
)

TWO_PLACES = Decimal("0.01")


def coerce_policy(policy: AllocationPolicy | str) -> AllocationPolicy:
    if isinstance(policy, AllocationPolicy):
        return policy
    try:
        return AllocationPolicy(str(policy).strip().lower())
    except ValueError:
        raise InvalidInput(f"Unknown allocation policy: {policy!r}") from None


def _validate_balances(balances: LoanBalances) -> None:
    fields = {
        "principal": balances.principal,
        "principal_paid": balances.principal_paid,
        "total_interest": balances.total_interest,
        "interest_paid": balances.interest_paid,
    }
    for name, value in fields.items():
        if value < 0:
            raise InvalidInput(f"{name} cannot be negative")
    if balances.principal_paid > balances.principal:
        raise InvalidInput("principal_paid exceeds principal")
    if balances.interest_paid > balances.total_interest:
        raise InvalidInput("interest_paid exceeds total_interest")


def allocate_payment(
    payment: Decimal,
    balances: LoanBalances,
    policy: AllocationPolicy | str = AllocationPolicy.PRINCIPAL_FIRST,
) -> PaymentAllocation:
    """Split a payment into principal and interest portions.

    PRINCIPAL_FIRST (default) retires outstanding principal before any
    interest; INTEREST_FIRST does the reverse. Each portion is capped by what
    remains owing on that side.

    Whatever exceeds principal_remaining + interest_remaining is returned as
    ``unallocated`` and applied nowhere. Rejecting, crediting or rolling that
    excess forward is the caller's decision.

    Raises InvalidInput when the payment is not positive or the balances are
    negative or inconsistent.
    """
    policy = coerce_policy(policy)
    if payment <= 0:
        raise InvalidInput("Payment amount must be positive")
    _validate_balances(balances)

    principal_remaining = balances.principal_remaining
    interest_remaining = balances.interest_remaining

    if policy is AllocationPolicy.PRINCIPAL_FIRST:
        principal_paid = min(payment, principal_remaining)
        interest_paid = min(payment - principal_paid, interest_remaining)
    else:
        interest_paid = min(payment, interest_remaining)
        principal_paid = min(payment - interest_paid, principal_remaining)

    return PaymentAllocation(
        principal_paid=principal_paid,
        interest_paid=interest_paid,
        unallocated=payment - principal_paid - interest_paid,
    )


def outstanding_balance(total_amount: Decimal, amount_paid: Decimal) -> Decimal:
    """Total amount minus everything paid to date, floored at zero."""
    remaining = total_amount - amount_paid
    if remaining < 0:
        remaining = Decimal("0")
    return remaining.quantize(TWO_PLACES, ROUND_HALF_UP)


def apply_to_installments(payment: Decimal, amounts_due: list[Decimal]) -> list[Decimal]:
    """Spread a payment over installments, earliest first.

    amounts_due[i] is what installment i still owes. Returns the amount
    applied to each installment; anything beyond the total due is left out.
    """
    applied: list[Decimal] = []
    left = payment
    for due in amounts_due:
        portion = min(left, max(due, Decimal("0")))
        applied.append(portion)
        left -= portion
    return applied


def installment_status(
    total_amount: Decimal,
    paid_amount: Decimal,
    due_date: date | None = None,
    today: date | None = None,
) -> InstallmentStatus:
    """paid / partial / pending, or overdue once an unpaid installment is past due."""
    if paid_amount >= total_amount:
        return InstallmentStatus.PAID
    if due_date is not None and today is not None and due_date < today:
        return InstallmentStatus.OVERDUE
    if paid_amount > 0:
        return InstallmentStatus.PARTIAL
    return InstallmentStatus.PENDING
