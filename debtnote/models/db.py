"""SQLAlchemy ORM models for PostgreSQL persistence."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    Numeric,
    Date,
    DateTime,
    Boolean,
    ForeignKey,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column

from debtnote.engine.allocation import installment_status


class Base(DeclarativeBase):
    pass


class BranchRecord(Base):
    __tablename__ = "branches"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100))
    code: Mapped[str] = mapped_column(String(20), unique=True)

    loans: Mapped[list["LoanRecord"]] = relationship(back_populates="branch")


class CustomerRecord(Base):
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    customer_code: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    branch_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("branches.id"), nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True))
    status: Mapped[str] = mapped_column(String(20), default="active")

    # Personal
    first_name: Mapped[str] = mapped_column(String(100))
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100))
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    civil_status: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Contact
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(String(30))
    alternate_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Address
    address_line1: Mapped[str] = mapped_column(String(255))
    address_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    barangay: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str] = mapped_column(String(100))
    province: Mapped[str] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Identification & employment
    id_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    id_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    monthly_income: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    # Banking / e-wallets
    bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bank_account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gcash_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    paymaya_number: Mapped[str | None] = mapped_column(String(30), nullable=True)

    loans: Mapped[list["LoanRecord"]] = relationship(back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class LoanProductRecord(Base):
    __tablename__ = "loan_products"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(10), unique=True)  # "MBL", "SAL", "AGL"
    name: Mapped[str] = mapped_column(String(100))

    interest_rate: Mapped[Decimal] = mapped_column(Numeric(6, 3))  # Annual, percent
    interest_calculation: Mapped[str] = mapped_column(String(20))  # declining / flat / simple
    processing_fee_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    processing_fee_flat: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)

    min_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    max_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    min_tenure_months: Mapped[int] = mapped_column(Integer)
    max_tenure_months: Mapped[int] = mapped_column(Integer)
    repayment_frequency: Mapped[str] = mapped_column(String(20), default="monthly")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    loans: Mapped[list["LoanRecord"]] = relationship(back_populates="product")


class LoanRecord(Base):
    __tablename__ = "loans"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    loan_number: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("customers.id"))
    loan_product_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("loan_products.id"))
    branch_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("branches.id"), nullable=True)
    loan_officer_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True))
    created_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True))
    approved_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    # Terms and computed figures
    principal_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    interest_rate: Mapped[Decimal] = mapped_column(Numeric(6, 3))
    tenure_months: Mapped[int] = mapped_column(Integer)
    repayment_frequency: Mapped[str] = mapped_column(String(20), default="monthly")
    total_interest: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    monthly_installment: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    processing_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    # Running balances
    principal_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    interest_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    outstanding_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    application_date: Mapped[date] = mapped_column(Date)
    maturity_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    customer: Mapped["CustomerRecord"] = relationship(back_populates="loans")
    product: Mapped["LoanProductRecord"] = relationship(back_populates="loans")
    branch: Mapped["BranchRecord"] = relationship(back_populates="loans")
    payments: Mapped[list["PaymentRecord"]] = relationship(
        back_populates="loan", order_by="PaymentRecord.payment_date.desc()"
    )
    schedules: Mapped[list["LoanScheduleRecord"]] = relationship(
        back_populates="loan",
        order_by="LoanScheduleRecord.installment_number",
        cascade="all, delete-orphan",
    )

    @property
    def product_name(self) -> str | None:
        return self.product.name if self.product is not None else None

    @property
    def branch_name(self) -> str | None:
        return self.branch.name if self.branch is not None else None


class LoanScheduleRecord(Base):
    __tablename__ = "loan_schedules"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("loans.id"), index=True)
    installment_number: Mapped[int] = mapped_column(Integer)
    due_date: Mapped[date] = mapped_column(Date)
    principal_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    interest_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending / partial / paid

    loan: Mapped["LoanRecord"] = relationship(back_populates="schedules")

    @property
    def current_status(self) -> str:
        """Stored status, or "overdue" for an unpaid installment past its due date."""
        return installment_status(
            Decimal(self.total_amount), Decimal(self.paid_amount or 0), self.due_date, date.today()
        ).value


class PaymentRecord(Base):
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    loan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("loans.id"), index=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("customers.id"))
    payment_date: Mapped[date] = mapped_column(Date, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    principal_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    interest_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    payment_method: Mapped[str] = mapped_column(String(20), default="cash")
    payment_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    collected_by: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True))
    status: Mapped[str] = mapped_column(String(20), default="completed")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    loan: Mapped["LoanRecord"] = relationship(back_populates="payments")
    customer: Mapped["CustomerRecord"] = relationship()

    @property
    def loan_number(self) -> str | None:
        return self.loan.loan_number if self.loan is not None else None
