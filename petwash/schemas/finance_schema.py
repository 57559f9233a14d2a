"""Pydantic schemas for payables, receivables and ledger entries."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import Field, model_validator

from petwash.schemas.base import CamelModel


class PayableCreateSchema(CamelModel):
    invoice_number: str = Field(..., min_length=1, max_length=100)
    supplier_id: str = Field(..., min_length=1, max_length=100)
    supplier_name: str | None = Field(default=None, max_length=200)
    station_id: int | None = Field(default=None, gt=0)
    invoice_date: date
    due_date: date
    amount: Decimal = Field(..., ge=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    # Computed as amount + taxAmount when omitted.
    total_amount: Decimal | None = Field(default=None, ge=0)
    payment_status: Literal["pending", "scheduled", "overdue", "cancelled"] = "pending"
    gl_account_code: str | None = Field(default=None, max_length=20)
    category: str | None = Field(default=None, max_length=50)
    notes: str | None = None


class PayablePaymentSchema(CamelModel):
    payment_date: date
    payment_method: str = Field(..., min_length=1, max_length=50)
    payment_reference: str | None = Field(default=None, max_length=100)


class ReceivableCreateSchema(CamelModel):
    invoice_number: str = Field(..., min_length=1, max_length=100)
    customer_id: str = Field(..., min_length=1, max_length=100)
    customer_name: str | None = Field(default=None, max_length=200)
    invoice_date: date
    due_date: date
    amount: Decimal = Field(..., ge=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    total_amount: Decimal | None = Field(default=None, ge=0)
    payment_status: Literal["pending", "overdue", "written_off"] = "pending"
    gl_account_code: str | None = Field(default=None, max_length=20)
    notes: str | None = None


class ReceivablePaymentSchema(CamelModel):
    amount: Decimal = Field(..., gt=0)
    payment_date: date
    payment_method: str | None = Field(default=None, max_length=50)


class LedgerEntryCreateSchema(CamelModel):
    entry_date: date
    account_code: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=200)
    account_type: Literal["asset", "liability", "equity", "revenue", "expense"]
    debit: Decimal = Field(default=Decimal("0"), ge=0)
    credit: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    description: str | None = None
    source_type: str | None = Field(default=None, max_length=50)
    source_id: int | None = None
    fiscal_year: int | None = Field(default=None, ge=2000, le=2100)
    fiscal_period: int | None = Field(default=None, ge=1, le=12)

    @model_validator(mode="after")
    def check_single_side(self) -> "LedgerEntryCreateSchema":
        """A journal line is either a debit or a credit, never both or neither."""
        if (self.debit > 0) == (self.credit > 0):
            raise ValueError("exactly one of debit or credit must be positive")
        return self
