"""Pydantic schemas for tax returns and tax payments."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import Field, model_validator

from petwash.schemas.base import CamelModel

# Highest fiscal period each return type can cover.
PERIODS_PER_YEAR = {"vat_monthly": 12, "vat_quarterly": 4, "income_annual": 1}


class TaxReturnCreateSchema(CamelModel):
    return_type: Literal["vat_monthly", "vat_quarterly", "income_annual"]
    fiscal_year: int = Field(..., ge=2000, le=2100)
    fiscal_period: int = Field(..., ge=1, le=12)
    period_start: date
    period_end: date
    total_revenue: Decimal = Field(..., ge=0)
    taxable_income: Decimal = Field(..., ge=0)
    vat_collected: Decimal = Field(default=Decimal("0"), ge=0)
    vat_paid: Decimal = Field(default=Decimal("0"), ge=0)
    prepared_by: str | None = Field(default=None, max_length=100)
    reviewed_by: str | None = Field(default=None, max_length=100)
    notes: str | None = None
    attachments: list[str] | None = None

    @model_validator(mode="after")
    def check_period(self) -> "TaxReturnCreateSchema":
        if self.period_end < self.period_start:
            raise ValueError("periodEnd must not be before periodStart")
        if self.fiscal_period > PERIODS_PER_YEAR[self.return_type]:
            raise ValueError(
                f"fiscalPeriod must be between 1 and {PERIODS_PER_YEAR[self.return_type]} for {self.return_type}"
            )
        return self


class TaxReturnSubmitSchema(CamelModel):
    submitted_by: str | None = Field(default=None, max_length=100)


class TaxPaymentCreateSchema(CamelModel):
    tax_return_id: int | None = Field(default=None, gt=0)
    payment_type: Literal["vat", "income_tax", "advance_tax"]
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    payment_date: date
    payment_method: str = Field(..., min_length=1, max_length=50)
    bank_reference: str | None = Field(default=None, max_length=100)
    ita_receipt_number: str | None = Field(default=None, max_length=100)
    # Taken from the linked return, or the payment date, when omitted.
    fiscal_year: int | None = Field(default=None, ge=2000, le=2100)
    fiscal_period: int | None = Field(default=None, ge=1, le=12)
    status: Literal["pending", "processed", "confirmed", "rejected"] = "pending"
    confirmation_url: str | None = None
    paid_by: str | None = Field(default=None, max_length=100)
    notes: str | None = None
