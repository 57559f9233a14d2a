"""Pydantic schemas for electronic tax invoices."""

from decimal import Decimal
from typing import Literal

from pydantic import EmailStr, Field

from petwash.schemas.base import CamelModel

ServiceType = Literal[
    "k9000_wash", "sitter_suite", "walk_my_pet", "pettrek_transport", "pet_wash", "other",
]


class LineItemSchema(CamelModel):
    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)


class InvoiceCreateSchema(CamelModel):
    service_type: ServiceType
    transaction_id: str | None = Field(default=None, max_length=100)
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_email: EmailStr | None = None
    customer_phone: str | None = Field(default=None, max_length=30)
    # Presence of a tax id makes the invoice B2B.
    customer_tax_id: str | None = Field(default=None, min_length=1, max_length=20)
    customer_address: str | None = None
    total_amount: Decimal = Field(..., gt=0)
    vat_rate: Decimal | None = Field(default=None, ge=0, lt=1)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    line_items: list[LineItemSchema] = Field(..., min_length=1)
    payment_method: str | None = Field(default=None, max_length=50)
    payment_status: Literal["paid", "pending", "refunded"] = "paid"
    created_by: str | None = Field(default=None, max_length=100)
