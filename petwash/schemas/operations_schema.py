"""Pydantic schemas for bills, assets, spare parts, inventory and work orders."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field, model_validator

from petwash.schemas.base import CamelModel

BillStatus = Literal["unpaid", "paid", "overdue", "partially_paid", "disputed"]
WorkOrderStatus = Literal["pending", "scheduled", "in_progress", "completed", "cancelled"]


# ---------------------------------------------------------------------------
# Bills
# ---------------------------------------------------------------------------
class BillCreateSchema(CamelModel):
    station_id: int = Field(..., gt=0)
    bill_type: Literal[
        "electricity", "water", "internet", "insurance", "rent", "gas", "maintenance", "other",
    ]
    vendor: str = Field(..., min_length=1, max_length=200)
    account_number: str | None = Field(default=None, max_length=100)
    billing_period: str | None = Field(default=None, max_length=20)
    due_date: date
    period_start: date | None = None
    period_end: date | None = None
    amount: Decimal = Field(..., ge=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    vat: Decimal = Field(default=Decimal("0"), ge=0)
    # Computed as amount + vat when omitted.
    total_amount: Decimal | None = Field(default=None, ge=0)
    status: BillStatus = "unpaid"
    usage_amount: Decimal | None = Field(default=None, ge=0)
    usage_unit: str | None = Field(default=None, max_length=20)
    unit_price: Decimal | None = Field(default=None, ge=0)
    invoice_url: str | None = None
    receipt_url: str | None = None
    notes: str | None = None
    auto_pay_enabled: bool = False


class BillPaymentSchema(CamelModel):
    """Records a payment against a bill; omitting ``paidAmount`` pays the balance."""

    payment_date: date
    paid_amount: Decimal | None = Field(default=None, gt=0)
    payment_method: str | None = Field(default=None, max_length=50)
    payment_reference: str | None = Field(default=None, max_length=100)


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------
class AssetCreateSchema(CamelModel):
    station_id: int = Field(..., gt=0)
    asset_type: str = Field(..., min_length=1, max_length=50)
    asset_name: str = Field(..., min_length=1, max_length=200)
    manufacturer: str | None = Field(default=None, max_length=100)
    model: str | None = Field(default=None, max_length=100)
    serial_number: str | None = Field(default=None, max_length=100)
    purchase_date: date | None = None
    purchase_price: Decimal | None = Field(default=None, ge=0)
    supplier: str | None = Field(default=None, max_length=200)
    warranty_expiry: date | None = None
    warranty_provider: str | None = Field(default=None, max_length=200)
    installation_date: date | None = None
    expected_lifespan_months: int | None = Field(default=None, gt=0)
    depreciation_rate: Decimal | None = Field(default=None, ge=0, le=1)
    current_value: Decimal | None = Field(default=None, ge=0)
    status: Literal["active", "maintenance", "broken", "replaced", "disposed"] = "active"
    last_service_date: date | None = None
    next_service_date: date | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Spare parts and inventory
# ---------------------------------------------------------------------------
class SparePartCreateSchema(CamelModel):
    part_number: str = Field(..., min_length=1, max_length=100)
    part_name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1, max_length=50)
    description: str | None = None
    compatible_assets: list[str] | None = None
    supplier: str | None = Field(default=None, max_length=200)
    supplier_part_number: str | None = Field(default=None, max_length=100)
    unit_cost: Decimal = Field(..., ge=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    lead_time_days: int | None = Field(default=None, ge=0)
    quantity_in_stock: int = Field(default=0, ge=0)
    minimum_stock_level: int = Field(default=5, ge=0)
    reorder_point: int = Field(default=10, ge=0)
    maximum_stock_level: int = Field(default=50, ge=0)
    is_active: bool = True
    is_critical: bool = False

    @model_validator(mode="after")
    def check_levels(self) -> "SparePartCreateSchema":
        """Stock thresholds must be ordered minimum <= reorder <= maximum."""
        if not self.minimum_stock_level <= self.reorder_point <= self.maximum_stock_level:
            raise ValueError("expected minimumStockLevel <= reorderPoint <= maximumStockLevel")
        return self


class StationSparePartCreateSchema(CamelModel):
    station_id: int = Field(..., gt=0)
    spare_part_id: int = Field(..., gt=0)
    quantity: int = Field(default=0, ge=0)
    minimum_quantity: int = Field(default=1, ge=0)
    storage_location: str | None = Field(default=None, max_length=100)


class InventoryAdjustSchema(CamelModel):
    spare_part_id: int = Field(..., gt=0)
    station_id: int | None = Field(default=None, gt=0)
    delta: int
    reason: str = Field(..., min_length=1)
    transaction_type: Literal["purchase", "usage", "adjustment", "return", "damage"] = "adjustment"
    performed_by: str | None = Field(default=None, max_length=100)
    work_order_id: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_delta(self) -> "InventoryAdjustSchema":
        if self.delta == 0:
            raise ValueError("delta must be non-zero")
        return self


# ---------------------------------------------------------------------------
# Work orders
# ---------------------------------------------------------------------------
class PartUsage(CamelModel):
    """One line of ``partsUsed``: ``cost`` is the unit cost."""

    part_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    cost: Decimal = Field(..., ge=0)


class WorkOrderCreateSchema(CamelModel):
    # Generated as WO-<year>-NNNNNN when omitted.
    work_order_number: str | None = Field(default=None, max_length=50)
    station_id: int = Field(..., gt=0)
    asset_id: int | None = Field(default=None, gt=0)
    work_type: Literal["preventive", "corrective", "emergency", "inspection", "upgrade"]
    priority: Literal["low", "medium", "high", "critical"] = "medium"
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    requested_date: datetime | None = None
    scheduled_date: datetime | None = None
    estimated_duration_minutes: int | None = Field(default=None, gt=0)
    actual_duration_minutes: int | None = Field(default=None, gt=0)
    assigned_to_technician_id: str | None = Field(default=None, max_length=100)
    technician_notes: str | None = None
    parts_used: list[PartUsage] | None = None
    labor_cost: Decimal = Field(default=Decimal("0"), ge=0)
    # Derived from partsUsed when omitted.
    parts_cost: Decimal | None = Field(default=None, ge=0)
    # Computed as laborCost + partsCost when omitted.
    total_cost: Decimal | None = Field(default=None, ge=0)
    status: WorkOrderStatus = "pending"
    requires_follow_up: bool = False
    follow_up_notes: str | None = None


class WorkOrderStatusSchema(CamelModel):
    status: WorkOrderStatus
    technician_notes: str | None = None
    actual_duration_minutes: int | None = Field(default=None, gt=0)
    scheduled_date: datetime | None = None
