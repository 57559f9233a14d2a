"""Per-station operations: bills, assets, spare parts and maintenance."""

from decimal import Decimal

from petwash.domain.models.base import SerializerMixin, TimestampMixin, money, rate, utcnow
from petwash.extensions import db


# ---------------------------------------------------------------------------
# Station bill
# ---------------------------------------------------------------------------
class StationBill(SerializerMixin, TimestampMixin, db.Model):
    """A utility, rent or service charge raised against a station."""

    __tablename__ = "station_bills"

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(
        db.Integer, db.ForeignKey("pet_wash_stations.id"), nullable=False, index=True,
    )
    bill_type = db.Column(db.String(30), nullable=False, index=True)
    vendor = db.Column(db.String(200), nullable=False)
    account_number = db.Column(db.String(100))
    billing_period = db.Column(db.String(20))
    due_date = db.Column(db.Date, nullable=False, index=True)
    period_start = db.Column(db.Date)
    period_end = db.Column(db.Date)
    amount = money(nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    vat = money(nullable=False, default=Decimal("0"))
    total_amount = money(nullable=False)
    status = db.Column(db.String(20), nullable=False, default="unpaid", index=True)
    paid_date = db.Column(db.Date)
    paid_amount = money()
    payment_method = db.Column(db.String(50))
    payment_reference = db.Column(db.String(100))
    usage_amount = db.Column(db.Numeric(12, 3))
    usage_unit = db.Column(db.String(20))
    unit_price = db.Column(db.Numeric(12, 4))
    invoice_url = db.Column(db.Text)
    receipt_url = db.Column(db.Text)
    notes = db.Column(db.Text)
    auto_pay_enabled = db.Column(db.Boolean, nullable=False, default=False)

    @property
    def outstanding(self) -> Decimal:
        return Decimal(self.total_amount) - Decimal(self.paid_amount or 0)


# ---------------------------------------------------------------------------
# Station asset
# ---------------------------------------------------------------------------
class StationAsset(SerializerMixin, TimestampMixin, db.Model):
    """A tracked piece of hardware installed at a station."""

    __tablename__ = "station_assets"

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(
        db.Integer, db.ForeignKey("pet_wash_stations.id"), nullable=False, index=True,
    )
    asset_type = db.Column(db.String(50), nullable=False, index=True)
    asset_name = db.Column(db.String(200), nullable=False)
    manufacturer = db.Column(db.String(100))
    model = db.Column(db.String(100))
    serial_number = db.Column(db.String(100), unique=True)
    purchase_date = db.Column(db.Date)
    purchase_price = money()
    supplier = db.Column(db.String(200))
    warranty_expiry = db.Column(db.Date)
    warranty_provider = db.Column(db.String(200))
    installation_date = db.Column(db.Date)
    expected_lifespan_months = db.Column(db.Integer)
    depreciation_rate = rate()
    current_value = money()
    status = db.Column(db.String(20), nullable=False, default="active", index=True)
    last_service_date = db.Column(db.Date)
    next_service_date = db.Column(db.Date)
    notes = db.Column(db.Text)


# ---------------------------------------------------------------------------
# Spare parts (central warehouse) and per-station allocations
# ---------------------------------------------------------------------------
class SparePart(SerializerMixin, TimestampMixin, db.Model):
    """A catalogue part with its central warehouse stock level."""

    __tablename__ = "spare_parts"

    id = db.Column(db.Integer, primary_key=True)
    part_number = db.Column(db.String(100), unique=True, nullable=False)
    part_name = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(50), nullable=False, index=True)
    description = db.Column(db.Text)
    compatible_assets = db.Column(db.JSON)
    supplier = db.Column(db.String(200))
    supplier_part_number = db.Column(db.String(100))
    unit_cost = money(nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    lead_time_days = db.Column(db.Integer)
    quantity_in_stock = db.Column(db.Integer, nullable=False, default=0)
    minimum_stock_level = db.Column(db.Integer, nullable=False, default=5)
    reorder_point = db.Column(db.Integer, nullable=False, default=10)
    maximum_stock_level = db.Column(db.Integer, nullable=False, default=50)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_critical = db.Column(db.Boolean, nullable=False, default=False)

    @property
    def low_stock(self) -> bool:
        return self.quantity_in_stock <= self.reorder_point

    @property
    def below_minimum(self) -> bool:
        return self.quantity_in_stock < self.minimum_stock_level

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["lowStock"] = self.low_stock
        data["belowMinimum"] = self.below_minimum
        return data


class StationSparePart(SerializerMixin, TimestampMixin, db.Model):
    """Quantity of a spare part held on site at a station."""

    __tablename__ = "station_spare_parts"
    __table_args__ = (
        db.UniqueConstraint("station_id", "spare_part_id", name="uq_station_spare_part"),
    )

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(
        db.Integer, db.ForeignKey("pet_wash_stations.id"), nullable=False, index=True,
    )
    spare_part_id = db.Column(
        db.Integer, db.ForeignKey("spare_parts.id"), nullable=False, index=True,
    )
    quantity = db.Column(db.Integer, nullable=False, default=0)
    minimum_quantity = db.Column(db.Integer, nullable=False, default=1)
    storage_location = db.Column(db.String(100))
    last_restocked_at = db.Column(db.DateTime)
    last_restocked_by = db.Column(db.String(100))

    spare_part = db.relationship("SparePart")

    @property
    def low_stock(self) -> bool:
        return self.quantity < self.minimum_quantity


class StockTransaction(SerializerMixin, db.Model):
    """Append-only movement of spare part stock."""

    __tablename__ = "stock_transactions"

    id = db.Column(db.Integer, primary_key=True)
    transaction_number = db.Column(db.String(50), unique=True, nullable=False)
    spare_part_id = db.Column(
        db.Integer, db.ForeignKey("spare_parts.id"), nullable=False, index=True,
    )
    transaction_type = db.Column(db.String(20), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    from_station_id = db.Column(db.Integer, db.ForeignKey("pet_wash_stations.id"))
    to_station_id = db.Column(db.Integer, db.ForeignKey("pet_wash_stations.id"))
    unit_cost = money()
    total_cost = money()
    work_order_id = db.Column(db.Integer, db.ForeignKey("maintenance_work_orders.id"))
    performed_by = db.Column(db.String(100))
    reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)


# ---------------------------------------------------------------------------
# Maintenance work order
# ---------------------------------------------------------------------------
class MaintenanceWorkOrder(SerializerMixin, TimestampMixin, db.Model):
    """A maintenance task against a station, optionally for one asset."""

    __tablename__ = "maintenance_work_orders"

    id = db.Column(db.Integer, primary_key=True)
    work_order_number = db.Column(db.String(50), unique=True, nullable=False)
    station_id = db.Column(
        db.Integer, db.ForeignKey("pet_wash_stations.id"), nullable=False, index=True,
    )
    asset_id = db.Column(db.Integer, db.ForeignKey("station_assets.id"), index=True)
    work_type = db.Column(db.String(30), nullable=False)
    priority = db.Column(db.String(20), nullable=False, default="medium", index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    requested_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    scheduled_date = db.Column(db.DateTime)
    completed_date = db.Column(db.DateTime)
    estimated_duration_minutes = db.Column(db.Integer)
    actual_duration_minutes = db.Column(db.Integer)
    assigned_to_technician_id = db.Column(db.String(100), index=True)
    technician_notes = db.Column(db.Text)
    parts_used = db.Column(db.JSON)
    labor_cost = money(nullable=False, default=Decimal("0"))
    parts_cost = money(nullable=False, default=Decimal("0"))
    total_cost = money(nullable=False, default=Decimal("0"))
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    requires_follow_up = db.Column(db.Boolean, nullable=False, default=False)
    follow_up_notes = db.Column(db.Text)
