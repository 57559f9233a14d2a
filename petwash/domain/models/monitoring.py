"""Station monitoring: raw telemetry, alerts and daily performance rollups."""

from decimal import Decimal

from petwash.domain.models.base import SerializerMixin, TimestampMixin, money, utcnow
from petwash.extensions import db


class StationTelemetry(SerializerMixin, db.Model):
    """A single sensor reading reported by a station."""

    __tablename__ = "station_telemetry"
    __table_args__ = (db.Index("ix_station_telemetry_station_recorded", "station_id", "recorded_at"),)

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(
        db.Integer, db.ForeignKey("pet_wash_stations.id"), nullable=False, index=True,
    )
    recorded_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    water_pressure = db.Column(db.Float)
    water_temperature = db.Column(db.Float)
    water_flow_rate = db.Column(db.Float)
    water_tank_level = db.Column(db.Float)
    soap_level = db.Column(db.Float)
    conditioner_level = db.Column(db.Float)
    sanitizer_level = db.Column(db.Float)
    power_consumption = db.Column(db.Float)
    voltage = db.Column(db.Float)
    current = db.Column(db.Float)
    ambient_temperature = db.Column(db.Float)
    humidity = db.Column(db.Float)
    active_washes = db.Column(db.Integer, default=0)
    washes_completed_today = db.Column(db.Integer, default=0)
    system_load = db.Column(db.Float)
    error_count = db.Column(db.Integer, default=0)
    warning_count = db.Column(db.Integer, default=0)
    signal_strength = db.Column(db.Integer)
    network_latency = db.Column(db.Integer)


class StationAlert(SerializerMixin, TimestampMixin, db.Model):
    """An operational alert raised for a station."""

    __tablename__ = "station_alerts"

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(
        db.Integer, db.ForeignKey("pet_wash_stations.id"), nullable=False, index=True,
    )
    alert_type = db.Column(db.String(50), nullable=False, index=True)
    severity = db.Column(db.String(20), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    triggered_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    trigger_value = db.Column(db.String(100))
    threshold_value = db.Column(db.String(100))
    status = db.Column(db.String(20), nullable=False, default="open", index=True)
    acknowledged_at = db.Column(db.DateTime)
    acknowledged_by = db.Column(db.String(100))
    resolved_at = db.Column(db.DateTime)
    resolved_by = db.Column(db.String(100))
    resolution_notes = db.Column(db.Text)
    work_order_id = db.Column(db.Integer, db.ForeignKey("maintenance_work_orders.id"))
    notifications_sent = db.Column(db.JSON)


class StationPerformanceMetrics(SerializerMixin, TimestampMixin, db.Model):
    """Daily operating totals for one station."""

    __tablename__ = "station_performance_metrics"
    __table_args__ = (db.UniqueConstraint("station_id", "date", name="uq_station_metrics_date"),)

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(
        db.Integer, db.ForeignKey("pet_wash_stations.id"), nullable=False, index=True,
    )
    date = db.Column(db.Date, nullable=False, index=True)
    total_washes = db.Column(db.Integer, nullable=False, default=0)
    completed_washes = db.Column(db.Integer, nullable=False, default=0)
    cancelled_washes = db.Column(db.Integer, nullable=False, default=0)
    total_revenue = money(nullable=False, default=Decimal("0"))
    average_wash_price = money()
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    unique_customers = db.Column(db.Integer, default=0)
    new_customers = db.Column(db.Integer, default=0)
    returning_customers = db.Column(db.Integer, default=0)
    water_used_liters = db.Column(db.Numeric(10, 2))
    electricity_used_kwh = db.Column(db.Numeric(10, 2))
    soap_used_liters = db.Column(db.Numeric(10, 2))
    uptime_minutes = db.Column(db.Integer, default=0)
    downtime_minutes = db.Column(db.Integer, default=0)
    uptime_percent = db.Column(db.Numeric(5, 2))
    operating_cost = money()
    maintenance_cost = money()
    average_rating = db.Column(db.Numeric(3, 2))
    total_reviews = db.Column(db.Integer, default=0)
