"""Pydantic schemas for telemetry, alerts and performance metrics."""

import datetime as dt
from decimal import Decimal
from typing import Literal

from pydantic import Field

from petwash.schemas.base import CamelModel


class TelemetryCreateSchema(CamelModel):
    station_id: int = Field(..., gt=0)
    recorded_at: dt.datetime | None = None
    water_pressure: float | None = Field(default=None, ge=0)
    water_temperature: float | None = None
    water_flow_rate: float | None = Field(default=None, ge=0)
    water_tank_level: float | None = Field(default=None, ge=0, le=100)
    soap_level: float | None = Field(default=None, ge=0, le=100)
    conditioner_level: float | None = Field(default=None, ge=0, le=100)
    sanitizer_level: float | None = Field(default=None, ge=0, le=100)
    power_consumption: float | None = Field(default=None, ge=0)
    voltage: float | None = Field(default=None, ge=0)
    current: float | None = Field(default=None, ge=0)
    ambient_temperature: float | None = None
    humidity: float | None = Field(default=None, ge=0, le=100)
    active_washes: int = Field(default=0, ge=0)
    washes_completed_today: int = Field(default=0, ge=0)
    system_load: float | None = Field(default=None, ge=0, le=100)
    error_count: int = Field(default=0, ge=0)
    warning_count: int = Field(default=0, ge=0)
    signal_strength: int | None = None
    network_latency: int | None = Field(default=None, ge=0)


class AlertNotification(CamelModel):
    """Record of one notification sent about an alert."""

    channel: Literal["email", "sms", "push", "slack", "webhook"]
    recipient: str = Field(..., min_length=1)
    sent_at: dt.datetime


class AlertCreateSchema(CamelModel):
    station_id: int = Field(..., gt=0)
    alert_type: str = Field(..., min_length=1, max_length=50)
    severity: Literal["info", "warning", "critical"]
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    triggered_at: dt.datetime | None = None
    trigger_value: str | None = Field(default=None, max_length=100)
    threshold_value: str | None = Field(default=None, max_length=100)
    notifications_sent: list[AlertNotification] | None = None


class AlertAcknowledgeSchema(CamelModel):
    acknowledged_by: str = Field(..., min_length=1, max_length=100)


class AlertResolveSchema(CamelModel):
    resolved_by: str = Field(..., min_length=1, max_length=100)
    resolution_notes: str | None = None


class AlertIgnoreSchema(CamelModel):
    resolved_by: str | None = Field(default=None, max_length=100)
    resolution_notes: str | None = None


class AlertWorkOrderSchema(CamelModel):
    title: str | None = Field(default=None, max_length=200)
    work_type: Literal["preventive", "corrective", "emergency", "inspection", "upgrade"] = "corrective"
    priority: Literal["low", "medium", "high", "critical"] | None = None
    assigned_to_technician_id: str | None = Field(default=None, max_length=100)


class MetricsCreateSchema(CamelModel):
    station_id: int = Field(..., gt=0)
    date: dt.date
    total_washes: int = Field(default=0, ge=0)
    completed_washes: int = Field(default=0, ge=0)
    cancelled_washes: int = Field(default=0, ge=0)
    total_revenue: Decimal = Field(default=Decimal("0"), ge=0)
    average_wash_price: Decimal | None = Field(default=None, ge=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    unique_customers: int = Field(default=0, ge=0)
    new_customers: int = Field(default=0, ge=0)
    returning_customers: int = Field(default=0, ge=0)
    water_used_liters: Decimal | None = Field(default=None, ge=0)
    electricity_used_kwh: Decimal | None = Field(default=None, ge=0)
    soap_used_liters: Decimal | None = Field(default=None, ge=0)
    uptime_minutes: int = Field(default=0, ge=0, le=1440)
    downtime_minutes: int = Field(default=0, ge=0, le=1440)
    uptime_percent: Decimal | None = Field(default=None, ge=0, le=100)
    operating_cost: Decimal | None = Field(default=None, ge=0)
    maintenance_cost: Decimal | None = Field(default=None, ge=0)
    average_rating: Decimal | None = Field(default=None, ge=0, le=5)
    total_reviews: int = Field(default=0, ge=0)
