"""Station monitoring: telemetry ingestion, the alert lifecycle and daily metrics."""

import logging
from datetime import date, datetime, timezone

from flask import current_app

from petwash.domain.exceptions import ConflictError, ResourceNotFoundError
from petwash.domain.health import low_supply_readings
from petwash.domain.lifecycle import ALERT_LIFECYCLE
from petwash.domain.models import StationAlert
from petwash.extensions import transaction
from petwash.repositories.monitoring_repository import (
    AlertRepository,
    MetricsRepository,
    TelemetryRepository,
)
from petwash.repositories.network_repository import StationRepository
from petwash.services.crud_service import CrudService
from petwash.services.health_service import StationHealthService
from petwash.services.operations_service import WorkOrderService

logger = logging.getLogger(__name__)

SEVERITY_TO_PRIORITY = {"critical": "critical", "warning": "high", "info": "medium"}


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TelemetryService:
    """Records readings and reacts to them."""

    def __init__(self):
        self._telemetry = TelemetryRepository()
        self._stations = StationRepository()
        self._alerts = AlertRepository()
        self._health = StationHealthService()

    def record(self, station_id: int, **values) -> dict:
        """Store a reading, bump the heartbeat, raise low-supply alerts, refresh health.

        All writes share one transaction.
        """
        values["station_id"] = station_id
        recorded_at = values.get("recorded_at") or datetime.now(timezone.utc)
        values["recorded_at"] = recorded_at
        threshold = current_app.config["LOW_SUPPLY_THRESHOLD"]
        raised = []

        with transaction():
            station = self._stations.get_for_update(station_id)
            if station is None:
                raise ResourceNotFoundError("Station", station_id)
            reading = self._telemetry.create(**values)

            heartbeat = _naive_utc(recorded_at)
            if station.last_heartbeat is None or _naive_utc(station.last_heartbeat) < heartbeat:
                station.last_heartbeat = heartbeat

            low = low_supply_readings(values, threshold)
            if low and not self._alerts.get_open_for_station(station_id, alert_type="low_supplies"):
                levels = ", ".join(f"{name.replace('_level', '')} {level:g}%" for name, level in low.items())
                alert = self._alerts.create(
                    station_id=station_id,
                    alert_type="low_supplies",
                    severity="warning",
                    title="Low supplies",
                    message=f"Supply levels below {threshold:g}%: {levels}",
                    triggered_at=heartbeat,
                    trigger_value=f"{min(low.values()):g}",
                    threshold_value=f"{threshold:g}",
                )
                raised.append(alert.to_dict())
                logger.warning("Station id=%s low supplies: %s", station_id, levels)

            health = self._health.refresh(station)

        data = reading.to_dict()
        data["stationHealthStatus"] = health
        data["alertsRaised"] = raised
        return data

    def recent(self, station_id: int, limit: int = 100) -> list[dict]:
        if self._stations.get_by_id(station_id) is None:
            raise ResourceNotFoundError("Station", station_id)
        return [row.to_dict() for row in self._telemetry.get_recent(station_id, limit)]


class AlertService(CrudService):
    """Alert CRUD and the ``open -> acknowledged -> resolved|ignored`` lifecycle.

    Every transition recomputes the station's health in the same transaction.
    """

    def __init__(self, work_orders: WorkOrderService | None = None):
        self._alerts = AlertRepository()
        self._stations = StationRepository()
        self._health = StationHealthService()
        self._work_orders = work_orders or WorkOrderService()
        super().__init__(
            self._alerts,
            "StationAlert",
            references={"station_id": (self._stations, "Station")},
        )

    def _after_write(self, alert: StationAlert, previous: dict | None = None) -> None:
        self._health.refresh(self._stations.get_by_id(alert.station_id))

    def acknowledge(self, alert_id: int, acknowledged_by: str) -> dict:
        return self._transition(
            alert_id,
            "acknowledged",
            acknowledged_at=datetime.now(timezone.utc),
            acknowledged_by=acknowledged_by,
        )

    def resolve(self, alert_id: int, resolved_by: str, resolution_notes: str | None = None) -> dict:
        return self._transition(
            alert_id,
            "resolved",
            resolved_at=datetime.now(timezone.utc),
            resolved_by=resolved_by,
            resolution_notes=resolution_notes,
        )

    def ignore(self, alert_id: int, resolved_by: str | None = None, resolution_notes: str | None = None) -> dict:
        return self._transition(
            alert_id,
            "ignored",
            resolved_at=datetime.now(timezone.utc),
            resolved_by=resolved_by,
            resolution_notes=resolution_notes,
        )

    def _transition(self, alert_id: int, status: str, **changes) -> dict:
        with transaction():
            alert = self.get_instance(alert_id, for_update=True)
            ALERT_LIFECYCLE.check(alert.status, status)
            self._alerts.update(alert, status=status, **changes)
            self._after_write(alert)
        logger.info("Alert id=%s -> %s", alert_id, status)
        return alert.to_dict()

    def create_work_order(
        self,
        alert_id: int,
        title: str | None = None,
        work_type: str = "corrective",
        priority: str | None = None,
        assigned_to_technician_id: str | None = None,
    ) -> dict:
        """Open a remediation work order for an alert and link the two."""
        with transaction():
            alert = self.get_instance(alert_id, for_update=True)
            if ALERT_LIFECYCLE.is_terminal(alert.status):
                raise ConflictError(f"Alert {alert_id} is already {alert.status}")
            if alert.work_order_id:
                raise ConflictError(
                    f"Alert {alert_id} already has work order {alert.work_order_id}",
                    details={"workOrderId": alert.work_order_id},
                )
            order = self._work_orders.add(
                station_id=alert.station_id,
                work_type=work_type,
                priority=priority or SEVERITY_TO_PRIORITY[alert.severity],
                title=title or f"Remediate: {alert.title}",
                description=alert.message,
                assigned_to_technician_id=assigned_to_technician_id,
                status="pending",
            )
            alert.work_order_id = order.id
        logger.info("Alert id=%s linked to work order %s", alert_id, order.work_order_number)
        return {"alert": alert.to_dict(), "workOrder": order.to_dict()}


class MetricsService(CrudService):
    def __init__(self):
        self._metrics = MetricsRepository()
        super().__init__(
            self._metrics,
            "StationPerformanceMetrics",
            references={"station_id": (StationRepository(), "Station")},
        )

    def for_station(
        self,
        station_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[dict]:
        return [row.to_dict() for row in self._metrics.get_range(station_id, start_date, end_date)]
