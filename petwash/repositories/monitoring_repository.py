"""Repositories for telemetry, alerts and performance metrics."""

from datetime import date

from petwash.domain.models import StationAlert, StationPerformanceMetrics, StationTelemetry
from petwash.repositories.base import BaseRepository

ACTIVE_ALERT_STATUSES = ("open", "acknowledged")


class TelemetryRepository(BaseRepository[StationTelemetry]):
    def __init__(self):
        super().__init__(StationTelemetry)

    def get_latest(self, station_id: int) -> StationTelemetry | None:
        return (
            StationTelemetry.query
            .filter_by(station_id=station_id)
            .order_by(StationTelemetry.recorded_at.desc(), StationTelemetry.id.desc())
            .first()
        )

    def get_recent(self, station_id: int, limit: int = 100) -> list[StationTelemetry]:
        return (
            StationTelemetry.query
            .filter_by(station_id=station_id)
            .order_by(StationTelemetry.recorded_at.desc(), StationTelemetry.id.desc())
            .limit(limit)
            .all()
        )


class AlertRepository(BaseRepository[StationAlert]):
    def __init__(self):
        super().__init__(
            StationAlert,
            default_order=[StationAlert.triggered_at.desc(), StationAlert.id.desc()],
        )

    def get_open_for_station(self, station_id: int, alert_type: str | None = None) -> list[StationAlert]:
        """Alerts that still need attention (open or acknowledged)."""
        query = StationAlert.query.filter(
            StationAlert.station_id == station_id,
            StationAlert.status.in_(ACTIVE_ALERT_STATUSES),
        )
        if alert_type:
            query = query.filter(StationAlert.alert_type == alert_type)
        return query.order_by(StationAlert.triggered_at.desc()).all()


class MetricsRepository(BaseRepository[StationPerformanceMetrics]):
    def __init__(self):
        super().__init__(StationPerformanceMetrics, default_order=StationPerformanceMetrics.date)

    def get_range(
        self,
        station_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[StationPerformanceMetrics]:
        query = StationPerformanceMetrics.query.filter_by(station_id=station_id)
        if start_date:
            query = query.filter(StationPerformanceMetrics.date >= start_date)
        if end_date:
            query = query.filter(StationPerformanceMetrics.date <= end_date)
        return query.order_by(StationPerformanceMetrics.date).all()
