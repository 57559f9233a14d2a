"""Monitoring API — telemetry, alerts and daily performance metrics."""

from flask import request
from flask_restx import Namespace, Resource

from petwash.api.common import create_record, date_arg, json_body, parse_body, schema_model
from petwash.auth import require_admin
from petwash.schemas.base import to_columns, validate_payload
from petwash.schemas.monitoring_schema import (
    AlertAcknowledgeSchema,
    AlertCreateSchema,
    AlertIgnoreSchema,
    AlertResolveSchema,
    AlertWorkOrderSchema,
    MetricsCreateSchema,
    TelemetryCreateSchema,
)
from petwash.schemas.response import success_response
from petwash.services.monitoring_service import AlertService, MetricsService, TelemetryService

ns = Namespace("monitoring", description="Station telemetry, alerts and metrics", decorators=[require_admin])

telemetry_model = schema_model(ns, TelemetryCreateSchema)
alert_model = schema_model(ns, AlertCreateSchema)
acknowledge_model = schema_model(ns, AlertAcknowledgeSchema)
resolve_model = schema_model(ns, AlertResolveSchema)
ignore_model = schema_model(ns, AlertIgnoreSchema)
alert_work_order_model = schema_model(ns, AlertWorkOrderSchema)
metrics_model = schema_model(ns, MetricsCreateSchema)

# ---------------------------------------------------------------------------
# Service instances
# ---------------------------------------------------------------------------
_telemetry_svc = TelemetryService()
_alert_svc = AlertService()
_metrics_svc = MetricsService()


# ---------------------------------------------------------------------------
# Telemetry
# ---------------------------------------------------------------------------
@ns.route("/stations/<int:station_id>/telemetry")
@ns.param("station_id", "The station ID")
class StationTelemetry(Resource):
    @ns.doc("list_station_telemetry", params={"limit": "Maximum readings to return (default 100)"})
    def get(self, station_id: int):
        """Recent readings, newest first."""
        limit = request.args.get("limit", default=100, type=int)
        return success_response(_telemetry_svc.recent(station_id, max(1, min(limit, 1000))))

    @ns.doc("record_station_telemetry")
    @ns.expect(telemetry_model)
    def post(self, station_id: int):
        """Record a reading; updates the heartbeat, low-supply alerts and health."""
        values = to_columns(parse_body(TelemetryCreateSchema, station_id=station_id))
        values.pop("station_id")
        return success_response(_telemetry_svc.record(station_id, **values), 201)


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------
@ns.route("/alerts")
class AlertList(Resource):
    @ns.doc("list_alerts")
    def get(self):
        """Alerts, newest first (?stationId=, ?status=, ?severity=)."""
        return success_response(_alert_svc.list(
            station_id=request.args.get("stationId", type=int),
            status=request.args.get("status"),
            severity=request.args.get("severity"),
        ))

    @ns.doc("create_alert")
    @ns.expect(alert_model)
    def post(self):
        return create_record(_alert_svc, AlertCreateSchema)


@ns.route("/alerts/<int:alert_id>")
@ns.param("alert_id", "The alert ID")
class AlertDetail(Resource):
    @ns.doc("get_alert")
    def get(self, alert_id: int):
        return success_response(_alert_svc.get(alert_id))


@ns.route("/alerts/<int:alert_id>/acknowledge")
@ns.param("alert_id", "The alert ID")
class AlertAcknowledge(Resource):
    @ns.doc("acknowledge_alert")
    @ns.expect(acknowledge_model)
    def post(self, alert_id: int):
        data = parse_body(AlertAcknowledgeSchema)
        return success_response(_alert_svc.acknowledge(alert_id, data.acknowledged_by))


@ns.route("/alerts/<int:alert_id>/resolve")
@ns.param("alert_id", "The alert ID")
class AlertResolve(Resource):
    @ns.doc("resolve_alert")
    @ns.expect(resolve_model)
    def post(self, alert_id: int):
        data = parse_body(AlertResolveSchema)
        return success_response(_alert_svc.resolve(alert_id, data.resolved_by, data.resolution_notes))


@ns.route("/alerts/<int:alert_id>/ignore")
@ns.param("alert_id", "The alert ID")
class AlertIgnore(Resource):
    @ns.doc("ignore_alert")
    @ns.expect(ignore_model)
    def post(self, alert_id: int):
        """Dismiss an alert; the body is optional."""
        data = validate_payload(AlertIgnoreSchema, json_body() or {})
        return success_response(_alert_svc.ignore(alert_id, data.resolved_by, data.resolution_notes))


@ns.route("/alerts/<int:alert_id>/work-order")
@ns.param("alert_id", "The alert ID")
class AlertWorkOrder(Resource):
    @ns.doc("create_alert_work_order")
    @ns.expect(alert_work_order_model)
    def post(self, alert_id: int):
        """Open a corrective work order for the alert and link it."""
        data = validate_payload(AlertWorkOrderSchema, json_body() or {})
        return success_response(_alert_svc.create_work_order(alert_id, **to_columns(data)), 201)


# ---------------------------------------------------------------------------
# Performance metrics
# ---------------------------------------------------------------------------
@ns.route("/stations/<int:station_id>/metrics")
@ns.param("station_id", "The station ID")
class StationMetrics(Resource):
    @ns.doc("list_station_metrics", params={"startDate": "YYYY-MM-DD", "endDate": "YYYY-MM-DD"})
    def get(self, station_id: int):
        return success_response(_metrics_svc.for_station(
            station_id, date_arg("startDate"), date_arg("endDate"),
        ))

    @ns.doc("record_station_metrics")
    @ns.expect(metrics_model)
    def post(self, station_id: int):
        """Record one day's metrics; one row per station and date."""
        return create_record(_metrics_svc, MetricsCreateSchema, station_id=station_id)
