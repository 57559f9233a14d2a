"""Aggregate queries backing the analytics endpoints.

Every figure is computed fresh from the underlying tables on each call.
"""

from datetime import date

from sqlalchemy import case, func

from petwash.domain.models import (
    Franchisee,
    MaintenanceWorkOrder,
    PetWashStation,
    StationAlert,
    StationBill,
    StationPerformanceMetrics,
)
from petwash.extensions import db

OUTSTANDING_BILL_STATUSES = ("unpaid", "overdue")


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class AnalyticsRepository:
    """Read-only aggregate queries; never flushes or commits."""

    @staticmethod
    def station_counts(station_ids: list[int] | None = None):
        station = PetWashStation
        query = db.session.query(
            func.count(station.id).label("total"),
            _count_where(station.operational_status == "active").label("active"),
            _count_where(station.health_status == "offline").label("offline"),
            _count_where(station.operational_status == "maintenance").label("maintenance"),
        )
        if station_ids is not None:
            query = query.filter(station.id.in_(station_ids))
        return query.one()

    @staticmethod
    def franchisee_counts():
        return db.session.query(
            func.count(Franchisee.id).label("total"),
            _count_where(Franchisee.status == "active").label("active"),
        ).one()

    @staticmethod
    def outstanding_bill_totals(today: date, station_ids: list[int] | None = None):
        bill = StationBill
        query = db.session.query(
            func.count(bill.id).label("total"),
            _count_where((bill.status == "overdue") | (bill.due_date < today)).label("overdue"),
            func.coalesce(func.sum(bill.total_amount), 0).label("amount"),
        ).filter(bill.status.in_(OUTSTANDING_BILL_STATUSES))
        if station_ids is not None:
            query = query.filter(bill.station_id.in_(station_ids))
        return query.one()

    @staticmethod
    def bill_count(station_ids: list[int]) -> int:
        return StationBill.query.filter(StationBill.station_id.in_(station_ids)).count()

    @staticmethod
    def open_alert_counts(station_ids: list[int] | None = None):
        alert = StationAlert
        query = db.session.query(
            func.count(alert.id).label("total"),
            _count_where(alert.severity == "critical").label("critical"),
            _count_where(alert.severity == "warning").label("warning"),
        ).filter(alert.status == "open")
        if station_ids is not None:
            query = query.filter(alert.station_id.in_(station_ids))
        return query.one()

    @staticmethod
    def work_order_counts():
        order = MaintenanceWorkOrder
        return db.session.query(
            _count_where(order.status == "pending").label("pending"),
            _count_where(order.status == "in_progress").label("in_progress"),
            _count_where(order.status == "completed").label("completed"),
        ).one()

    @staticmethod
    def performance_totals(
        station_ids: list[int],
        start_date: date | None = None,
        end_date: date | None = None,
    ):
        metrics = StationPerformanceMetrics
        query = db.session.query(
            func.count(metrics.id).label("days"),
            func.coalesce(func.sum(metrics.total_washes), 0).label("washes"),
            func.coalesce(func.sum(metrics.total_revenue), 0).label("revenue"),
            func.avg(metrics.uptime_percent).label("uptime"),
        ).filter(metrics.station_id.in_(station_ids))
        if start_date:
            query = query.filter(metrics.date >= start_date)
        if end_date:
            query = query.filter(metrics.date <= end_date)
        return query.one()
