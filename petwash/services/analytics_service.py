"""Analytics service — network-wide and per-franchisee dashboards."""

import logging
from datetime import date, datetime, timezone

from petwash.domain.amounts import to_money
from petwash.domain.exceptions import ResourceNotFoundError
from petwash.repositories.analytics_repository import AnalyticsRepository
from petwash.repositories.network_repository import FranchiseeRepository, StationRepository

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Aggregates computed fresh from the tables on every call."""

    def __init__(self):
        self._analytics = AnalyticsRepository()
        self._franchisees = FranchiseeRepository()
        self._stations = StationRepository()

    def global_stats(self) -> dict:
        now = datetime.now(timezone.utc)
        stations = self._analytics.station_counts()
        franchisees = self._analytics.franchisee_counts()
        bills = self._analytics.outstanding_bill_totals(now.date())
        alerts = self._analytics.open_alert_counts()
        orders = self._analytics.work_order_counts()
        logger.debug("Computed global analytics at %s", now.isoformat())
        return {
            "stationStats": {
                "totalStations": stations.total,
                "activeStations": int(stations.active),
                "offlineStations": int(stations.offline),
                "maintenanceStations": int(stations.maintenance),
            },
            "franchiseeStats": {
                "totalFranchisees": franchisees.total,
                "activeFranchisees": int(franchisees.active),
            },
            "billStats": {
                "totalUnpaid": bills.total,
                "totalOverdue": int(bills.overdue),
                "totalAmount": format(to_money(bills.amount), "f"),
            },
            "alertStats": {
                "totalAlerts": alerts.total,
                "criticalAlerts": int(alerts.critical),
                "warningAlerts": int(alerts.warning),
            },
            "workOrderStats": {
                "totalPending": int(orders.pending),
                "totalInProgress": int(orders.in_progress),
                "totalCompleted": int(orders.completed),
            },
            "timestamp": now.isoformat(),
        }

    def franchisee_stats(self, franchisee_id: int) -> dict:
        franchisee = self._franchisees.get_by_id(franchisee_id)
        if franchisee is None:
            raise ResourceNotFoundError("Franchisee", franchisee_id)

        stations = self._stations.get_by_franchisee(franchisee_id)
        result = {
            "franchisee": franchisee.to_dict(),
            "stations": [station.to_dict() for station in stations],
            "totalRevenue": "0.00",
            "totalBills": 0,
            "unpaidBills": 0,
            "openAlerts": 0,
            "criticalAlerts": 0,
        }
        if not stations:
            return result

        station_ids = [station.id for station in stations]
        bills = self._analytics.outstanding_bill_totals(datetime.now(timezone.utc).date(), station_ids)
        alerts = self._analytics.open_alert_counts(station_ids)
        performance = self._analytics.performance_totals(station_ids)
        result.update(
            totalRevenue=format(to_money(performance.revenue), "f"),
            totalBills=self._analytics.bill_count(station_ids),
            unpaidBills=bills.total,
            openAlerts=alerts.total,
            criticalAlerts=int(alerts.critical),
        )
        return result

    def station_performance(
        self,
        station_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict:
        if self._stations.get_by_id(station_id) is None:
            raise ResourceNotFoundError("Station", station_id)
        totals = self._analytics.performance_totals([station_id], start_date, end_date)
        return {
            "stationId": station_id,
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
            "days": totals.days,
            "totalWashes": int(totals.washes),
            "totalRevenue": format(to_money(totals.revenue), "f"),
            "averageUptimePercent": (
                format(to_money(totals.uptime), "f") if totals.uptime is not None else None
            ),
        }
