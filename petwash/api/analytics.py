"""Analytics API — network-wide, franchisee and station dashboards."""

from flask_restx import Namespace, Resource

from petwash.api.common import date_arg
from petwash.auth import require_admin
from petwash.schemas.response import success_response
from petwash.services.analytics_service import AnalyticsService

ns = Namespace("analytics", description="Dashboard aggregates", decorators=[require_admin])

_analytics_svc = AnalyticsService()


@ns.route("/analytics/global")
class GlobalAnalytics(Resource):
    @ns.doc("global_analytics")
    def get(self):
        """Station, franchisee, bill, alert and work-order counts across the network."""
        return success_response(_analytics_svc.global_stats())


@ns.route("/analytics/franchisee/<int:franchisee_id>")
@ns.param("franchisee_id", "The franchisee ID")
class FranchiseeAnalytics(Resource):
    @ns.doc("franchisee_analytics")
    def get(self, franchisee_id: int):
        """A franchisee's stations with their revenue, bills and alerts."""
        return success_response(_analytics_svc.franchisee_stats(franchisee_id))


@ns.route("/analytics/stations/<int:station_id>/performance")
@ns.param("station_id", "The station ID")
class StationPerformance(Resource):
    @ns.doc("station_performance", params={"startDate": "YYYY-MM-DD", "endDate": "YYYY-MM-DD"})
    def get(self, station_id: int):
        return success_response(_analytics_svc.station_performance(
            station_id, date_arg("startDate"), date_arg("endDate"),
        ))
