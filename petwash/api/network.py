"""Franchise network API — countries, territories, franchisees and stations."""

from flask import request
from flask_restx import Namespace, Resource

from petwash.api.common import create_record, schema_model, update_record
from petwash.auth import require_admin
from petwash.schemas.network_schema import (
    CountryCreateSchema,
    FranchiseeCreateSchema,
    StationCreateSchema,
    TerritoryCreateSchema,
)
from petwash.schemas.response import success_response
from petwash.services.network_service import (
    CountryService,
    FranchiseeService,
    StationService,
    TerritoryService,
)

ns = Namespace("network", description="Countries, territories, franchisees and stations", decorators=[require_admin])

country_model = schema_model(ns, CountryCreateSchema)
territory_model = schema_model(ns, TerritoryCreateSchema)
franchisee_model = schema_model(ns, FranchiseeCreateSchema)
station_model = schema_model(ns, StationCreateSchema)

# ---------------------------------------------------------------------------
# Service instances
# ---------------------------------------------------------------------------
_country_svc = CountryService()
_territory_svc = TerritoryService()
_franchisee_svc = FranchiseeService()
_station_svc = StationService()


# ---------------------------------------------------------------------------
# Countries
# ---------------------------------------------------------------------------
@ns.route("/countries")
class CountryList(Resource):
    @ns.doc("list_countries")
    def get(self):
        """List countries ordered by name."""
        return success_response(_country_svc.list())

    @ns.doc("create_country")
    @ns.expect(country_model)
    def post(self):
        """Register a country."""
        return create_record(_country_svc, CountryCreateSchema)


@ns.route("/countries/<int:country_id>")
@ns.param("country_id", "The country ID")
class CountryDetail(Resource):
    @ns.doc("get_country")
    def get(self, country_id: int):
        return success_response(_country_svc.get(country_id))

    @ns.doc("update_country")
    @ns.expect(country_model)
    def put(self, country_id: int):
        return update_record(_country_svc, CountryCreateSchema, country_id)


# ---------------------------------------------------------------------------
# Territories
# ---------------------------------------------------------------------------
@ns.route("/territories")
class TerritoryList(Resource):
    @ns.doc("list_territories", params={"countryId": "Filter by country", "status": "Filter by status"})
    def get(self):
        """List territories (?countryId=, ?status=)."""
        return success_response(_territory_svc.list(
            country_id=request.args.get("countryId", type=int),
            status=request.args.get("status"),
        ))

    @ns.doc("create_territory")
    @ns.expect(territory_model)
    def post(self):
        return create_record(_territory_svc, TerritoryCreateSchema)


@ns.route("/territories/<int:territory_id>")
@ns.param("territory_id", "The territory ID")
class TerritoryDetail(Resource):
    @ns.doc("get_territory")
    def get(self, territory_id: int):
        return success_response(_territory_svc.get(territory_id))

    @ns.doc("update_territory")
    @ns.expect(territory_model)
    def put(self, territory_id: int):
        return update_record(_territory_svc, TerritoryCreateSchema, territory_id)


# ---------------------------------------------------------------------------
# Franchisees
# ---------------------------------------------------------------------------
@ns.route("/franchisees")
class FranchiseeList(Resource):
    @ns.doc("list_franchisees")
    def get(self):
        """List franchisees, newest first (?status=, ?countryId=, ?territoryId=)."""
        return success_response(_franchisee_svc.list(
            status=request.args.get("status"),
            country_id=request.args.get("countryId", type=int),
            territory_id=request.args.get("territoryId", type=int),
        ))

    @ns.doc("create_franchisee")
    @ns.expect(franchisee_model)
    def post(self):
        return create_record(_franchisee_svc, FranchiseeCreateSchema)


@ns.route("/franchisees/<int:franchisee_id>")
@ns.param("franchisee_id", "The franchisee ID")
class FranchiseeDetail(Resource):
    @ns.doc("get_franchisee")
    def get(self, franchisee_id: int):
        return success_response(_franchisee_svc.get(franchisee_id))

    @ns.doc("update_franchisee")
    @ns.expect(franchisee_model)
    def put(self, franchisee_id: int):
        return update_record(_franchisee_svc, FranchiseeCreateSchema, franchisee_id)


# ---------------------------------------------------------------------------
# Stations
# ---------------------------------------------------------------------------
@ns.route("/stations")
class StationList(Resource):
    @ns.doc("list_stations")
    def get(self):
        """List stations ordered by station code.

        Filters: ?franchiseeId=, ?territoryId=, ?countryId=,
        ?operationalStatus= (or ?status=), ?healthStatus=.
        """
        return success_response(_station_svc.list(
            franchisee_id=request.args.get("franchiseeId", type=int),
            territory_id=request.args.get("territoryId", type=int),
            country_id=request.args.get("countryId", type=int),
            operational_status=request.args.get("operationalStatus") or request.args.get("status"),
            health_status=request.args.get("healthStatus"),
        ))

    @ns.doc("create_station")
    @ns.expect(station_model)
    def post(self):
        return create_record(_station_svc, StationCreateSchema)


@ns.route("/stations/map")
class StationMap(Resource):
    @ns.doc("station_map")
    def get(self):
        """Coordinates and status of every station, for the network map."""
        return success_response(_station_svc.get_map())


@ns.route("/stations/<int:station_id>")
@ns.param("station_id", "The station ID")
class StationDetail(Resource):
    @ns.doc("get_station")
    def get(self, station_id: int):
        """Station with recent bills, assets, open alerts and the latest telemetry."""
        return success_response(_station_svc.get_detail(station_id))

    @ns.doc("update_station")
    @ns.expect(station_model)
    def put(self, station_id: int):
        return update_record(_station_svc, StationCreateSchema, station_id)
