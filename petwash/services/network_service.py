"""Franchise network services: countries, territories, franchisees, stations."""

import logging

from petwash.domain.exceptions import BusinessRuleError
from petwash.domain.models import PetWashStation
from petwash.repositories.monitoring_repository import AlertRepository, TelemetryRepository
from petwash.repositories.network_repository import (
    CountryRepository,
    FranchiseeRepository,
    StationRepository,
    TerritoryRepository,
)
from petwash.repositories.operations_repository import AssetRepository, BillRepository
from petwash.services.crud_service import CrudService

logger = logging.getLogger(__name__)


def _check_territory_in_country(territory_repo, territory_id, country_id) -> None:
    if territory_id is None:
        return
    territory = territory_repo.get_by_id(territory_id)
    if territory is not None and territory.country_id != country_id:
        raise BusinessRuleError(
            f"Territory {territory_id} does not belong to country {country_id}",
            details={"territoryId": territory_id, "countryId": country_id},
        )


class CountryService(CrudService):
    def __init__(self):
        super().__init__(CountryRepository(), "Country")


class TerritoryService(CrudService):
    def __init__(self):
        super().__init__(
            TerritoryRepository(),
            "Territory",
            references={"country_id": (CountryRepository(), "Country")},
        )


class FranchiseeService(CrudService):
    """Franchisee CRUD; a franchisee's territory must lie in its country."""

    def __init__(self):
        self._territories = TerritoryRepository()
        super().__init__(
            FranchiseeRepository(),
            "Franchisee",
            references={
                "country_id": (CountryRepository(), "Country"),
                "territory_id": (self._territories, "Territory"),
            },
        )

    def _before_create(self, values: dict) -> dict:
        _check_territory_in_country(self._territories, values.get("territory_id"), values["country_id"])
        return values

    def _before_update(self, instance, values: dict) -> dict:
        _check_territory_in_country(
            self._territories,
            values.get("territory_id", instance.territory_id),
            values.get("country_id", instance.country_id),
        )
        return values


class StationService(CrudService):
    """Station CRUD plus the station detail view and the network map.

    Keeps ``Franchisee.total_stations`` in step whenever a station is
    created or moves between franchisees.
    """

    def __init__(self):
        self._territories = TerritoryRepository()
        self._franchisees = FranchiseeRepository()
        self._stations = StationRepository()
        self._bills = BillRepository()
        self._assets = AssetRepository()
        self._alerts = AlertRepository()
        self._telemetry = TelemetryRepository()
        super().__init__(
            self._stations,
            "Station",
            references={
                "country_id": (CountryRepository(), "Country"),
                "territory_id": (self._territories, "Territory"),
                "franchisee_id": (self._franchisees, "Franchisee"),
            },
        )

    def get_detail(self, station_id: int) -> dict:
        """Station with its recent bills, assets, open alerts and latest reading."""
        station = self.get_instance(station_id)
        latest = self._telemetry.get_latest(station_id)
        data = station.to_dict()
        data["bills"] = [bill.to_dict() for bill in self._bills.get_recent_for_station(station_id)]
        data["assets"] = [asset.to_dict() for asset in self._assets.filter(station_id=station_id)]
        data["openAlerts"] = [
            alert.to_dict() for alert in self._alerts.filter(station_id=station_id, status="open")
        ]
        data["latestTelemetry"] = latest.to_dict() if latest else None
        return data

    def get_map(self) -> list[dict]:
        return self._stations.get_map_points()

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _before_create(self, values: dict) -> dict:
        _check_territory_in_country(self._territories, values["territory_id"], values["country_id"])
        if values.get("franchisee_id"):
            values["ownership_type"] = "franchise"
        return values

    def _before_update(self, instance: PetWashStation, values: dict) -> dict:
        _check_territory_in_country(
            self._territories,
            values.get("territory_id", instance.territory_id),
            values.get("country_id", instance.country_id),
        )
        previous = instance.franchisee_id
        if "franchisee_id" in values and values["franchisee_id"] != previous:
            values["ownership_type"] = "franchise" if values["franchisee_id"] else "corporate"
            if previous:
                franchisee = self._franchisees.get_by_id(previous)
                franchisee.total_stations = PetWashStation.query.filter(
                    PetWashStation.franchisee_id == previous,
                    PetWashStation.id != instance.id,
                ).count()
        return values

    def _after_write(self, station: PetWashStation, previous: dict | None = None) -> None:
        if station.franchisee_id:
            franchisee = self._franchisees.get_by_id(station.franchisee_id)
            franchisee.total_stations = PetWashStation.query.filter_by(
                franchisee_id=station.franchisee_id,
            ).count()
            logger.info(
                "Franchisee id=%s now has %s station(s)", franchisee.id, franchisee.total_stations,
            )
