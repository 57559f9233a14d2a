"""Repositories for countries, territories, franchisees and stations."""

from petwash.domain.models import Country, Franchisee, FranchiseTerritory, PetWashStation
from petwash.repositories.base import BaseRepository


class CountryRepository(BaseRepository[Country]):
    def __init__(self):
        super().__init__(Country, default_order=Country.name)

    def get_by_code(self, code: str) -> Country | None:
        return Country.query.filter_by(code=code.upper()).first()


class TerritoryRepository(BaseRepository[FranchiseTerritory]):
    def __init__(self):
        super().__init__(FranchiseTerritory, default_order=FranchiseTerritory.name)


class FranchiseeRepository(BaseRepository[Franchisee]):
    def __init__(self):
        super().__init__(
            Franchisee,
            default_order=[Franchisee.created_at.desc(), Franchisee.id.desc()],
        )


class StationRepository(BaseRepository[PetWashStation]):
    def __init__(self):
        super().__init__(PetWashStation, default_order=PetWashStation.station_code)

    def get_by_franchisee(self, franchisee_id: int) -> list[PetWashStation]:
        return (
            PetWashStation.query
            .filter_by(franchisee_id=franchisee_id)
            .order_by(PetWashStation.station_code)
            .all()
        )

    def get_map_points(self) -> list[dict]:
        """Location and status of every station, for the network map."""
        rows = (
            PetWashStation.query
            .with_entities(
                PetWashStation.id,
                PetWashStation.station_code,
                PetWashStation.station_name,
                PetWashStation.latitude,
                PetWashStation.longitude,
                PetWashStation.operational_status,
                PetWashStation.health_status,
                PetWashStation.city,
                PetWashStation.franchisee_id,
            )
            .order_by(PetWashStation.station_code)
            .all()
        )
        return [
            {
                "id": row.id,
                "stationCode": row.station_code,
                "stationName": row.station_name,
                "latitude": format(row.latitude, "f") if row.latitude is not None else None,
                "longitude": format(row.longitude, "f") if row.longitude is not None else None,
                "operationalStatus": row.operational_status,
                "healthStatus": row.health_status,
                "city": row.city,
                "franchiseeId": row.franchisee_id,
            }
            for row in rows
        ]
