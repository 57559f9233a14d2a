"""Keeps ``PetWashStation.health_status`` in line with heartbeats and alerts."""

import logging

from flask import current_app

from petwash.domain.health import derive_health_status
from petwash.domain.models import PetWashStation
from petwash.repositories.monitoring_repository import AlertRepository

logger = logging.getLogger(__name__)


class StationHealthService:
    """Recomputes station health; callers own the surrounding transaction."""

    def __init__(self):
        self._alerts = AlertRepository()

    def refresh(self, station: PetWashStation) -> str:
        severities = [alert.severity for alert in self._alerts.get_open_for_station(station.id)]
        status = derive_health_status(
            station.last_heartbeat,
            severities,
            current_app.config["HEARTBEAT_TIMEOUT_MINUTES"],
        )
        if status != station.health_status:
            logger.info(
                "Station id=%s health %s -> %s", station.id, station.health_status, status,
            )
            station.health_status = status
        return status
