"""Station health derivation.

A station's ``health_status`` is never set by hand: it follows from how
recently the station reported in and from the severity of its open alerts.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable

SUPPLY_LEVEL_FIELDS = ("soap_level", "conditioner_level", "sanitizer_level")


def derive_health_status(
    last_heartbeat: datetime | None,
    open_alert_severities: Iterable[str],
    heartbeat_timeout_minutes: int,
    now: datetime | None = None,
) -> str:
    """Return ``offline``, ``critical``, ``warning`` or ``healthy``."""
    now = now or datetime.now(timezone.utc)
    if last_heartbeat is not None:
        if last_heartbeat.tzinfo is None:
            # SQLite hands datetimes back naive; they were stored as UTC.
            last_heartbeat = last_heartbeat.replace(tzinfo=timezone.utc)
        if now - last_heartbeat > timedelta(minutes=heartbeat_timeout_minutes):
            return "offline"

    severities = set(open_alert_severities)
    if "critical" in severities:
        return "critical"
    if "warning" in severities:
        return "warning"
    return "healthy"


def low_supply_readings(reading: dict, threshold: float) -> dict[str, float]:
    """Return the supply levels in ``reading`` that fall below ``threshold`` percent."""
    return {
        name: reading[name]
        for name in SUPPLY_LEVEL_FIELDS
        if reading.get(name) is not None and reading[name] < threshold
    }
