"""Status lifecycles for work orders and station alerts.

Pure business logic with no Flask or database dependency.
"""

import logging

from petwash.domain.exceptions import ConflictError

logger = logging.getLogger(__name__)


class StatusLifecycle:
    """A small directed graph of allowed status transitions.

    Args:
        name: Human-readable entity name used in error messages.
        transitions: Map of status -> statuses reachable from it. Statuses
            that map to an empty set are terminal.
    """

    def __init__(self, name: str, transitions: dict[str, set[str]]):
        self.name = name
        self._transitions = transitions

    @property
    def statuses(self) -> tuple[str, ...]:
        return tuple(self._transitions)

    def can_transition(self, current: str, target: str) -> bool:
        return target in self._transitions.get(current, set())

    def is_terminal(self, status: str) -> bool:
        return not self._transitions.get(status)

    def check(self, current: str, target: str) -> None:
        """Raise ``ConflictError`` unless ``current -> target`` is allowed."""
        if self.can_transition(current, target):
            return
        allowed = sorted(self._transitions.get(current, set()))
        logger.warning("Rejected %s transition %s -> %s", self.name, current, target)
        raise ConflictError(
            f"Cannot move {self.name} from '{current}' to '{target}'",
            details={"currentStatus": current, "requestedStatus": target, "allowed": allowed},
        )


WORK_ORDER_LIFECYCLE = StatusLifecycle(
    "work order",
    {
        "pending": {"scheduled", "in_progress", "cancelled"},
        "scheduled": {"in_progress", "cancelled"},
        "in_progress": {"completed", "cancelled"},
        "completed": set(),
        "cancelled": set(),
    },
)

ALERT_LIFECYCLE = StatusLifecycle(
    "alert",
    {
        "open": {"acknowledged", "resolved", "ignored"},
        "acknowledged": {"resolved", "ignored"},
        "resolved": set(),
        "ignored": set(),
    },
)
