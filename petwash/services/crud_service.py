"""Generic CRUD use-cases shared by every back-office entity.

Concrete services subclass ``CrudService`` and override the
``_before_create`` / ``_before_update`` hooks to enforce their domain rules.
"""

import logging
from typing import Generic, TypeVar

from petwash.domain.exceptions import ResourceNotFoundError
from petwash.extensions import db, transaction
from petwash.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=db.Model)


class CrudService(Generic[T]):
    """List / get / create / update for one entity.

    Args:
        repository: Repository for the entity's table.
        resource_name: Name used in not-found errors and log lines.
        references: ``{column: (repository, resource_name)}`` for foreign keys
            that must point at an existing row.
    """

    def __init__(
        self,
        repository: BaseRepository[T],
        resource_name: str,
        references: dict[str, tuple[BaseRepository, str]] | None = None,
    ):
        self._repo = repository
        self.resource_name = resource_name
        self._references = references or {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, **filters) -> list[dict]:
        """Return rows matching the equality ``filters`` (``None`` is ignored)."""
        return [row.to_dict() for row in self._repo.filter(**filters)]

    def get(self, record_id: int) -> dict:
        return self.get_instance(record_id).to_dict()

    def get_instance(self, record_id: int, for_update: bool = False) -> T:
        """Fetch the ORM row or raise ``ResourceNotFoundError``."""
        if for_update:
            instance = self._repo.get_for_update(record_id)
        else:
            instance = self._repo.get_by_id(record_id)
        if instance is None:
            raise ResourceNotFoundError(self.resource_name, record_id)
        return instance

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, **values) -> dict:
        self._check_references(values)
        with transaction():
            values = self._before_create(values)
            instance = self._repo.create(**values)
            self._after_write(instance)
        logger.info("Created %s id=%s", self.resource_name, instance.id)
        return instance.to_dict()

    def update(self, record_id: int, **values) -> dict:
        instance = self.get_instance(record_id)
        self._check_references(values)
        previous = instance.to_dict()
        with transaction():
            values = self._before_update(instance, values)
            self._repo.update(instance, **values)
            self._after_write(instance, previous)
        logger.info("Updated %s id=%s fields=%s", self.resource_name, record_id, sorted(values))
        return instance.to_dict()

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _before_create(self, values: dict) -> dict:
        return values

    def _before_update(self, instance: T, values: dict) -> dict:
        return values

    def _after_write(self, instance: T, previous: dict | None = None) -> None:
        """Runs inside the write transaction after the row is flushed.

        ``previous`` is the row as it was before an update; ``None`` on create.
        """

    def _check_references(self, values: dict) -> None:
        for column, (repository, resource_name) in self._references.items():
            referenced_id = values.get(column)
            if referenced_id is not None and repository.get_by_id(referenced_id) is None:
                raise ResourceNotFoundError(resource_name, referenced_id)
