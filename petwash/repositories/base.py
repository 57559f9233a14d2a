"""Base repository with generic CRUD operations.

Concrete repositories inherit from this and can add domain-specific queries.
"""

from typing import Generic, Type, TypeVar

from petwash.extensions import db

T = TypeVar("T", bound=db.Model)


class BaseRepository(Generic[T]):
    """Generic repository providing common database operations.

    Args:
        model_class: The SQLAlchemy model class to operate on.
        default_order: Column expression(s) used by ``filter`` when the
            caller gives no explicit ordering.
    """

    def __init__(self, model_class: Type[T], default_order=None):
        self._model = model_class
        self._default_order = default_order

    @property
    def model(self) -> Type[T]:
        return self._model

    def create(self, **kwargs) -> T:
        """Insert a new record and flush to obtain its id."""
        instance = self._model(**kwargs)
        db.session.add(instance)
        db.session.flush()
        return instance

    def get_by_id(self, record_id: int) -> T | None:
        """Fetch a single record by primary key."""
        return db.session.get(self._model, record_id)

    def get_for_update(self, record_id: int) -> T | None:
        """Fetch a record and lock its row until the transaction ends.

        Backends without row locks (SQLite) ignore the ``FOR UPDATE`` clause.
        """
        stmt = db.select(self._model).filter_by(id=record_id).with_for_update()
        return db.session.execute(stmt).scalar_one_or_none()

    def get_all(self) -> list[T]:
        """Return every record of this model."""
        return self._model.query.all()

    def filter_by(self, **kwargs) -> list[T]:
        """Return records matching the given column filters."""
        return self._model.query.filter_by(**kwargs).all()

    def filter(self, order_by=None, **filters) -> list[T]:
        """Equality-filter on the given columns, skipping ``None`` values."""
        query = self._model.query
        for column, value in filters.items():
            if value is not None:
                query = query.filter(getattr(self._model, column) == value)
        order_by = order_by if order_by is not None else self._default_order
        if order_by is None:
            order_by = self._model.id
        if not isinstance(order_by, (list, tuple)):
            order_by = [order_by]
        return query.order_by(*order_by).all()

    def next_number(self, column_name: str, prefix: str, width: int = 6) -> str:
        """Next human-readable document number, e.g. ``WO-2026-000042``.

        Continues from the highest numeric suffix already in the series, so
        numbers entered by hand inside it are never issued again.
        """
        column = getattr(self._model, column_name)
        highest = 0
        for (value,) in db.session.query(column).filter(column.like(f"{prefix}-%")):
            suffix = value[len(prefix) + 1:]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{prefix}-{highest + 1:0{width}d}"

    def update(self, instance: T, **kwargs) -> T:
        """Update an existing instance with keyword arguments."""
        for key, value in kwargs.items():
            setattr(instance, key, value)
        db.session.flush()
        return instance
