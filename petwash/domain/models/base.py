"""Shared column mixins and row serialisation for the ORM models."""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from pydantic.alias_generators import to_camel

from petwash.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _serialize(value, column_type):
    if value is None:
        return None
    if isinstance(column_type, db.Numeric) and not isinstance(column_type, db.Float):
        value = value if isinstance(value, Decimal) else Decimal(str(value))
        if column_type.scale is not None:
            value = value.quantize(Decimal(1).scaleb(-column_type.scale), rounding=ROUND_HALF_UP)
        return format(value, "f")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class SerializerMixin:
    """Render a row as a camelCase dict.

    Numeric columns come out as fixed-point strings at the column's scale,
    dates and datetimes as ISO-8601.
    """

    def to_dict(self) -> dict:
        return {
            to_camel(column.key): _serialize(getattr(self, column.key), column.type)
            for column in self.__table__.columns
        }


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)


def money(**kwargs):
    """A monetary column (12 digits, 2 decimal places)."""
    return db.Column(db.Numeric(12, 2), **kwargs)


def rate(**kwargs):
    """A fractional rate column such as a VAT or royalty rate."""
    return db.Column(db.Numeric(5, 4), **kwargs)
