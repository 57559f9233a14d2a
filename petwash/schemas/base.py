"""Shared Pydantic plumbing: camelCase models and payload validation.

Request bodies use camelCase keys; services and ORM models use snake_case.
``validate_payload`` / ``validate_partial`` turn Pydantic failures into the
application's ``ValidationError`` so every endpoint reports them the same way.
"""

from typing import Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from petwash.domain.exceptions import ValidationError

M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """Base schema accepting camelCase (or snake_case) keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def _error_details(err: PydanticValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in err.errors()
    ]


def validate_payload(schema: Type[M], payload) -> M:
    """Validate a raw JSON body against ``schema``.

    Raises:
        ValidationError: With one ``{field, message, type}`` entry per problem.
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            "Validation failed",
            details=[{"field": "", "message": "Request body must be a JSON object", "type": "dict_type"}],
        )
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as err:
        raise ValidationError("Validation failed", details=_error_details(err)) from err


def provided_fields(schema: Type[BaseModel], payload: dict) -> set[str]:
    """Field names of ``schema`` present in ``payload`` under either spelling."""
    return {
        name
        for name, field in schema.model_fields.items()
        if name in payload or (field.alias or name) in payload
    }


def validate_partial(schema: Type[M], payload, current: dict) -> dict:
    """Validate a partial update against the full ``schema``.

    The update is overlaid on ``current`` (the stored row, camelCase) and the
    result must pass the full schema, so a partial body can never leave a row
    in a state a create would have rejected. Only the fields the caller sent
    are returned, as snake_case column values.
    """
    if not isinstance(payload, dict):
        validate_payload(schema, payload)
    fields = provided_fields(schema, payload)
    if not fields:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "", "message": "No updatable fields supplied", "type": "missing"}],
        )
    merged = {**current}
    for name in fields:
        alias = schema.model_fields[name].alias or name
        merged[alias] = payload[alias] if alias in payload else payload[name]
    model = validate_payload(schema, merged)
    return to_columns(model, include=fields, exclude_none=False)


def _column_value(value):
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_column_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _column_value(item) for key, item in value.items()}
    return value


def to_columns(model: BaseModel, include: set[str] | None = None, exclude_none: bool = True) -> dict:
    """Flatten a validated schema into ORM column keyword arguments.

    Nested models (JSON columns) are stored in their camelCase JSON form.
    """
    columns = {}
    for name in type(model).model_fields:
        if include is not None and name not in include:
            continue
        value = getattr(model, name)
        if value is None and exclude_none:
            continue
        columns[name] = _column_value(value)
    return columns
