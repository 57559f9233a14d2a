"""Request plumbing shared by the API namespaces.

Controllers stay thin (parse -> validate -> call service -> respond); the
helpers here do the parsing and validating.
"""

from datetime import date

from flask import request
from flask_restx import Namespace
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from petwash.domain.exceptions import ValidationError
from petwash.schemas.base import to_columns, validate_partial, validate_payload
from petwash.schemas.response import success_response


def schema_model(ns: Namespace, schema: type[BaseModel]):
    """Register a Pydantic schema (and its nested models) for Swagger docs."""
    json_schema = schema.model_json_schema(by_alias=True, ref_template="#/definitions/{model}")
    for name, definition in json_schema.pop("$defs", {}).items():
        ns.schema_model(name, definition)
    return ns.schema_model(schema.__name__, json_schema)


def json_body():
    """The request's JSON body, or ``None`` when it is missing or malformed."""
    return request.get_json(silent=True)


def parse_body(schema: type[BaseModel], **path_values):
    """Validate the JSON body, letting URL path values override body keys."""
    payload = json_body()
    if path_values and isinstance(payload, dict):
        payload = {**payload, **{to_camel(key): value for key, value in path_values.items()}}
    return validate_payload(schema, payload)


def create_record(service, schema: type[BaseModel], **path_values):
    """POST handler body: validate, insert, respond 201 with the new row."""
    data = parse_body(schema, **path_values)
    return success_response(service.create(**to_columns(data)), 201)


def update_record(service, schema: type[BaseModel], record_id: int):
    """PUT handler body: 404 first, then validate the partial update and apply it."""
    current = service.get(record_id)
    values = validate_partial(schema, json_body(), current)
    return success_response(service.update(record_id, **values))


def bool_arg(name: str) -> bool | None:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    return value.lower() in ("true", "1", "yes")


def date_arg(name: str) -> date | None:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            "Validation failed",
            details=[{"field": name, "message": "Expected a date as YYYY-MM-DD", "type": "date_parsing"}],
        ) from None
