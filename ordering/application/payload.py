"""
Helpers for building command and query inputs from plain payloads.
"""

from typing import Any, Dict

from ordering.domain.exceptions import InvalidInputError
from ordering.domain.models.identity import Id


def require(payload: Dict[str, Any], name: str) -> Any:
    """Get a required field from a payload."""
    if not isinstance(payload, dict):
        raise InvalidInputError(f"Payload must be an object, got {type(payload).__name__}", value=payload)

    if name not in payload or payload[name] is None:
        raise InvalidInputError(f"Missing required field: {name}", field=name)

    return payload[name]


def id_field(payload: Dict[str, Any], name: str) -> Id[Any]:
    value = require(payload, name)
    try:
        return Id.parse(value)
    except InvalidInputError as e:
        raise InvalidInputError(e.message, field=name, value=value)


def int_field(payload: Dict[str, Any], name: str) -> int:
    value = require(payload, name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"Field {name} must be an integer", field=name, value=value)
    return value


def str_field(payload: Dict[str, Any], name: str) -> str:
    value = require(payload, name)
    if not isinstance(value, str):
        raise InvalidInputError(f"Field {name} must be a string", field=name, value=value)
    return value
