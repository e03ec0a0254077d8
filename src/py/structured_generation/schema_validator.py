"""
Structured Generation — Schema Validator

Validates a structured value against a JSON Schema subset:
type (object, array, string, number, integer, boolean, null), properties,
required, items, minItems, maxItems.

Validation stops at the first failure, in encounter order: required names
first, then object members in their parsed order, then array items by index,
then array length bounds. One actionable message is all the corrective prompt
needs.
"""

from __future__ import annotations

from typing import Any, Mapping

from ._types import ValidationResult
from .values import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    from_python,
    is_json_value,
)

__all__ = ["validate"]

_VALID = ValidationResult(valid=True)

# Schema type name -> value class for the tag-only checks.
_SCALAR_TYPES: dict[str, type] = {
    "string": JsonString,
    "boolean": JsonBool,
    "null": JsonNull,
    "number": JsonNumber,
}


def _invalid(message: str) -> ValidationResult:
    return ValidationResult(valid=False, error=message)


def _mismatch(expected: str, value: Any) -> ValidationResult:
    return _invalid(f"Expected {expected}, got {value.kind}")


def _as_count(raw: Any) -> int | None:
    """Read minItems/maxItems; anything that is not a whole number is ignored."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return None


def validate(value: Any, schema: Any) -> ValidationResult:
    """
    Validate ``value`` against ``schema``. Never raises.

    ``value`` is normally a structured value from the response parser; plain
    Python JSON data (dicts, lists, scalars) is converted first.
    """
    if not is_json_value(value):
        try:
            value = from_python(value)
        except TypeError as err:
            return _invalid(str(err))

    if not isinstance(schema, Mapping):
        return _invalid("Schema missing 'type' property")
    schema_type = schema.get("type")
    if not isinstance(schema_type, str):
        return _invalid("Schema missing 'type' property")

    if schema_type == "object":
        return _validate_object(value, schema)
    if schema_type == "array":
        return _validate_array(value, schema)
    if schema_type == "integer":
        if isinstance(value, JsonNumber) and value.is_integral:
            return _VALID
        if isinstance(value, JsonNumber):
            return _invalid(f"Expected integer, got non-integral number {value.value}")
        return _mismatch("integer", value)

    expected = _SCALAR_TYPES.get(schema_type)
    if expected is None:
        return _invalid(f"Unknown schema type: {schema_type}")
    if isinstance(value, expected):
        return _VALID
    return _mismatch(schema_type, value)


def _validate_object(value: Any, schema: Mapping[str, Any]) -> ValidationResult:
    if not isinstance(value, JsonObject):
        return _mismatch("object", value)

    required = schema.get("required")
    if isinstance(required, (list, tuple)):
        for name in required:
            if isinstance(name, str) and name not in value:
                return _invalid(f"Missing required property: '{name}'")

    # Members without a declared sub-schema are accepted unchecked.
    properties = schema.get("properties")
    if isinstance(properties, Mapping):
        for key, member in value.members.items():
            prop_schema = properties.get(key)
            if not isinstance(prop_schema, Mapping):
                continue
            result = validate(member, prop_schema)
            if not result.valid:
                return _invalid(f"Property '{key}': {result.error}")

    return _VALID


def _validate_array(value: Any, schema: Mapping[str, Any]) -> ValidationResult:
    if not isinstance(value, JsonArray):
        return _mismatch("array", value)

    item_schema = schema.get("items")
    if isinstance(item_schema, Mapping):
        for index, item in enumerate(value.items):
            result = validate(item, item_schema)
            if not result.valid:
                return _invalid(f"Item at index {index}: {result.error}")

    count = len(value)
    min_items = _as_count(schema.get("minItems"))
    if min_items is not None and count < min_items:
        return _invalid(f"Array has {count} items, minimum is {min_items}")

    max_items = _as_count(schema.get("maxItems"))
    if max_items is not None and count > max_items:
        return _invalid(f"Array has {count} items, maximum is {max_items}")

    return _VALID
