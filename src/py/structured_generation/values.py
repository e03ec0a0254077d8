"""
Structured Generation — Structured Values

Tagged union for parsed JSON: null, boolean, number, string, array, object.
Values are produced by the response parser, consumed by the schema validator,
and never mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

__all__ = [
    "JsonNull",
    "JsonBool",
    "JsonNumber",
    "JsonString",
    "JsonArray",
    "JsonObject",
    "JsonValue",
    "from_python",
    "to_python",
    "is_json_value",
]


@dataclass(frozen=True)
class JsonNull:
    kind = "null"


@dataclass(frozen=True)
class JsonBool:
    value: bool
    kind = "boolean"


@dataclass(frozen=True)
class JsonNumber:
    value: int | float
    kind = "number"

    @property
    def is_integral(self) -> bool:
        """True for ints and for floats without a fractional part (3.0)."""
        if isinstance(self.value, float):
            return self.value.is_integer()
        return True


@dataclass(frozen=True)
class JsonString:
    value: str
    kind = "string"


@dataclass(frozen=True)
class JsonArray:
    items: tuple[JsonValue, ...] = ()
    kind = "array"

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, eq=False)
class JsonObject:
    """Object members, compared without regard to key order."""

    members: Mapping[str, JsonValue] = field(default_factory=dict)
    kind = "object"

    def __post_init__(self) -> None:
        # Copy so later changes to the caller's dict cannot leak in.
        object.__setattr__(self, "members", MappingProxyType(dict(self.members)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonObject):
            return NotImplemented
        return dict(self.members) == dict(other.members)

    __hash__ = None  # type: ignore[assignment]

    def __contains__(self, key: object) -> bool:
        return key in self.members


JsonValue = Union[JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject]

_VALUE_TYPES = (JsonNull, JsonBool, JsonNumber, JsonString, JsonArray, JsonObject)


def is_json_value(obj: Any) -> bool:
    return isinstance(obj, _VALUE_TYPES)


def from_python(obj: Any) -> JsonValue:
    """
    Convert the output of ``json.loads`` (or any equivalent plain Python
    structure) into a structured value.

    Raises TypeError for objects with no JSON counterpart.
    """
    if isinstance(obj, _VALUE_TYPES):
        return obj
    if obj is None:
        return JsonNull()
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return JsonBool(obj)
    if isinstance(obj, (int, float)):
        return JsonNumber(obj)
    if isinstance(obj, str):
        return JsonString(obj)
    if isinstance(obj, (list, tuple)):
        return JsonArray(tuple(from_python(item) for item in obj))
    if isinstance(obj, Mapping):
        members: dict[str, JsonValue] = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"Object keys must be strings, got {type(key).__name__}")
            members[key] = from_python(value)
        return JsonObject(members)
    raise TypeError(f"Cannot convert {type(obj).__name__} to a structured value")


def to_python(value: JsonValue) -> Any:
    """Convert a structured value back into plain dicts, lists and scalars."""
    if isinstance(value, JsonNull):
        return None
    if isinstance(value, (JsonBool, JsonNumber, JsonString)):
        return value.value
    if isinstance(value, JsonArray):
        return [to_python(item) for item in value.items]
    if isinstance(value, JsonObject):
        return {key: to_python(member) for key, member in value.members.items()}
    raise TypeError(f"Not a structured value: {type(value).__name__}")
