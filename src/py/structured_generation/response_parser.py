"""
Structured Generation — Response Parser

Strips one level of markdown fencing from raw model output and parses the
rest as JSON. Any top-level value is accepted, scalars included.
"""

from __future__ import annotations

import json
import math

from ._types import ResponseParseError
from .values import JsonValue, from_python

__all__ = ["strip_markdown_fences", "parse_response"]

# Checked in order: the language-tagged fence must win over the bare one.
_OPENING_FENCES = ("```json", "```")
_CLOSING_FENCE = "```"


def strip_markdown_fences(raw: str) -> str:
    """
    Strip a markdown code fence from model output.
    Models commonly wrap JSON in ```json ... ``` blocks. Only the outermost
    opening and closing markers are removed.
    """
    text = raw.strip()
    for fence in _OPENING_FENCES:
        if text.startswith(fence):
            text = text[len(fence):]
            break
    if text.endswith(_CLOSING_FENCE):
        text = text[: -len(_CLOSING_FENCE)]
    return text.strip()


def _reject_constant(name: str) -> None:
    # json.loads accepts NaN/Infinity by default; they are not JSON.
    raise ValueError(f"Unsupported JSON constant: {name}")


def _parse_finite_float(text: str) -> float:
    # Literals such as 1e400 overflow to inf without raising.
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def parse_response(raw: str) -> JsonValue:
    """Parse raw model output. Raises ResponseParseError (INVALID_JSON) on failure."""
    cleaned = strip_markdown_fences(raw)
    try:
        return from_python(json.loads(
            cleaned, parse_float=_parse_finite_float, parse_constant=_reject_constant
        ))
    except (ValueError, RecursionError) as err:
        raise ResponseParseError(f"Invalid JSON: {err}") from err
