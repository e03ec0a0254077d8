"""
Structured Generation — Prompt Builder

Turns a schema (and, on retry, the previous failure) into instruction text.
Schemas are embedded in canonical form: sorted keys, two-space indent, so
the same schema always produces the same prompt.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

__all__ = [
    "canonical_schema",
    "build_initial_prompt",
    "build_corrective_prompt",
    "build_language_instruction",
]

_RULES = [
    "1. Return ONLY the JSON object or array - nothing else",
    "2. Do NOT wrap the response in markdown code blocks (no ```)",
    "3. Do NOT include any comments",
    "4. Do NOT include any explanations before or after the JSON",
    "5. The JSON must be valid and parseable",
    "6. All required properties must be present",
    "7. Property types must match the schema exactly",
]


def canonical_schema(schema: Mapping[str, Any]) -> str:
    """Serialize a schema deterministically. Unserializable schemas become ``{}``."""
    try:
        return json.dumps(schema, indent=2, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return "{}"


def build_initial_prompt(extra_context: str, schema: Mapping[str, Any]) -> str:
    """System instruction for every attempt: JSON-only rules plus the schema."""
    lines = [
        "You are a JSON generator. Your response must be ONLY valid JSON "
        "that matches the provided schema.",
        "",
        "SCHEMA:",
        canonical_schema(schema),
        "",
        "RULES:",
        *_RULES,
        "",
    ]
    if extra_context:
        lines.extend(["", "ADDITIONAL CONTEXT:", extra_context, ""])
    return "\n".join(lines)


def build_corrective_prompt(
    previous_response: str, validation_error: str, schema: Mapping[str, Any]
) -> str:
    """User instruction for a retry: echoes the failed output and why it failed."""
    return "\n".join([
        "The previous response was invalid JSON or did not match the required schema.",
        "",
        "PREVIOUS RESPONSE:",
        previous_response,
        "",
        "ERROR:",
        validation_error,
        "",
        "REQUIRED SCHEMA:",
        canonical_schema(schema),
        "",
        "Fix the response and return ONLY valid JSON matching the schema. "
        "No explanations, no markdown, just the JSON.",
    ])


def build_language_instruction(system_text: str, language: str) -> str:
    """Append the target-language instruction to the joined system text."""
    instruction = f"Please respond in {language}."
    if not system_text:
        return instruction
    return f"{system_text}\n\n{instruction}"
