"""
Structured Generation — Type Definitions

Core types for the prompt -> generate -> parse -> validate -> retry pipeline.
Everything here is an immutable, request-scoped value.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union


class MessageRole(str, enum.Enum):
    """Who a conversation message comes from."""

    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class Message:
    """A single message in the conversation handed to the generator."""

    role: MessageRole
    content: str


class ErrorCode(str, enum.Enum):
    """Stable vocabulary of failure codes surfaced to callers."""

    # Model output was not parseable JSON after fence stripping.
    INVALID_JSON = "INVALID_JSON"

    # Parsed JSON did not satisfy the schema.
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"

    # Capability check failed before generation started.
    UNAVAILABLE = "UNAVAILABLE"

    # The model call itself failed, or a request precondition was violated.
    NATIVE_ERROR = "NATIVE_ERROR"


@dataclass(frozen=True)
class LLMRequest:
    """A request to the external text-generating model."""

    prompt: str
    system_prompt: str | None = None


@dataclass(frozen=True)
class LLMResponse:
    """Raw text returned by the external model."""

    content: str
    model: str | None = None
    finish_reason: str | None = None


# The external model call — any async function matching this signature works.
LLMProvider = Callable[[LLMRequest], Awaitable[LLMResponse]]


@dataclass
class GeneratorConfig:
    """Configuration for the StructuredGenerator."""

    # Corrective attempts after the initial call. Default: 1 (so 2 total calls).
    max_retries: int = 1

    # Callback fired before each corrective attempt with (failure message, attempt).
    on_retry: Callable[[str, int], None] | None = None

    # Callback fired when a schema-constrained generation ends in a Failure.
    on_generation_failure: Callable[[Failure], None] | None = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one value against one schema.

    Only the first failure encountered is reported.
    """

    valid: bool
    error: str | None = None


@dataclass(frozen=True)
class Success:
    """A generation that produced usable data."""

    # Structured value for schema generation, raw text for plain text generation.
    data: Any

    # Raw model output of the final attempt.
    raw: str

    # Model calls made, including the successful one.
    attempts: int = 1

    total_latency_ms: float = 0.0

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A generation that terminated with a typed error."""

    code: ErrorCode
    message: str

    # Model calls made before giving up (0 when a precondition failed).
    attempts: int = 0

    # Raw model output of the last attempt, if any model call returned.
    raw: str | None = None

    total_latency_ms: float = 0.0

    @property
    def success(self) -> bool:
        return False


GenerationOutcome = Union[Success, Failure]


class GenerationError(Exception):
    """Error carrying a stable failure code and a human-readable message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.value}: {message}")

    def as_dict(self) -> dict[str, str]:
        """Boundary representation: ``{"code": ..., "message": ...}``."""
        return {"code": self.code.value, "message": self.message}


class ResponseParseError(GenerationError):
    """Raised when raw model output cannot be parsed as JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.INVALID_JSON, message)
