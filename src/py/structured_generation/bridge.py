"""
Structured Generation — Host Boundary

Requests arrive from the host application as plain mappings and leave as
plain mappings. Each request is decoded once into a typed pydantic model;
anything missing or malformed fails fast as NATIVE_ERROR. The capability
check runs before any model call, and an unavailable model short-circuits
to UNAVAILABLE without reaching the generator.

Every method returns a response mapping; none of them raise.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ._types import (
    ErrorCode,
    Failure,
    GenerationError,
    GenerationOutcome,
    GeneratorConfig,
    LLMProvider,
    Message,
    MessageRole,
)
from .generator import StructuredGenerator
from .values import to_python

__all__ = [
    "AvailabilityCheck",
    "MessagePayload",
    "GenerateRequest",
    "GenerateTextRequest",
    "GenerateTextWithLanguageRequest",
    "ErrorPayload",
    "GenerateResponse",
    "GenerateTextResponse",
    "AvailabilityResponse",
    "StructuredGenerationBridge",
]

logger = logging.getLogger(__name__)

# Reports whether the underlying model can be used at all.
AvailabilityCheck = Callable[[], bool]

UNAVAILABLE_MESSAGE = "The language model is not available on this device."


# --- Requests ---


class MessagePayload(BaseModel):
    role: Literal["system", "user"]
    content: str

    def to_message(self) -> Message:
        return Message(role=MessageRole(self.role), content=self.content)


class GenerateTextRequest(BaseModel):
    messages: List[MessagePayload]

    def to_messages(self) -> List[Message]:
        return [payload.to_message() for payload in self.messages]


class GenerateTextWithLanguageRequest(GenerateTextRequest):
    language: str = Field(..., min_length=1)


class GenerateRequest(GenerateTextRequest):
    """Schema-constrained request: ``{messages, schema}``.

    The ``{messages, response_format: {type: "json_schema", schema}}``
    envelope is accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    json_schema: Dict[str, Any] = Field(..., alias="schema")

    @model_validator(mode="before")
    @classmethod
    def _lift_response_format(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or "schema" in data or "response_format" not in data:
            return data
        response_format = data["response_format"]
        if not isinstance(response_format, Mapping):
            raise ValueError("Missing 'response_format' object.")
        if response_format.get("type") != "json_schema":
            raise ValueError("response_format.type must be 'json_schema'.")
        if not isinstance(response_format.get("schema"), Mapping):
            raise ValueError("Missing or invalid 'schema' in response_format.")
        return {**data, "schema": response_format["schema"]}


# --- Responses ---


class ErrorPayload(BaseModel):
    code: ErrorCode
    message: str


class GenerateResponse(BaseModel):
    success: bool
    data: Any = None
    error: Optional[ErrorPayload] = None


class GenerateTextResponse(BaseModel):
    success: bool
    content: Optional[str] = None
    error: Optional[ErrorPayload] = None


class AvailabilityResponse(BaseModel):
    available: bool
    error: Optional[ErrorPayload] = None


def _dump(model: BaseModel) -> dict[str, Any]:
    # exclude_unset keeps a JSON-null ``data`` while dropping absent keys.
    return model.model_dump(mode="json", exclude_unset=True)


def _describe_request_error(err: ValidationError) -> str:
    first = err.errors()[0]
    if first.get("type") == "value_error" and "error" in first.get("ctx", {}):
        return str(first["ctx"]["error"])
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"Invalid request: {location}: {first.get('msg')}"
    return f"Invalid request: {first.get('msg')}"


def _error_payload(code: ErrorCode, message: str) -> ErrorPayload:
    return ErrorPayload.model_validate(GenerationError(code, message).as_dict())


class StructuredGenerationBridge:
    """Exposes the generator's operations to a host application."""

    def __init__(
        self,
        provider: LLMProvider,
        is_available: AvailabilityCheck | None = None,
        config: GeneratorConfig | None = None,
    ) -> None:
        self._generator = StructuredGenerator(provider, config)
        self._is_available = is_available or (lambda: True)

    def check_availability(self) -> dict[str, Any]:
        return _dump(self._availability())

    async def generate(self, request: Any) -> dict[str, Any]:
        try:
            parsed = GenerateRequest.model_validate(request)
        except ValidationError as err:
            return _dump(self._bad_request(GenerateResponse, err))

        availability = self._availability()
        if not availability.available:
            return _dump(GenerateResponse(success=False, error=availability.error))

        outcome = await self._generator.generate(parsed.to_messages(), parsed.json_schema)
        if isinstance(outcome, Failure):
            return _dump(GenerateResponse(success=False, error=_failure_payload(outcome)))
        return _dump(GenerateResponse(success=True, data=to_python(outcome.data)))

    async def generate_text(self, request: Any) -> dict[str, Any]:
        try:
            parsed = GenerateTextRequest.model_validate(request)
        except ValidationError as err:
            return _dump(self._bad_request(GenerateTextResponse, err))

        availability = self._availability()
        if not availability.available:
            return _dump(GenerateTextResponse(success=False, error=availability.error))

        outcome = await self._generator.generate_text(parsed.to_messages())
        return _dump(_text_response(outcome))

    async def generate_text_with_language(self, request: Any) -> dict[str, Any]:
        try:
            parsed = GenerateTextWithLanguageRequest.model_validate(request)
        except ValidationError as err:
            return _dump(self._bad_request(GenerateTextResponse, err))

        availability = self._availability()
        if not availability.available:
            return _dump(GenerateTextResponse(success=False, error=availability.error))

        outcome = await self._generator.generate_text_with_language(
            parsed.to_messages(), parsed.language
        )
        return _dump(_text_response(outcome))

    def _availability(self) -> AvailabilityResponse:
        try:
            available = bool(self._is_available())
        except Exception as err:
            logger.warning("Availability check raised: %s", err)
            return AvailabilityResponse(
                available=False,
                error=_error_payload(ErrorCode.UNAVAILABLE, f"Availability check failed: {err}"),
            )
        if available:
            return AvailabilityResponse(available=True)
        logger.info("Model unavailable; skipping generation")
        return AvailabilityResponse(
            available=False,
            error=_error_payload(ErrorCode.UNAVAILABLE, UNAVAILABLE_MESSAGE),
        )

    @staticmethod
    def _bad_request(response_type: type[BaseModel], err: ValidationError) -> BaseModel:
        message = _describe_request_error(err)
        logger.info("Rejected malformed request: %s", message)
        return response_type(success=False, error=_error_payload(ErrorCode.NATIVE_ERROR, message))


def _failure_payload(failure: Failure) -> ErrorPayload:
    return _error_payload(failure.code, failure.message)


def _text_response(outcome: GenerationOutcome) -> GenerateTextResponse:
    if isinstance(outcome, Failure):
        return GenerateTextResponse(success=False, error=_failure_payload(outcome))
    return GenerateTextResponse(success=True, content=outcome.data)
