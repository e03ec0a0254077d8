"""
Structured Generation — Core Implementation

Prompt -> Generate -> Parse -> Validate -> Retry pipeline around an
unreliable text-generating model.

The generator builds a JSON-only system instruction from the schema, calls
the model, strips fences, parses, and validates. A parse or schema failure
gets one corrective attempt that echoes the failed output and the reason it
failed. Model-call failures are never retried. Every path ends in a Success
or a typed Failure.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, Callable, Mapping, Sequence

from ._types import (
    ErrorCode,
    Failure,
    GenerationOutcome,
    GeneratorConfig,
    LLMProvider,
    LLMRequest,
    Message,
    MessageRole,
    ResponseParseError,
    Success,
)
from .prompts import (
    build_corrective_prompt,
    build_initial_prompt,
    build_language_instruction,
)
from .response_parser import parse_response
from .schema_validator import validate

__all__ = ["StructuredGenerator", "group_messages"]

logger = logging.getLogger(__name__)

NO_MESSAGES = "No valid messages provided"


def group_messages(messages: Sequence[Message]) -> tuple[str, str]:
    """Join system and user contents separately, newline-separated, in input order."""
    system = [m.content for m in messages if m.role == MessageRole.SYSTEM]
    user = [m.content for m in messages if m.role == MessageRole.USER]
    return "\n".join(system), "\n".join(user)


def _describe(err: Exception) -> str:
    return str(err) or type(err).__name__


def _notify(callback: Callable[..., None] | None, *args: Any) -> None:
    """Run an observer callback. Its errors are logged, never propagated."""
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:
        logger.exception("Callback %r raised", callback)


class StructuredGenerator:
    """
    StructuredGenerator — the core abstraction.

    Holds no per-request state: one instance can serve concurrent calls, each
    of which owns its own attempt counter, prompts and parsed values.
    """

    def __init__(self, provider: LLMProvider, config: GeneratorConfig | None = None) -> None:
        self._provider = provider
        self._config = config or GeneratorConfig()
        if self._config.max_retries < 0:
            raise ValueError("max_retries must be non-negative")

    async def generate(
        self, messages: Sequence[Message], schema: Mapping[str, Any]
    ) -> GenerationOutcome:
        """
        Generate a value that satisfies ``schema``.

        Returns Success with the parsed structured value, or Failure with
        INVALID_JSON, SCHEMA_MISMATCH or NATIVE_ERROR. Cancellation of the
        surrounding task propagates; no further attempt is started.
        """
        start_time = time.perf_counter()
        cfg = self._config

        if not messages:
            return self._fail(Failure(ErrorCode.NATIVE_ERROR, NO_MESSAGES), start_time)

        extra_context, user_query = group_messages(messages)
        system_prompt = build_initial_prompt(extra_context, schema)

        last_raw: str | None = None
        last_error = ""

        for attempt in range(cfg.max_retries + 1):
            is_final = attempt == cfg.max_retries

            if attempt == 0:
                user_prompt = user_query
            else:
                _notify(cfg.on_retry, last_error, attempt)
                user_prompt = build_corrective_prompt(last_raw or "", last_error, schema)

            logger.debug("Generation attempt %d of %d", attempt + 1, cfg.max_retries + 1)

            try:
                last_raw = await self._call_model(system_prompt, user_prompt)
            except Exception as err:
                logger.error("Model call failed on attempt %d: %s", attempt + 1, _describe(err))
                return self._fail(
                    Failure(
                        ErrorCode.NATIVE_ERROR,
                        f"Generation failed: {_describe(err)}",
                        attempts=attempt + 1,
                        raw=last_raw,
                    ),
                    start_time,
                )

            try:
                value = parse_response(last_raw)
            except ResponseParseError as err:
                last_error = err.message
                if is_final:
                    return self._fail(
                        Failure(err.code, err.message, attempts=attempt + 1, raw=last_raw),
                        start_time,
                    )
                logger.warning("Attempt %d returned unparseable output: %s", attempt + 1, last_error)
                continue

            result = validate(value, schema)
            if result.valid:
                return Success(
                    data=value,
                    raw=last_raw,
                    attempts=attempt + 1,
                    total_latency_ms=(time.perf_counter() - start_time) * 1000,
                )

            last_error = result.error or "Schema validation failed"
            if is_final:
                return self._fail(
                    Failure(
                        ErrorCode.SCHEMA_MISMATCH,
                        f"Schema validation failed after {cfg.max_retries + 1} attempts: {last_error}",
                        attempts=attempt + 1,
                        raw=last_raw,
                    ),
                    start_time,
                )
            logger.warning("Attempt %d failed schema validation: %s", attempt + 1, last_error)

        # Unreachable while max_retries >= 0; kept as a terminal state.
        return self._fail(
            Failure(
                ErrorCode.NATIVE_ERROR,
                "Generation failed after all retry attempts",
                attempts=cfg.max_retries + 1,
                raw=last_raw,
            ),
            start_time,
        )

    async def generate_text(self, messages: Sequence[Message]) -> GenerationOutcome:
        """Single model call, raw text returned verbatim. No parsing, no retry."""
        system_prompt, user_query = group_messages(messages)
        return await self._generate_plain(messages, system_prompt, user_query)

    async def generate_text_with_language(
        self, messages: Sequence[Message], language: str
    ) -> GenerationOutcome:
        """Like generate_text, with a target-language instruction on the system prompt."""
        system_text, user_query = group_messages(messages)
        system_prompt = build_language_instruction(system_text, language)
        return await self._generate_plain(messages, system_prompt, user_query)

    async def _generate_plain(
        self, messages: Sequence[Message], system_prompt: str, user_query: str
    ) -> GenerationOutcome:
        start_time = time.perf_counter()
        if not messages:
            return Failure(ErrorCode.NATIVE_ERROR, NO_MESSAGES)

        try:
            content = await self._call_model(system_prompt, user_query)
        except Exception as err:
            logger.error("Text generation failed: %s", _describe(err))
            return Failure(
                ErrorCode.NATIVE_ERROR,
                f"Generation failed: {_describe(err)}",
                attempts=1,
                total_latency_ms=(time.perf_counter() - start_time) * 1000,
            )

        return Success(
            data=content,
            raw=content,
            attempts=1,
            total_latency_ms=(time.perf_counter() - start_time) * 1000,
        )

    async def _call_model(self, system_prompt: str, user_prompt: str) -> str:
        request = LLMRequest(prompt=user_prompt, system_prompt=system_prompt)
        response = await self._provider(request)
        content = getattr(response, "content", None)
        if not isinstance(content, str):
            raise TypeError(f"Provider returned no text content ({type(response).__name__})")
        return content

    def _fail(self, failure: Failure, start_time: float) -> Failure:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        result = replace(failure, total_latency_ms=elapsed_ms)
        _notify(self._config.on_generation_failure, result)
        return result
