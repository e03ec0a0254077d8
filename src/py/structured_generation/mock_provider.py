"""
Structured Generation — Mock LLM Provider

Simulates a text-generating model with configurable structured output behavior:
- Valid JSON responses
- Markdown-wrapped JSON
- Malformed JSON (truncated, missing fields, wrong types)
- Non-JSON text and refusals
- Configurable latency and error injection

No API keys needed. Records every request so tests can inspect prompts.
"""

from __future__ import annotations

import asyncio
import json
import math
import random
from dataclasses import dataclass, field
from typing import Literal

from ._types import LLMRequest, LLMResponse

# What kind of output the mock should produce.
OutputMode = Literal[
    "valid",             # Well-formed JSON matching the expected schema
    "markdown_wrapped",  # Valid JSON inside a ```json code fence
    "bare_fenced",       # Valid JSON inside a bare ``` code fence
    "truncated",         # JSON cut off mid-object (simulates max_tokens)
    "missing_field",     # Valid JSON but missing the first field
    "wrong_type",        # Valid JSON but a field has the wrong type
    "extra_text",        # Valid JSON surrounded by prose text
    "non_json",          # Plain text, no JSON at all
    "refusal",           # Model refusal message, no structured output
]

DEFAULT_VALID_OUTPUT: dict[str, object] = {"name": "Alice", "age": 30, "active": True}


@dataclass
class MockProviderConfig:
    """Configuration for the mock LLM provider."""

    # Simulated response latency in milliseconds.
    latency_ms: float = 0

    # Probability of raising an error (model runtime failure).
    failure_rate: float = 0.0

    # Error message when failure triggers.
    error_message: str = "Model unavailable"

    # Model name in responses.
    model_name: str = "mock-structured"

    # Output mode controlling what the mock returns.
    # Can be a single mode or a list — if list, cycles through them per call.
    output_mode: OutputMode | list[OutputMode] = "valid"

    # The JSON value used as the base for responses. Any JSON value works;
    # missing_field and wrong_type only alter objects.
    valid_output: object = field(default_factory=lambda: dict(DEFAULT_VALID_OUTPUT))


class MockProvider:
    """Mock LLM provider with configurable structured output behavior."""

    def __init__(self, config: MockProviderConfig | None = None) -> None:
        self._config = config or MockProviderConfig()
        modes = self._config.output_mode
        self._output_modes: list[OutputMode] = list(modes) if isinstance(modes, list) else [modes]
        self._requests: list[LLMRequest] = []

    async def call(self, request: LLMRequest) -> LLMResponse:
        self._requests.append(request)

        if self._config.latency_ms > 0:
            await asyncio.sleep(self._config.latency_ms / 1000)

        if random.random() < self._config.failure_rate:
            raise RuntimeError(self._config.error_message)

        mode_index = (len(self._requests) - 1) % len(self._output_modes)
        mode = self._output_modes[mode_index]

        return LLMResponse(
            content=self._generate_output(mode),
            model=self._config.model_name,
            finish_reason="length" if mode == "truncated" else "stop",
        )

    def _generate_output(self, mode: OutputMode) -> str:
        valid = self._config.valid_output
        valid_json = json.dumps(valid)

        if mode == "valid":
            return valid_json

        if mode == "markdown_wrapped":
            return f"```json\n{valid_json}\n```"

        if mode == "bare_fenced":
            return f"```\n{valid_json}\n```"

        if mode == "truncated":
            cut_point = math.floor(len(valid_json) * 0.6)
            return valid_json[:cut_point]

        if mode == "missing_field":
            if not isinstance(valid, dict) or not valid:
                return valid_json
            first = next(iter(valid))
            return json.dumps({k: v for k, v in valid.items() if k != first})

        if mode == "wrong_type":
            if not isinstance(valid, dict):
                return valid_json
            mutated = dict(valid)
            for key, value in mutated.items():
                if isinstance(value, bool):
                    continue
                if isinstance(value, (int, float)):
                    mutated[key] = str(value)
                    break
                if isinstance(value, str):
                    mutated[key] = 999
                    break
            return json.dumps(mutated)

        if mode == "extra_text":
            return f"Here is the data you requested:\n{valid_json}\nI hope this helps!"

        if mode == "non_json":
            return "I apologize, but I cannot provide the requested information in the specified format."

        if mode == "refusal":
            return "I'm sorry, but I can't assist with that request due to safety guidelines."

        return valid_json

    @property
    def call_count(self) -> int:
        """Total calls made to this provider instance."""
        return len(self._requests)

    @property
    def requests(self) -> list[LLMRequest]:
        """Every request received, in call order."""
        return list(self._requests)

    def reset(self) -> None:
        """Forget recorded requests."""
        self._requests.clear()
