"""
Structured Generation — Provider Adapters

Helpers for plugging a model into the generator. Models that take a single
prompt (no separate system role) get both instructions folded into one text.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from ._types import LLMProvider, LLMRequest, LLMResponse

__all__ = ["combine_prompts", "single_prompt_provider"]


def combine_prompts(system_prompt: str | None, user_prompt: str) -> str:
    """Fold a system and a user instruction into one prompt."""
    if not system_prompt:
        return user_prompt
    return f"{system_prompt}\n\nUSER REQUEST:\n{user_prompt}"


def single_prompt_provider(
    complete: Callable[[str], Awaitable[str]], model: str | None = None
) -> LLMProvider:
    """Wrap an async ``prompt -> text`` completion function as an LLMProvider."""

    async def call(request: LLMRequest) -> LLMResponse:
        text = await complete(combine_prompts(request.system_prompt, request.prompt))
        return LLMResponse(content=text, model=model, finish_reason="stop")

    return call
