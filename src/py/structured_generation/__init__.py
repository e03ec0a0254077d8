"""
Structured Generation

Schema-constrained generation over an unreliable text model:
Prompt -> Generate -> Parse -> Validate -> Retry, ending in a Success or a
typed Failure. Package entry point — re-exports from the submodules.
"""

from ._types import (
    ErrorCode,
    Failure,
    GenerationError,
    GenerationOutcome,
    GeneratorConfig,
    LLMProvider,
    LLMRequest,
    LLMResponse,
    Message,
    MessageRole,
    ResponseParseError,
    Success,
    ValidationResult,
)
from .bridge import StructuredGenerationBridge
from .generator import StructuredGenerator, group_messages
from .mock_provider import MockProvider, MockProviderConfig
from .prompts import (
    build_corrective_prompt,
    build_initial_prompt,
    build_language_instruction,
    canonical_schema,
)
from .providers import combine_prompts, single_prompt_provider
from .response_parser import parse_response, strip_markdown_fences
from .schema_validator import validate
from .values import (
    JsonArray,
    JsonBool,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
    from_python,
    to_python,
)

__all__ = [
    "StructuredGenerator",
    "StructuredGenerationBridge",
    "group_messages",
    "validate",
    "parse_response",
    "strip_markdown_fences",
    "canonical_schema",
    "build_initial_prompt",
    "build_corrective_prompt",
    "build_language_instruction",
    "combine_prompts",
    "single_prompt_provider",
    "ErrorCode",
    "Failure",
    "GenerationError",
    "GenerationOutcome",
    "GeneratorConfig",
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "Message",
    "MessageRole",
    "ResponseParseError",
    "Success",
    "ValidationResult",
    "JsonArray",
    "JsonBool",
    "JsonNull",
    "JsonNumber",
    "JsonObject",
    "JsonString",
    "JsonValue",
    "from_python",
    "to_python",
    "MockProvider",
    "MockProviderConfig",
]
