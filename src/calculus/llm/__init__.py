"""Model backend for Calculus.

Provides an OpenAI-compatible HTTP client and the ``ModelBackend``
protocol the agent loop is written against.
"""

from calculus.llm.client import OpenAIClient
from calculus.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)
from calculus.llm.protocols import ModelBackend, ModelResponse

__all__ = [
    "OpenAIClient",
    "ModelBackend",
    "ModelResponse",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
]
