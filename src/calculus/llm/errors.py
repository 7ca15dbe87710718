"""Model backend error hierarchy.

All LLM client errors inherit from ModelBackendError, so the agent loop
can report any of them as a failed turn with one ``except`` clause.
"""

from __future__ import annotations

from calculus.exceptions import ModelBackendError


class LLMConfigError(ModelBackendError):
    """Missing or invalid client configuration (e.g., no API key)."""


class LLMRateLimitError(ModelBackendError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class LLMAuthError(ModelBackendError):
    """Authentication failed (401/403)."""


class LLMResponseError(ModelBackendError):
    """Unexpected response format from the model API."""
