"""OpenAI-compatible httpx client with tenacity retry.

Provides a sync HTTP client for OpenAI-compatible chat completion APIs
(OpenAI, OpenRouter, ...). Every request carries the attribution header
pair (``HTTP-Referer`` / ``X-Title``).
"""

from __future__ import annotations

import copy
import json
import logging
import os
import uuid
from typing import Any

import httpx
import tenacity

from calculus.exceptions import ModelBackendError
from calculus.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMResponseError,
)
from calculus.llm.protocols import ModelResponse
from calculus.toolkit.models import ToolCall

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "anthropic/claude-sonnet-4"
DEFAULT_REFERER = "https://thesobercoder.in"
DEFAULT_TITLE = "Calculus"

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors.
    Not retryable: 401, 403, 400, other client errors.
    """
    if isinstance(exc, LLMAuthError):
        return False
    if isinstance(exc, LLMRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class OpenAIClient:
    """Sync httpx client for OpenAI-compatible chat completions.

    Implements the ModelBackend protocol through ``generate``. Supports
    retry with exponential backoff for transient errors (429, 5xx).
    Fails immediately on authentication errors (401, 403).

    Usage::

        with OpenAIClient(api_key="sk-...", base_url="https://openrouter.ai/api/v1") as client:
            reply = client.generate([{"role": "user", "content": "Hello"}], tools=[])
            print(reply.text)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str = DEFAULT_MODEL,
        *,
        temperature: float | None = 0.5,
        top_p: float | None = None,
        reasoning_effort: str | None = None,
        referer: str = DEFAULT_REFERER,
        title: str = DEFAULT_TITLE,
        timeout: float = 120.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            api_key: API key. Falls back to OPENAI_API_KEY env var.
            base_url: API base URL. Falls back to OPENAI_BASE_URL env var,
                then to https://api.openai.com/v1.
            default_model: Model identifier used by ``chat``/``generate``.
            temperature: Sampling temperature sent with ``generate``.
            top_p: Nucleus sampling parameter sent with ``generate``, if set.
            reasoning_effort: Reasoning-effort hint sent with ``generate``, if set.
            referer: Value of the ``HTTP-Referer`` attribution header.
            title: Value of the ``X-Title`` attribution header.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of attempts for retryable errors.
            transport: Optional httpx transport (used by tests).

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        if not self._api_key:
            raise LLMConfigError(
                "No API key provided. Pass api_key= or set OPENAI_API_KEY "
                "environment variable."
            )
        self._base_url = (
            base_url
            or os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
        ).rstrip("/")
        self._default_model = default_model
        self._temperature = temperature
        self._top_p = top_p
        self._reasoning_effort = reasoning_effort
        self._max_retries = max_retries
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
                "HTTP-Referer": referer,
                "X-Title": title,
            },
        )

    def chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send chat completion request with retry.

        Uses tenacity.Retrying programmatically (not as decorator) so that
        max_retries is configurable per-instance.

        Args:
            messages: List of message dicts in OpenAI chat format.
            model: Model to use. Falls back to default_model.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional payload parameters (tools, top_p, ...)
                forwarded to the API.

        Returns:
            Full response dict with 'choices', 'usage', 'model', etc.

        Raises:
            LLMAuthError: On 401/403 (no retry).
            LLMRateLimitError: On 429 after all retries exhausted.
            LLMResponseError: On unexpected response format.
            httpx.HTTPError: On other transport or HTTP failures.
        """
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(
            self._do_chat,
            messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

    def _do_chat(
        self,
        messages: list[dict],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Execute a single chat completion request (no retry)."""
        payload: dict[str, Any] = {
            "model": model or self._default_model,
            "messages": messages,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        payload.update(kwargs)

        response = self._client.post(
            f"{self._base_url}/chat/completions",
            json=payload,
        )

        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise LLMAuthError(
                f"Authentication failed: HTTP {response.status_code} - "
                f"{response.text}"
            )

        if response.status_code == 429:
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise LLMRateLimitError(
                f"Rate limited: HTTP 429 - {response.text}",
                retry_after=retry_after,
            )

        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(f"Response is not JSON: {response.text[:200]}") from exc
        if "choices" not in data:
            raise LLMResponseError(
                f"Unexpected response format: missing 'choices' key. "
                f"Response: {data}"
            )
        return data

    def generate(self, messages: list[dict], tools: list[dict]) -> ModelResponse:
        """Produce the next assistant reply for the agent loop.

        Raises:
            ModelBackendError: On any transport, HTTP, auth, or format failure.
        """
        kwargs: dict[str, Any] = {}
        if tools:
            kwargs["tools"] = tools
        if self._top_p is not None:
            kwargs["top_p"] = self._top_p
        if self._reasoning_effort is not None:
            kwargs["reasoning_effort"] = self._reasoning_effort
        try:
            response = self.chat(messages, temperature=self._temperature, **kwargs)
        except ModelBackendError:
            raise
        except httpx.HTTPError as exc:
            raise ModelBackendError(f"{type(exc).__name__}: {exc}") from exc
        return self.parse_response(response)

    @staticmethod
    def parse_response(response: dict) -> ModelResponse:
        """Turn a chat completion dict into a ModelResponse.

        Raises:
            LLMResponseError: If the response has no first choice message,
                or the message or its tool calls are malformed.
        """
        try:
            message = response["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMResponseError(
                f"Cannot extract message from response: {exc}. "
                f"Response: {response}"
            ) from exc
        if not isinstance(message, dict):
            raise LLMResponseError(
                f"Unexpected message in response: {message!r}"
            )

        text = message.get("content") or ""
        tool_calls = OpenAIClient.extract_tool_calls(message)
        recorded: dict[str, Any] = {"role": "assistant", "content": text}
        if tool_calls:
            # Keep provider-specific fields, but make sure every call has
            # the id its tool result will answer to.
            raw_calls = copy.deepcopy(message["tool_calls"])
            for raw, call in zip(raw_calls, tool_calls):
                raw["id"] = call.id
            recorded["tool_calls"] = raw_calls
        return ModelResponse(text=text, tool_calls=tool_calls, message=recorded)

    @staticmethod
    def extract_tool_calls(message: dict) -> list[ToolCall]:
        """Parse ``message["tool_calls"]`` into ToolCall objects, in order.

        Arguments that are not valid JSON are kept as the raw string.

        Raises:
            LLMResponseError: If ``tool_calls`` is not a list, or an entry
                or its ``function`` is not an object.
        """
        raw_calls = message.get("tool_calls") or []
        if not isinstance(raw_calls, list):
            raise LLMResponseError(
                f"Malformed tool_calls: expected a list, got {type(raw_calls).__name__}"
            )
        result: list[ToolCall] = []
        for index, raw in enumerate(raw_calls):
            if not isinstance(raw, dict):
                raise LLMResponseError(
                    f"Malformed tool call at index {index}: {raw!r}"
                )
            func = raw.get("function") or {}
            if not isinstance(func, dict):
                raise LLMResponseError(
                    f"Malformed function in tool call at index {index}: {func!r}"
                )
            call_id = raw.get("id") or f"call_{uuid.uuid4().hex[:8]}"
            name = func.get("name", "")
            raw_args = func.get("arguments")
            if isinstance(raw_args, dict):
                arguments: Any = raw_args
            elif not raw_args:
                arguments = {}
            else:
                try:
                    arguments = json.loads(raw_args)
                except (json.JSONDecodeError, TypeError):
                    logger.warning("Malformed JSON in tool call arguments for %s", name)
                    arguments = raw_args
            result.append(ToolCall(id=call_id, name=name, arguments=arguments))
        return result

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
