"""Bright Data Web Unlocker client used by the search and fetch tools.

Both tools ask the same endpoint to retrieve a URL (a page, or a search
engine's result page) and hand back its markdown rendering as opaque
text.
"""

from __future__ import annotations

import logging
import time
from urllib.parse import quote

import httpx
import tenacity

logger = logging.getLogger(__name__)

BRIGHTDATA_REQUEST_URL = "https://api.brightdata.com/request"

_RETRYABLE_STATUS_CODES = {500, 502, 503, 504}

_SEARCH_URLS = {
    "google": "https://www.google.com/search?q={query}",
    "bing": "https://www.bing.com/search?q={query}",
    "yandex": "https://yandex.com/search/?text={query}",
}


def _encode(value: str) -> str:
    return quote(value, safe="-_.!~*'()")


def search_url(engine: str, query: str, cursor: str | None = None) -> str:
    """Build the result-page URL for ``query`` on ``engine``.

    Unknown engines fall back to Google.
    """
    template = _SEARCH_URLS.get(engine, _SEARCH_URLS["google"])
    url = template.format(query=_encode(query))
    if cursor:
        url += f"&cursor={_encode(cursor)}"
    return url


def _is_retryable(exc: BaseException) -> bool:
    """Connection failures and gateway errors are retried; timeouts are not."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.ConnectError)


class BrightDataClient:
    """Sync httpx client for the Bright Data request endpoint.

    Usage::

        with BrightDataClient(api_key="...", zone="web_unlocker1") as web:
            markdown = web.retrieve("https://example.com")

    Raises from ``retrieve``:
        httpx.TimeoutException: When the request exceeds ``timeout``.
        httpx.HTTPStatusError: On non-2xx responses, after retries.
    """

    def __init__(
        self,
        api_key: str,
        zone: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 2,
        endpoint: str = BRIGHTDATA_REQUEST_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._zone = zone
        self._endpoint = endpoint
        self._max_retries = max_retries
        self.timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    def retrieve(self, url: str) -> str:
        """Fetch ``url`` through the unlocker and return it as markdown.

        ``timeout`` bounds the whole call, retries and body download
        included, not just each connect/read phase.
        """
        deadline = time.monotonic() + self.timeout
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=tenacity.wait_exponential(multiplier=1, min=1, max=8),
            stop=(
                tenacity.stop_after_attempt(self._max_retries + 1)
                | tenacity.stop_after_delay(self.timeout)
            ),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(self._do_retrieve, url, deadline)

    def _do_retrieve(self, url: str, deadline: float) -> str:
        request = self._client.build_request(
            "POST",
            self._endpoint,
            json={
                "url": url,
                "zone": self._zone,
                "format": "raw",
                "data_format": "markdown",
            },
        )
        self._check_deadline(deadline, request)
        response = self._client.send(request, stream=True)
        try:
            response.raise_for_status()
            parts: list[str] = []
            for chunk in response.iter_text():
                self._check_deadline(deadline, request)
                parts.append(chunk)
            return "".join(parts)
        finally:
            response.close()

    def _check_deadline(self, deadline: float, request: httpx.Request) -> None:
        if time.monotonic() > deadline:
            raise httpx.ReadTimeout(
                f"Retrieval exceeded {self.timeout:g}s", request=request
            )

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> BrightDataClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
