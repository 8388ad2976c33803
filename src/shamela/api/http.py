# ABOUTME: HTTP client abstraction for Shamela API calls and archive downloads.
# ABOUTME: Provides retry with backoff, URL redaction for logs, and injectable transport for testing.

import logging
import time
from typing import Any, Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

SENSITIVE_PARAMS = ("api_key", "token", "password", "secret", "auth")


class ShamelaFetchError(Exception):
    """Raised when an HTTP request to the Shamela API or its download host fails."""


def redact_url(url: str, sensitive_params: tuple[str, ...] = SENSITIVE_PARAMS) -> str:
    """Mask credential query parameters so the URL can be logged.

    Values longer than six characters keep their first and last three
    characters around ``***``; shorter values become ``***``.
    """
    parts = urlsplit(url)
    query = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key in sensitive_params and value:
            value = f"{value[:3]}***{value[-3:]}" if len(value) > 6 else "***"
        query.append((key, value))
    return urlunsplit(parts._replace(query=urlencode(query, safe="*")))


def fix_https_protocol(url: str) -> str:
    """Force the https scheme on a download URL returned by the API."""
    parts = urlsplit(url)
    return urlunsplit(parts._replace(scheme="https"))


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against the Shamela API."""

    def get_json(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...

    def get_bytes(self, url: str) -> bytes: ...


class ShamelaHttpClient:
    """HTTP client with retry for Shamela API calls and downloads.

    Wraps httpx.Client with retry logic for transient failures (429, 5xx).
    """

    def __init__(
        self,
        *,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": "shamela/0.1.0"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    def get_json(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Send a GET request and parse the JSON body.

        Raises:
            ShamelaFetchError: On HTTP errors, exhausted retries, or a non-JSON body.
        """
        response = self._get(url, params)
        try:
            data = response.json()
        except ValueError as exc:
            raise ShamelaFetchError(
                f"Invalid JSON from {redact_url(str(response.url))}"
            ) from exc
        if not isinstance(data, dict):
            raise ShamelaFetchError(f"Expected a JSON object from {redact_url(str(response.url))}")
        return data

    def get_bytes(self, url: str) -> bytes:
        """Send a GET request and return the raw body.

        Raises:
            ShamelaFetchError: On HTTP errors or exhausted retries.
        """
        return self._get(url).content

    def close(self) -> None:
        self._client.close()

    def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        attempts = 1 + self._max_retries
        last_status = 0
        for attempt in range(attempts):
            try:
                response = self._client.get(url, params=params)
                last_status = response.status_code
            except httpx.HTTPError as exc:
                raise ShamelaFetchError(f"Request failed: {redact_url(url)}: {exc}") from exc

            safe_url = redact_url(str(response.url))
            if response.status_code == 200:
                return response

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise ShamelaFetchError(f"HTTP {response.status_code} from {safe_url}")

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    safe_url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)

        raise ShamelaFetchError(
            f"HTTP {last_status} from {redact_url(url)} after {attempts} attempts"
        )
