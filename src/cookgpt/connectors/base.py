"""Base HTTP connector shared by the external API clients."""

from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cookgpt.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ConnectorResponse:
    """Standardized response from connector API calls."""

    data: Any
    status_code: int
    headers: dict[str, str]

    @property
    def is_success(self) -> bool:
        """Check if response indicates success."""
        return 200 <= self.status_code < 300


class ConnectorError(Exception):
    """Base exception for connector errors."""

    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class HTTPConnector:
    """
    Async JSON-over-HTTP client with retries on transient network failures.

    Subclasses set ``base_url`` and override ``default_headers`` as needed.
    HTTP error statuses are not retried; they raise ConnectorError.
    """

    DEFAULT_TIMEOUT = 30.0
    MAX_RETRIES = 3
    BACKOFF_BASE = 1
    BACKOFF_MAX = 30
    USER_AGENT = "CookGPT/1.0"

    def __init__(self, base_url: str, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        """Return connector name for logging."""
        return self.__class__.__name__

    def default_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": self.USER_AGENT,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=self.default_headers(),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HTTPConnector":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> ConnectorResponse:
        """Make an HTTP request with retry logic."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        client = await self._get_client()

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.MAX_RETRIES),
            wait=wait_exponential(multiplier=self.BACKOFF_BASE, max=self.BACKOFF_MAX),
            reraise=True,
        )
        async def _do_request() -> httpx.Response:
            return await client.request(method, url, params=params, json=json, headers=headers)

        try:
            response = await _do_request()
        except (RetryError, httpx.TimeoutException, httpx.NetworkError) as e:
            logger.error(f"{self.name}: request failed after {self.MAX_RETRIES} attempts: {url}")
            raise ConnectorError(
                f"Request failed after {self.MAX_RETRIES} attempts",
                response=str(e),
            ) from e

        try:
            data = response.json() if response.text else {}
        except ValueError as e:
            logger.warning(f"{self.name}: failed to parse JSON response: {e}")
            data = {}

        if response.status_code >= 400:
            logger.error(f"{self.name}: API error {response.status_code} for {url}")
            raise ConnectorError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                response=data or response.text[:500],
            )

        return ConnectorResponse(
            data=data,
            status_code=response.status_code,
            headers=dict(response.headers),
        )
