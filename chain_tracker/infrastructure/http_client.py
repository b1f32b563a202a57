"""Shared HTTP client with exponential backoff retry."""

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_delay,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# JSON can be any of these types
JsonValue = dict[str, Any] | list[Any] | str | int | float | bool | None


def is_retryable(exc: BaseException) -> bool:
    """Transport failures, 429 and 5xx other than 501 are retried; other statuses are final."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or (status >= 500 and status != 501)
    return isinstance(exc, httpx.TransportError)


# Retry transient errors: stop after 60s, exponential backoff (max 10s)
RETRY_CONFIG = {
    "retry": retry_if_exception(is_retryable),
    "stop": stop_after_delay(60),
    "wait": wait_exponential(multiplier=1, max=10),
    "reraise": True,
}


class HttpClient:
    """One pooled httpx.AsyncClient shared by all chains and the price feed.

    Creating the client opens no connections; the pool is filled lazily on the
    first request and released by aclose().
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_connections: int = 100,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_connections=max_connections),
            headers={"Accept": "application/json"},
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    @retry(**RETRY_CONFIG)
    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> JsonValue:
        response = await self._client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()

    @retry(**RETRY_CONFIG)
    async def post(
        self,
        url: str,
        json: dict[str, Any] | list[Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> JsonValue:
        response = await self._client.post(url, json=json, headers=headers)
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Shared HTTP client closed")
