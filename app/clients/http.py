"""Shared HTTP plumbing for market data clients."""

import asyncio
import logging
from typing import Any

import httpx

from app.errors import MarketDataError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 120):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait_time = self.last_call + self.interval - loop.time()
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = loop.time()


class RestClient:
    """Base JSON REST client: lazy httpx.AsyncClient, rate limiting, error mapping.

    Every transport, status or decoding failure surfaces as MarketDataError.
    """

    provider = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rate_limiter = rate_limiter or RateLimiter()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request with rate limiting."""
        await self.rate_limiter.acquire()
        client = await self._get_client()
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await client.request(method, endpoint, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise MarketDataError(
                self.provider,
                f"HTTP {e.response.status_code} for {endpoint}",
            ) from e
        except httpx.HTTPError as e:
            raise MarketDataError(self.provider, f"request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise MarketDataError(self.provider, f"invalid JSON from {endpoint}") from e
