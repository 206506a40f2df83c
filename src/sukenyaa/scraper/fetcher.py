"""Throttled, retrying HTTP fetcher for listing pages."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx

from sukenyaa.shared.exceptions import (
    FetchError,
    FetchTimeoutError,
    ForbiddenError,
    NetworkUnreachableError,
    RateLimitedError,
    UnknownFetchError,
    UpstreamError,
)

if TYPE_CHECKING:
    from sukenyaa.config import Settings

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
}


def backoff_delay(attempt: int, *, base: float, cap: float) -> float:
    """Delay before retrying after the given 1-based failed attempt."""
    return min(base * 2 ** (attempt - 1), cap)


def classify_error(exc: httpx.HTTPError) -> FetchError:
    """Map a transport failure onto the user-facing failure categories."""
    if isinstance(exc, httpx.TimeoutException):
        return FetchTimeoutError(str(exc) or type(exc).__name__)
    if isinstance(exc, httpx.ConnectError):
        return NetworkUnreachableError(str(exc))
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        detail = f"HTTP {status} from {exc.request.url}"
        if status == 429 or "rate limit" in exc.response.text.lower():
            return RateLimitedError(detail)
        if status == 403:
            return ForbiddenError(detail)
        return UpstreamError(detail)
    return UnknownFetchError(f"{type(exc).__name__}: {exc}")


class HttpxFetcher:
    """Fetch listing pages from one site with throttling and retries.

    Implements the ``PageFetcher`` protocol. Each instance keeps its own
    throttle: a request never starts less than ``throttle_delay`` seconds
    after the previous one from the same instance. Waiting happens with
    ``asyncio.sleep`` so other requests keep running.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        health_timeout: float = 5.0,
        throttle_delay: float = 1.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 5.0,
        user_agent: str = "SukeNyaa/1.0.0",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._health_timeout = health_timeout
        self._throttle_delay = throttle_delay
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        self._user_agent = user_agent
        self._clock = clock
        self._throttle_lock = asyncio.Lock()
        self._last_request_at: float | None = None
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings, base_url: str) -> HttpxFetcher:
        return cls(
            base_url,
            timeout=settings.request_timeout_seconds,
            health_timeout=settings.health_timeout_seconds,
            throttle_delay=settings.throttle_delay_seconds,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay_seconds,
            retry_max_delay=settings.retry_max_delay_seconds,
            user_agent=settings.user_agent,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def start(self) -> None:
        """Initialize the persistent HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": self._user_agent, **_DEFAULT_HEADERS},
            )

    async def close(self) -> None:
        """Close the persistent HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_page(self, url: str) -> str:
        """Fetch a page, retrying transient failures with exponential backoff.

        Args:
            url: Absolute URL or path relative to the site root.

        Returns:
            Raw HTML string.

        Raises:
            FetchError: The classified failure of the last attempt.
        """
        last_error: FetchError | None = None
        for attempt in range(1, self._max_retries + 1):
            try:
                return await self._get(url)
            except httpx.HTTPError as exc:
                last_error = classify_error(exc)
                last_error.__cause__ = exc
                will_retry = attempt < self._max_retries
                logger.warning(
                    "fetch attempt %d/%d failed for %s (%s): %s%s",
                    attempt,
                    self._max_retries,
                    url,
                    last_error.kind.value,
                    last_error.detail,
                    ", retrying" if will_retry else "",
                )
                if will_retry:
                    delay = backoff_delay(attempt, base=self._retry_base_delay, cap=self._retry_max_delay)
                    logger.info("waiting %.2fs before attempt %d", delay, attempt + 1)
                    await asyncio.sleep(delay)

        raise last_error or UnknownFetchError("no fetch attempt was made")

    async def check_health(self) -> bool:
        """Issue one short GET against the site root. Never raises."""
        try:
            await self._throttle()
            client = await self._ensure_client()
            resp = await client.get("/", timeout=self._health_timeout)
            return resp.status_code == 200
        except Exception as exc:
            logger.info("health probe failed for %s: %s", self._base_url, exc)
            return False
        finally:
            self._mark_completed()

    async def _get(self, url: str) -> str:
        await self._throttle()
        client = await self._ensure_client()
        try:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.text
        finally:
            self._mark_completed()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.start()
        if self._client is None:
            raise RuntimeError("fetcher HTTP client is not initialized")
        return self._client

    async def _throttle(self) -> None:
        # Reserve the next slot under the lock; sleep outside it.
        async with self._throttle_lock:
            now = self._clock()
            wait = 0.0
            if self._last_request_at is not None:
                wait = max(self._last_request_at + self._throttle_delay - now, 0.0)
            self._last_request_at = now + wait
        if wait > 0:
            logger.debug("throttling %s for %.2fs", self._base_url, wait)
            await asyncio.sleep(wait)

    def _mark_completed(self) -> None:
        now = self._clock()
        if self._last_request_at is None or now > self._last_request_at:
            self._last_request_at = now
