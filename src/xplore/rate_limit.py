"""
Rate-limit strategies.

The request pipeline never calls these on its own. A caller that catches an
ApiError with a 429 status builds a RateLimitEvent from it and hands it to
whichever strategy it was configured with.

Known headers on a throttled response:
  x-rate-limit-limit      requests allowed per window
  x-rate-limit-remaining  requests left in the current window
  x-rate-limit-reset      UNIX timestamp when the window resets
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

import httpx

from xplore.errors import ApiError, InvalidResponseError, RateLimitError, XploreError

logger = logging.getLogger(__name__)

LIMIT_HEADER = "x-rate-limit-limit"
REMAINING_HEADER = "x-rate-limit-remaining"
RESET_HEADER = "x-rate-limit-reset"


def is_rate_limited(error: XploreError) -> bool:
    return isinstance(error, ApiError) and error.status_code == 429


class RateLimitEvent:
    """Read-only view of a throttled response."""

    __slots__ = ("status_code", "headers", "url")

    def __init__(self, status_code: int, headers: httpx.Headers, url: Optional[str] = None):
        self.status_code = status_code
        self.headers = headers
        self.url = url

    @classmethod
    def from_error(cls, error: ApiError) -> "RateLimitEvent":
        return cls(error.status_code, error.headers, error.url)

    def __repr__(self) -> str:
        return f"RateLimitEvent(status_code={self.status_code!r}, url={self.url!r})"


class RateLimitStrategy(ABC):
    @abstractmethod
    async def on_rate_limit(self, event: RateLimitEvent) -> float:
        """React to a throttled response. Returns the seconds spent waiting."""


class WaitingRateLimitStrategy(RateLimitStrategy):
    """Sleep until the current window resets, then let the caller retry.

    Windows of up to ~13 minutes have been observed.
    """

    def __init__(
        self,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self._sleep = sleep
        self._clock = clock

    @staticmethod
    def _header(event: RateLimitEvent, name: str) -> str:
        value = event.headers.get(name)
        if value is None:
            raise InvalidResponseError(f"Missing {name} header")
        return value.strip()

    async def on_rate_limit(self, event: RateLimitEvent) -> float:
        limit = self._header(event, LIMIT_HEADER)
        remaining = self._header(event, REMAINING_HEADER)
        reset = self._header(event, RESET_HEADER)
        logger.info("Rate limit event: limit=%s, remaining=%s, reset=%s", limit, remaining, reset)

        if remaining != "0" or not reset:
            return 0.0
        try:
            reset_at = int(reset)
        except ValueError as e:
            raise InvalidResponseError(f"Failed to parse {RESET_HEADER}: {reset!r}") from e

        delay = max(reset_at - self._clock(), 0.0)
        logger.warning("Rate limited; waiting %.0fs for the window to reset", delay)
        await self._sleep(delay)
        return delay


class ErrorRateLimitStrategy(RateLimitStrategy):
    """Fail immediately."""

    async def on_rate_limit(self, event: RateLimitEvent) -> float:
        raise RateLimitError(f"Rate limit exceeded (status {event.status_code})")
