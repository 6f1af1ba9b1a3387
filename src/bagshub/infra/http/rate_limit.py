"""Process-wide bookkeeping of upstream rate-limit headers."""

import logging
import math
import time
from typing import Callable, Mapping

from bagshub.domain.models.rate_limit import RateLimitInfo
from bagshub.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 1000
DEFAULT_WINDOW_SECONDS = 3600


class RateLimitTracker:
    """Mirror of the latest x-ratelimit-limit / -remaining / -reset headers.

    Constructed once per process and handed to the upstream client. Not locked:
    concurrent requests may read slightly stale counters.
    """

    def __init__(self, reserve: int = 10, clock: Callable[[], float] = time.time) -> None:
        self._reserve = reserve
        self._clock = clock
        self._limit = DEFAULT_LIMIT
        self._remaining = DEFAULT_LIMIT
        self._reset = clock() + DEFAULT_WINDOW_SECONDS

    def update(self, headers: Mapping[str, str]) -> None:
        """Refresh counters from response headers. Missing or garbled headers leave values untouched."""
        self._limit = _int_header(headers, "x-ratelimit-limit", self._limit)
        self._remaining = _int_header(headers, "x-ratelimit-remaining", self._remaining)
        self._reset = float(_int_header(headers, "x-ratelimit-reset", int(self._reset)))

    def should_throttle(self) -> bool:
        return self._remaining <= self._reserve and self._clock() < self._reset

    def check(self) -> None:
        """Raise RateLimitExceededError instead of letting a doomed call go out."""
        if not self.should_throttle():
            return
        wait = max(1, math.ceil(self._reset - self._clock()))
        logger.warning("Upstream quota exhausted (%d left), refusing call for %ds", self._remaining, wait)
        raise RateLimitExceededError(f"Rate limit approaching. Please wait {wait} seconds.", retry_after=wait)

    def snapshot(self) -> RateLimitInfo:
        return RateLimitInfo(limit=self._limit, remaining=self._remaining, reset=self._reset)


def _int_header(headers: Mapping[str, str], name: str, default: int) -> int:
    raw = headers.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default
