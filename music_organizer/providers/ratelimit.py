from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Blocking limiter shared by every request a client makes.

    ``min_interval`` spaces consecutive calls. ``budget``/``window`` add a
    reservoir that refills completely every ``window`` seconds; once it is
    empty, callers wait for the next refill.
    """

    def __init__(
        self,
        *,
        min_interval: float = 0.0,
        budget: int | None = None,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self.budget = budget
        self.window = window
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None
        self._remaining = budget
        self._window_started: float | None = None

    def acquire(self) -> None:
        now = self._clock()
        if self.budget is not None:
            if self._window_started is None or now - self._window_started >= self.window:
                self._window_started = now
                self._remaining = self.budget
            if not self._remaining:
                wait = self.window - (now - self._window_started)
                logger.debug("Request budget exhausted; waiting %.1fs", wait)
                self._sleep(max(0.0, wait))
                now = self._clock()
                self._window_started = now
                self._remaining = self.budget
            self._remaining -= 1
        if self._last_call is not None and self.min_interval:
            wait = self.min_interval - (now - self._last_call)
            if wait > 0:
                self._sleep(wait)
                now = self._clock()
        self._last_call = now

    @classmethod
    def fixed_interval(cls, seconds: float, **kwargs) -> "RateLimiter":
        return cls(min_interval=seconds, **kwargs)

    @classmethod
    def per_minute(cls, requests: int, **kwargs) -> "RateLimiter":
        return cls(budget=max(1, requests), window=60.0, **kwargs)
