"""
Clock - time sources for the auction house.

The core never reads the wall clock itself; the facade asks a clock for
"now" in whole seconds and passes it down explicitly.
"""

import time
from typing import Callable, Protocol

from dutch_auction.utils.logger import get_logger

logger = get_logger("clock")


class Clock(Protocol):
    """Monotonically non-decreasing source of whole seconds since epoch."""

    def now(self) -> int:
        ...


class SystemClock:
    """
    Wall clock, clamped so it never runs backwards.

    If the system time steps back (NTP correction), the last returned value
    is repeated until the wall clock catches up.
    """

    def __init__(self, source: Callable[[], float] = time.time):
        self._source = source
        self._last = 0

    def now(self) -> int:
        current = int(self._source())
        if current < self._last:
            logger.debug(f"Wall clock stepped back {self._last - current}s, holding at {self._last}")
            return self._last
        self._last = current
        return current


class ManualClock:
    """
    Clock driven explicitly by the caller.

    Used by tests and the CLI demo to replay scenarios at exact timestamps.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"Clock start must be >= 0, got {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        """Move the clock to an absolute timestamp (never backwards)."""
        if timestamp < self._now:
            raise ValueError(f"Clock cannot move backwards: {timestamp} < {self._now}")
        self._now = timestamp

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError(f"Cannot advance by negative seconds: {seconds}")
        self._now += seconds
        return self._now

    def __repr__(self) -> str:
        return f"ManualClock(now={self._now})"
