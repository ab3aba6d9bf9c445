"""Wall-clock abstractions used for broadcast resolution and client sync.

Both the now-playing service and the client sync engine read time through a
clock object rather than calling :func:`time.time` directly, so tests can pin
or step the instant. Times are integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Protocol, runtime_checkable

import time

TimeFn = Callable[[], float]


@runtime_checkable
class Clock(Protocol):
    """Protocol implemented by clock providers."""

    def now_ms(self) -> int:
        """Return the current time in epoch milliseconds."""


@dataclass
class SystemClock:
    """Clock backed by the host's wall clock.

    Parameters
    ----------
    skew_ms:
        Constant offset added to every reading. Lets a headless viewer
        simulate a client whose clock disagrees with the server's.
    time_fn:
        Injectable time function, defaults to :func:`time.time`.
    """

    skew_ms: int = 0
    time_fn: TimeFn = field(default=time.time)

    def now_ms(self) -> int:
        return int(self.time_fn() * 1000) + self.skew_ms


class SteppedClock:
    """Deterministic clock used for tests.

    Time advances only when :meth:`advance` or :meth:`set` is called.
    """

    def __init__(self, start_ms: int = 0) -> None:
        self._current = start_ms
        self._lock = Lock()

    def now_ms(self) -> int:
        with self._lock:
            return self._current

    def advance(self, seconds: float) -> int:
        """Advance the clock by ``seconds`` (must be non-negative)."""
        if seconds < 0.0:
            raise ValueError("seconds must be non-negative")
        with self._lock:
            self._current += int(round(seconds * 1000))
            return self._current

    def set(self, now_ms: int) -> None:
        """Jump to ``now_ms``; time never moves backwards."""
        with self._lock:
            if now_ms < self._current:
                raise ValueError("clock cannot move backwards")
            self._current = now_ms


def ms_from_datetime(dt: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        raise ValueError("Datetime must be timezone-aware")
    return int(dt.astimezone(timezone.utc).timestamp() * 1000)


def floor_to_second(now_ms: int) -> int:
    return now_ms - (now_ms % 1000)
