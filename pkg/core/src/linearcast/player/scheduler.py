"""Timer schedulers for the client sync engine.

The engine never sleeps or starts threads itself; it asks a scheduler to run
a callback later and keeps the returned handle so it can cancel it.

- :class:`ManualScheduler` fires timers only when the test advances its
  :class:`~linearcast.runtime.clock.SteppedClock`.
- :class:`ThreadScheduler` runs every callback serially on one worker thread,
  which gives the engine single-threaded, event-driven semantics in a real
  process.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from threading import Condition, Thread
from typing import Callable, Protocol, runtime_checkable

from linearcast.runtime.clock import SteppedClock

_logger = logging.getLogger(__name__)

Callback = Callable[[], None]


@dataclass
class TimerHandle:
    """Cancellable reference to a scheduled callback."""

    due: float
    callback: Callback
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True


@runtime_checkable
class Scheduler(Protocol):
    """Protocol implemented by timer schedulers."""

    def call_later(self, delay_seconds: float, callback: Callback) -> TimerHandle:
        """Run ``callback`` after ``delay_seconds`` (clamped to >= 0)."""


class ManualScheduler:
    """Deterministic scheduler for tests.

    Timers fire in due order, and the shared clock is moved to each timer's
    due instant before its callback runs.
    """

    def __init__(self, clock: SteppedClock) -> None:
        self.clock = clock
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay_seconds: float, callback: Callback) -> TimerHandle:
        due = self.clock.now_ms() + max(0.0, delay_seconds) * 1000.0
        handle = TimerHandle(due=due, callback=callback)
        heapq.heappush(self._queue, (due, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> list[TimerHandle]:
        return [h for _, _, h in sorted(self._queue) if not h.cancelled]

    def run_due(self) -> int:
        """Fire every timer due at the current instant. Returns the count fired."""
        return self._fire_until(self.clock.now_ms())

    def advance(self, seconds: float) -> int:
        """Move time forward, firing timers as their due instants pass."""
        target = self.clock.now_ms() + int(round(seconds * 1000))
        fired = self._fire_until(target)
        if self.clock.now_ms() < target:
            self.clock.set(target)
        return fired

    def _fire_until(self, target_ms: float) -> int:
        fired = 0
        while self._queue and self._queue[0][0] <= target_ms:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            due_ms = int(due)
            if due_ms > self.clock.now_ms():
                self.clock.set(due_ms)
            handle.callback()
            fired += 1
        return fired


class ThreadScheduler:
    """Run callbacks on a single worker thread in due order.

    Parameters
    ----------
    monotonic_fn:
        Injectable monotonic function, defaults to :func:`time.monotonic`.
    """

    def __init__(self, monotonic_fn: Callable[[], float] = time.monotonic) -> None:
        self._monotonic = monotonic_fn
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._cond = Condition()
        self._stopped = False
        self._thread = Thread(target=self._run, name="linearcast-scheduler", daemon=True)
        self._thread.start()

    def call_later(self, delay_seconds: float, callback: Callback) -> TimerHandle:
        due = self._monotonic() + max(0.0, delay_seconds)
        handle = TimerHandle(due=due, callback=callback)
        with self._cond:
            heapq.heappush(self._queue, (due, next(self._seq), handle))
            self._cond.notify()
        return handle

    def stop(self, timeout: float | None = 1.0) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify()
        self._thread.join(timeout=timeout)

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._stopped:
                    if not self._queue:
                        self._cond.wait()
                        continue
                    wait = self._queue[0][0] - self._monotonic()
                    if wait <= 0:
                        break
                    self._cond.wait(timeout=wait)
                if self._stopped:
                    return
                _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            try:
                handle.callback()
            except Exception:
                # A failing callback must not take the event loop down with it.
                _logger.exception("Scheduled callback failed")
