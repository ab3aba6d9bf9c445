"""Video element contract driven by the client sync engine.

A real front-end adapts its ``<video>`` element to this protocol; the
headless implementation below is used by ``linearcast watch`` and by tests.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol, runtime_checkable

from linearcast.infra.exceptions import PlaybackRejected
from linearcast.runtime.clock import Clock

_logger = logging.getLogger(__name__)


@runtime_checkable
class VideoElement(Protocol):
    """Minimal surface of an HTML5-style media element."""

    muted: bool

    def load(self, src: str) -> None:
        """Start loading ``src``. The owner reports readiness to the engine."""

    def clear(self) -> None:
        """Stop playback and drop the current source (off-air screen)."""

    @property
    def current_time(self) -> float:
        """Current playback position in seconds."""

    def seek(self, seconds: float) -> None:
        """Set the playback position."""

    def play(self) -> None:
        """Start or resume playback.

        Raises:
            PlaybackRejected: If the autoplay policy refuses playback.
        """


class HeadlessVideoElement:
    """Clock-driven stand-in for a browser video element.

    Position advances with the supplied clock while playing. ``reject_unmuted``
    emulates a browser autoplay policy that only allows muted playback.
    ``on_loaded`` is called with the source after every :meth:`load`.
    """

    def __init__(
        self,
        clock: Clock,
        *,
        muted: bool = False,
        reject_unmuted: bool = False,
        on_loaded: Callable[[str], None] | None = None,
    ) -> None:
        self._clock = clock
        self.on_loaded = on_loaded
        self.muted = muted
        self.reject_unmuted = reject_unmuted
        self.src: str | None = None
        self.paused = True
        self._position = 0.0
        self._anchor_ms: int | None = None

    def load(self, src: str) -> None:
        self.src = src
        self.paused = True
        self._position = 0.0
        self._anchor_ms = None
        _logger.info("video load src=%s", src)
        if self.on_loaded is not None:
            self.on_loaded(src)

    def clear(self) -> None:
        self.src = None
        self.paused = True
        self._position = 0.0
        self._anchor_ms = None

    @property
    def current_time(self) -> float:
        if self.paused or self._anchor_ms is None:
            return self._position
        return self._position + (self._clock.now_ms() - self._anchor_ms) / 1000.0

    def seek(self, seconds: float) -> None:
        self._position = max(0.0, seconds)
        if not self.paused:
            self._anchor_ms = self._clock.now_ms()
        _logger.info("video seek position=%.3f", self._position)

    def play(self) -> None:
        if self.reject_unmuted and not self.muted:
            raise PlaybackRejected("Autoplay with sound is not allowed")
        if self.paused:
            self._anchor_ms = self._clock.now_ms()
            self.paused = False

    def pause(self) -> None:
        if not self.paused:
            self._position = self.current_time
            self._anchor_ms = None
            self.paused = True
