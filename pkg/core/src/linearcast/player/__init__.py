"""Client-side playback synchronization."""

from .engine import (
    ClientSyncEngine,
    FetchCompleted,
    FetchFailed,
    MediaReady,
    PlaybackPaused,
    PlayerState,
    RefetchDue,
    SeekCheck,
    Teardown,
    TuneIn,
)
from .scheduler import ManualScheduler, Scheduler, ThreadScheduler, TimerHandle
from .sync import SyncConfig, expected_offset
from .transport import FetchHandle, HttpNowPlayingTransport, NowPlayingTransport
from .video import HeadlessVideoElement, VideoElement

__all__ = [
    "ClientSyncEngine",
    "FetchCompleted",
    "FetchFailed",
    "FetchHandle",
    "HeadlessVideoElement",
    "HttpNowPlayingTransport",
    "ManualScheduler",
    "MediaReady",
    "NowPlayingTransport",
    "PlaybackPaused",
    "PlayerState",
    "RefetchDue",
    "Scheduler",
    "SeekCheck",
    "SyncConfig",
    "Teardown",
    "ThreadScheduler",
    "TimerHandle",
    "TuneIn",
    "VideoElement",
    "expected_offset",
]
