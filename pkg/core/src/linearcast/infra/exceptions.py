"""
Custom exceptions for Linearcast operations.

This module provides the exception hierarchy shared by the schedule store,
the resolvers, the HTTP layer and the client sync engine.
"""

from __future__ import annotations


class LinearcastError(Exception):
    """Base exception for all Linearcast errors."""

    pass


class ValidationError(LinearcastError):
    """Raised when validation fails."""

    pass


class ScheduleValidationError(ValidationError):
    """Raised when a channel schedule fails validation at the store boundary."""

    def __init__(
        self,
        message: str,
        channel_id: str | None = None,
        violations: list[str] | None = None,
    ):
        """
        Initialize a schedule validation error.

        Args:
            message: Human-readable error message
            channel_id: Channel whose schedule was rejected
            violations: List of specific violation descriptions
        """
        super().__init__(message)
        self.message = message
        self.channel_id = channel_id
        self.violations = violations or []

    def __str__(self) -> str:
        """Return formatted error message with violations."""
        prefix = f"Channel {self.channel_id}: " if self.channel_id else ""
        if self.violations:
            violations_text = "\n  - ".join(self.violations)
            return f"{prefix}{self.message}\nViolations:\n  - {violations_text}"
        return f"{prefix}{self.message}"


class ChannelNotFoundError(LinearcastError):
    """Raised when a channel id does not exist in the schedule."""

    def __init__(self, channel_id: str):
        super().__init__(f"Channel {channel_id!r} not found in schedule")
        self.channel_id = channel_id


class ResourceError(LinearcastError):
    """Raised when a resource (file, media path) is not available."""

    pass


class SyncError(LinearcastError):
    """Base class for non-fatal client synchronization problems."""

    pass


class NetworkFailure(SyncError):
    """Raised when the now-playing descriptor could not be fetched."""

    pass


class ClockDriftCorrectionFailure(SyncError):
    """Reported when seek verification exhausts its retry budget."""

    def __init__(self, expected: float, actual: float, attempts: int):
        super().__init__(
            f"Playback drift {abs(actual - expected):.3f}s remains after {attempts} seek retries"
        )
        self.expected = expected
        self.actual = actual
        self.attempts = attempts


class PlaybackRejected(SyncError):
    """Raised by a video element when it refuses to start playback."""

    pass
