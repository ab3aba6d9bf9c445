"""Linearcast: scheduled broadcast channels with synchronized playback."""

__version__ = "0.1.0"
