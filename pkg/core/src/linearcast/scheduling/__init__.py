"""Time-of-day codec, conflict detection and schedule validation."""
