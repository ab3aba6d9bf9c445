"""Linearcast command groups."""
