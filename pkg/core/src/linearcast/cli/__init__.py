"""Command-line interface for Linearcast."""
