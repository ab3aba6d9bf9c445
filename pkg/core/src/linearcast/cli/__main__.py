#!/usr/bin/env python3
"""
CLI entry point for linearcast.cli module.

This allows running: python -m linearcast.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
