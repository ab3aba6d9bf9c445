"""
Shared helpers for CLI command groups.

Modules:
- context: resolving the data directory, store and catalog from the Typer context
- output: JSON/human output and uniform error exits
"""

from .context import CliContext, get_cli_context, load_catalog, open_store, parse_at
from .output import emit, fail, format_json_output

__all__ = [
    "CliContext",
    "emit",
    "fail",
    "format_json_output",
    "get_cli_context",
    "load_catalog",
    "open_store",
    "parse_at",
]
