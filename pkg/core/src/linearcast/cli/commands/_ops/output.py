from __future__ import annotations

import json
from typing import Any, NoReturn

import typer


def format_json_output(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def emit(payload: dict[str, Any], json_output: bool, human_lines: list[str]) -> None:
    """Print ``payload`` as JSON or ``human_lines`` as text."""
    if json_output:
        typer.echo(format_json_output(payload))
    else:
        for line in human_lines:
            typer.echo(line)


def fail(message: str, json_output: bool, **extra: Any) -> NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        typer.echo(format_json_output({"status": "error", "error": message, **extra}))
    else:
        typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)
