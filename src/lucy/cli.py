"""Shared CLI utilities for lucy commands.

Provides the common ``--root`` option, config loading, and standardised
error / JSON output helpers so every command reports failures the same way.

Usage in a command::

    import typer
    from lucy.cli import RootOption, error_exit, get_config, json_print

    app = typer.Typer()

    @app.command()
    def main(root: Path | None = RootOption) -> None:
        cfg = get_config(root)
        ...
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console

from lucy.config import LucyConfig, load_config

# Re-usable Typer option for --root
RootOption: Path | None = typer.Option(
    None,
    "--root",
    help="Project root holding lucy.toml (default: search upward from cwd).",
)


def get_config(root: Path | None = None, *, json_mode: bool = False) -> LucyConfig:
    """Load the project config, exiting on an invalid lucy.toml."""
    try:
        return load_config(root)
    except (ValueError, OSError) as exc:
        error_exit(f"Invalid configuration: {exc}", json_mode=json_mode)


# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

console = Console()
_err_console = Console(stderr=True)


def error_exit(msg: str, *, json_mode: bool = False, code: int = 1) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``."""
    if json_mode:
        print(json.dumps({"error": msg}, indent=2))
    else:
        _err_console.print(f"[red bold]error:[/red bold] {msg}", highlight=False)
    raise typer.Exit(code=code)


def warn(msg: str) -> None:
    _err_console.print(f"[yellow bold]warning:[/yellow bold] {msg}", highlight=False)


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2))
