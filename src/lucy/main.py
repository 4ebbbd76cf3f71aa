"""main.py – Umbrella CLI entry point for lucy.

Imports and registers each subcommand's typer app as a flat command, so
``lucy process``, ``lucy query`` and ``lucy plan`` share one executable.
"""

import importlib

import typer

app = typer.Typer(
    help="Comment-driven annotation processor for C sources.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Typical workflow:[/bold]
  lucy process include/annotations.h build/annotations.h build/annotations.c \\
      tests/simple.c:build/simple.c --manifest build/annotations.json
  lucy query Test -m build/annotations.json     List @Test functions
  lucy plan -m build/annotations.json           Show enabled/disabled tests

[dim]Project settings are read from lucy.toml when present.[/dim]""",
)

# ---------------------------------------------------------------------------
# Subcommand registry
# ---------------------------------------------------------------------------

_SINGLE_COMMANDS: list[tuple[str, str, str]] = [
    ("process", "lucy.process", "Transform annotated C files and generate metadata."),
    ("query", "lucy.query", "Query a manifest by annotation name."),
    ("plan", "lucy.plan", "Show the test-run plan recorded in a manifest."),
]

for _name, _module, _help in _SINGLE_COMMANDS:
    _mod = importlib.import_module(_module)
    app.command(name=_name, help=_help)(_mod.main)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
