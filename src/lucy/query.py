"""query.py - Look up annotated functions in a generated manifest.

Usage:
    lucy query Test --manifest build/annotations.json
    lucy query Disable --manifest build/annotations.json --json
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from lucy.cli import console, error_exit, json_print
from lucy.runtime import AnnotationIndex

app = typer.Typer(help="Query a lucy manifest by annotation name.", rich_markup_mode="rich")


@app.command()
def main(
    name: str = typer.Argument(..., help="Annotation name to look up (e.g. Test)"),
    manifest: Path = typer.Option(..., "--manifest", "-m", help="JSON manifest from lucy process"),
    json_output: bool = typer.Option(False, "--json", help="Output structured JSON"),
) -> None:
    """List every entry annotated with NAME, in table order."""
    try:
        index = AnnotationIndex.from_manifest(manifest)
    except (OSError, ValueError) as exc:
        error_exit(f"Cannot load manifest: {exc}", json_mode=json_output)

    found = index.find_annotated_blocks(name)

    if json_output:
        json_print([entry.to_dict() for entry in found])
        return

    if not found:
        console.print(f"No functions annotated with @{name}", highlight=False)
        return

    table = Table(title=f"@{name} ({len(found)})")
    table.add_column("Function")
    table.add_column("Args")
    table.add_column("Condition")
    table.add_column("Removed")
    for entry in found:
        table.add_row(
            entry.target_name,
            ", ".join(entry.args),
            entry.condition or "",
            "yes" if entry.is_removed else "",
        )
    console.print(table)
