"""plan.py - Show which annotated tests a test driver would run.

Reads a manifest written by ``lucy process --manifest`` and prints enabled
tests (with their descriptions), disabled tests, and setup/teardown hooks.
"""

from __future__ import annotations

from pathlib import Path

import typer

from lucy.cli import console, error_exit, json_print
from lucy.runtime import AnnotationIndex, plan_tests

app = typer.Typer(help="Show the test-run plan recorded in a manifest.", rich_markup_mode="rich")


@app.command()
def main(
    manifest: Path = typer.Option(..., "--manifest", "-m", help="JSON manifest from lucy process"),
    json_output: bool = typer.Option(False, "--json", help="Output structured JSON"),
) -> None:
    """Print enabled and disabled tests plus setup/teardown hooks."""
    try:
        index = AnnotationIndex.from_manifest(manifest)
    except (OSError, ValueError) as exc:
        error_exit(f"Cannot load manifest: {exc}", json_mode=json_output)

    plan = plan_tests(index)

    if json_output:
        json_print(plan.to_dict())
        return

    for hook in plan.setups:
        console.print(f"[dim]setup[/dim]     {hook.target_name}", highlight=False)
    for test in plan.enabled:
        console.print(f"[green]run[/green]       {test.description}", highlight=False)
    for test in plan.disabled:
        console.print(f"[yellow]disabled[/yellow]  {test.description}", highlight=False)
    for hook in plan.teardowns:
        console.print(f"[dim]teardown[/dim]  {hook.target_name}", highlight=False)

    console.print(
        f"\n{len(plan.enabled)} enabled, {len(plan.disabled)} disabled",
        highlight=False,
    )
