"""process.py - Transform annotated C files and generate tracking metadata.

Usage:
    lucy process include/annotations.h build/annotations.h build/annotations.c \\
        tests/simple.c:build/simple.c tests/complex.c:build/complex.c

Steps, in order:
1. Load extension definitions from the declarations file (best effort).
2. Transform each ``input:output`` pair in the order given.
3. Write the declarations header, the data source, and (by default) the
   runtime header next to the declarations header.
4. Optionally write a JSON manifest for ``lucy query`` / ``lucy plan``.

Any file that cannot be opened aborts the run with exit code 1; outputs
already written are left in place.
"""

from __future__ import annotations

import warnings
from pathlib import Path

import typer

from lucy.cli import RootOption, console, error_exit, get_config, json_print, warn
from lucy.engine import Engine

app = typer.Typer(
    help="Transform annotated C files and generate annotation metadata.",
    rich_markup_mode="rich",
)


def parse_pair(pair: str) -> tuple[Path, Path] | None:
    """Split ``input:output`` on its last colon; None if either side is empty."""
    src, sep, dst = pair.rpartition(":")
    if not sep or not src or not dst:
        return None
    return Path(src), Path(dst)


@app.command()
def main(
    extensions: Path = typer.Argument(..., help="Extension declarations file (base annotations.h)"),
    out_declarations: Path = typer.Argument(..., help="Generated declarations header to write"),
    out_data: Path = typer.Argument(..., help="Generated annotation data source to write"),
    pairs: list[str] | None = typer.Argument(
        None, help="INPUT:OUTPUT source pairs, processed in order (may be empty)"
    ),
    manifest: Path | None = typer.Option(None, "--manifest", help="Also write a JSON manifest"),
    runtime_header: bool = typer.Option(
        True,
        "--runtime-header/--no-runtime-header",
        help="Write the runtime header next to the declarations header",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report errors"),
    json_output: bool = typer.Option(False, "--json", help="Output a JSON summary"),
    root: Path | None = RootOption,
) -> None:
    """Transform annotated C files and generate the annotation tracking artifacts."""
    cfg = get_config(root, json_mode=json_output)

    parsed: list[tuple[Path, Path]] = []
    for pair in pairs or []:
        split = parse_pair(pair)
        if split is None:
            error_exit(f"Invalid input:output pair: {pair}", json_mode=json_output)
        parsed.append(split)

    files: list[dict[str, object]] = []
    with Engine(cfg) as engine:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            engine.load_extensions(extensions)
        if not json_output:
            for w in caught:
                warn(str(w.message))

        for src, dst in parsed:
            try:
                recorded = engine.process_file(src, dst)
            except OSError as exc:
                error_exit(f"Cannot process {src} -> {dst}: {exc}", json_mode=json_output)
            files.append({"input": str(src), "output": str(dst), "annotations": recorded})
            if not quiet and not json_output:
                console.print(f"  {src} -> {dst} ({recorded} annotations)", highlight=False)

        try:
            engine.generate_declarations(extensions, out_declarations)
            engine.generate_data_artifact(out_data, header_name=out_declarations.name)
            if runtime_header:
                engine.generate_runtime_header(out_declarations.parent)
            if manifest is not None:
                engine.write_manifest(manifest)
        except OSError as exc:
            error_exit(f"Cannot write metadata: {exc}", json_mode=json_output)

        total = len(engine.synced)
        dropped = engine.table.dropped + engine.extensions.dropped

        if json_output:
            json_print(
                {
                    "files": files,
                    "annotations": total,
                    "extensions": len(engine.extensions),
                    "dropped": dropped,
                    "declarations": str(out_declarations),
                    "data": str(out_data),
                    "manifest": str(manifest) if manifest is not None else None,
                }
            )
            return

        if dropped:
            warn(
                f"capacity reached: {engine.table.dropped} annotation(s) and "
                f"{engine.extensions.dropped} extension(s) dropped"
            )
        if not quiet:
            console.print(
                f"[green]Processed {len(files)} file(s):[/green] {total} annotation(s), "
                f"{len(engine.extensions)} extension(s)",
                highlight=False,
            )
