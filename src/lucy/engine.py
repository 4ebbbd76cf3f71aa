"""engine.py - Run context tying the registry, the table and the generators.

An :class:`Engine` holds all state that accumulates across the files of one
run.  Constructing it is initialization, :meth:`Engine.close` is teardown,
and it can be used as a context manager::

    with Engine(cfg) as engine:
        engine.load_extensions(decl_path)
        for src, dst in pairs:
            engine.process_file(src, dst)
        engine.generate_declarations(decl_path, out_h)
        engine.generate_data_artifact(out_c)

Files must be processed in the caller's order: a file can use extensions
registered while processing the files before it, never after.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType

from lucy import generate
from lucy.annotation import Annotation, AnnotationTable
from lucy.config import LucyConfig
from lucy.extensions import ExtensionRegistry
from lucy.transform import transform_file, transform_text


class Engine:
    def __init__(self, config: LucyConfig | None = None) -> None:
        self.config = config or LucyConfig()
        self.extensions = ExtensionRegistry(self.config.max_extensions)
        self.table = AnnotationTable(self.config.max_annotations)
        self.synced: tuple[Annotation, ...] = ()

    def __enter__(self) -> Engine:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -- lifecycle --

    def reset(self) -> None:
        """Clear every registry back to the empty state."""
        self.extensions.clear()
        self.table.clear()
        self.synced = ()

    def close(self) -> None:
        self.reset()

    def sync(self) -> tuple[Annotation, ...]:
        """Refresh the flat copy of the table consumed by the generators."""
        self.synced = self.table.snapshot()
        return self.synced

    # -- transformation --

    def load_extensions(self, path: Path) -> int:
        return self.extensions.load(path)

    def process_file(self, input_path: Path, output_path: Path) -> int:
        """Transform one file; returns the number of annotations recorded.

        Raises:
            OSError: Either path cannot be opened.
        """
        recorded = transform_file(
            Path(input_path), Path(output_path), self.extensions, self.table, self.config
        )
        self.sync()
        return recorded

    def process_text(self, text: str) -> str:
        """Transform source text held in memory; returns the rewritten text."""
        out = transform_text(text, self.extensions, self.table, self.config)
        self.sync()
        return out

    # -- generation --

    def generate_declarations(self, extensions_path: Path, out_path: Path) -> None:
        generate.generate_declarations(
            extensions_path, out_path, self.synced, self.config.runtime_header
        )

    def generate_data_artifact(self, out_path: Path, header_name: str = "annotations.h") -> None:
        generate.generate_data_artifact(out_path, self.synced, header_name, self.config.max_args)

    def generate_runtime_header(self, out_dir: Path) -> Path:
        out_path = Path(out_dir) / self.config.runtime_header
        generate.generate_runtime_header(out_path, self.config.max_args)
        return out_path

    def write_manifest(self, out_path: Path) -> None:
        generate.write_manifest(out_path, self.synced, self.extensions)

    # -- queries --

    def find_annotated_blocks(self, name: str) -> list[Annotation]:
        """Entries named *name* from the last synchronized table, in order."""
        return [entry for entry in self.synced if entry.name == name]
