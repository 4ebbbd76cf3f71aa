"""transform.py - Rewrite one C source so annotated functions get guards.

Single pass over the lines of a file with three states:

``OUTSIDE``
    Nothing pending; lines are echoed unchanged.
``PENDING``
    One or more ``// @Name`` comments were collected (and swallowed); the
    next function signature receives them.
``GUARDED``
    Inside a function body wrapped in ``#ifdef SYMBOL`` / ``#endif``; a
    :class:`BraceTracker` follows the nesting depth until the body closes.

Extension definitions are registered and echoed in every state.  Input
that ends while still ``GUARDED`` gets a trailing ``#endif`` so the emitted
conditional region is always well formed.

Example::

    // @When(TARGET_TEST)          #ifdef TARGET_TEST
    void f() {}              ->    void f() {}
                                   #endif
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from lucy.annotation import Annotation, AnnotationTable
from lucy.config import LucyConfig
from lucy.extensions import ExtensionRegistry
from lucy.parsing import (
    extract_annotation_name,
    extract_function_name,
    is_annotation,
    is_extension_def,
    is_function_definition,
    is_function_end,
    split_args,
)

GUARD_CLOSE = "#endif"


def guard_open(symbol: str) -> str:
    return f"#ifdef {symbol}"


class State(Enum):
    OUTSIDE = "outside"
    PENDING = "pending"
    GUARDED = "guarded"


@dataclass
class PendingAnnotation:
    name: str
    arg: str


class BraceTracker:
    """Count ``{``/``}`` nesting while skipping literals and comments.

    Literal state does not carry over between lines.  A ``//`` comment
    outside a literal ends the scan of its line; a ``/* ... */`` comment is
    skipped and may span lines.
    """

    def __init__(self, depth: int = 0) -> None:
        self.depth = depth
        self.in_comment = False

    def feed(self, line: str) -> int:
        """Scan *line* left to right and return the updated depth."""
        quote: str | None = None
        escaped = False
        i = 0
        while i < len(line):
            ch = line[i]
            pair = line[i : i + 2]
            if self.in_comment:
                if pair == "*/":
                    self.in_comment = False
                    i += 2
                    continue
            elif quote is not None:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == quote:
                    quote = None
            elif pair == "//":
                break
            elif pair == "/*":
                self.in_comment = True
                i += 2
                continue
            elif ch in "\"'":
                quote = ch
            elif ch == "{":
                self.depth += 1
            elif ch == "}":
                self.depth -= 1
            i += 1
        return self.depth


class FileTransformer:
    """Line-driven state machine feeding the shared registry and table.

    One instance handles one file.  The extension registry and the
    annotation table are shared across files of the same run, so a file can
    use extensions defined by files transformed before it.
    """

    def __init__(
        self,
        extensions: ExtensionRegistry,
        table: AnnotationTable,
        config: LucyConfig | None = None,
    ) -> None:
        self.extensions = extensions
        self.table = table
        self.config = config or LucyConfig()
        self.state = State.OUTSIDE
        self.pending: list[PendingAnnotation] = []
        self.guard: str | None = None
        self._braces = BraceTracker()
        self.recorded = 0

    # -- resolution --

    def resolve_condition(self, name: str, args: list[str]) -> str | None:
        """Return the guard symbol an annotation implies, or None.

        The disable annotation always maps to the configured disable symbol;
        a direct ``When(X)`` maps to ``X``; an extension based on ``When``
        maps to its base argument, or to the annotation's first argument
        when the extension declares none.
        """
        cfg = self.config
        if name == cfg.disable_annotation:
            return cfg.disable_symbol
        if name == cfg.condition_base:
            return args[0] if args else None
        ext = self.extensions.lookup(name)
        if ext is None or ext.base != cfg.condition_base:
            return None
        base_args = split_args(ext.base_arg, cfg.max_args)
        if base_args:
            return base_args[0]
        return args[0] if args else None

    def _choose_guard(self, conditions: list[str | None]) -> str | None:
        resolved = [c for c in conditions if c]
        if not resolved:
            return None
        if self.config.disable_symbol in resolved:
            return self.config.disable_symbol
        return resolved[0]

    # -- state machine --

    def feed(self, line: str) -> list[str]:
        """Consume one input line (without newline); return the output lines."""
        if is_extension_def(line):
            self.extensions.register_line(line)
            return [line]

        if self.state is State.GUARDED:
            return self._feed_guarded(line)

        if is_annotation(line):
            name, arg = extract_annotation_name(line)
            self.pending.append(PendingAnnotation(name, arg))
            self.state = State.PENDING
            return []

        if self.state is State.PENDING and is_function_definition(line):
            return self._open_function(line)

        return [line]

    def _open_function(self, line: str) -> list[str]:
        target_name = extract_function_name(line)
        parsed = [(p.name, split_args(p.arg, self.config.max_args)) for p in self.pending]
        guard = self._choose_guard([self.resolve_condition(n, a) for n, a in parsed])

        for name, args in parsed:
            entry = Annotation(
                name=name,
                target_name=target_name,
                args=args,
                condition=guard,
                is_removed=guard is not None and guard == self.config.disable_symbol,
            )
            if self.table.add(entry):
                self.recorded += 1
        self.pending = []

        if guard is None:
            self.state = State.OUTSIDE
            return [line]

        self.guard = guard
        self.state = State.GUARDED
        self._braces = BraceTracker()
        out = [guard_open(guard)]
        out.extend(self._feed_guarded(line))
        return out

    def _feed_guarded(self, line: str) -> list[str]:
        depth = self._braces.feed(line)
        if depth <= 0 and is_function_end(line):
            self.state = State.OUTSIDE
            self.guard = None
            return [line, GUARD_CLOSE]
        return [line]

    def finish(self) -> list[str]:
        """Flush end of input: close a guard left open by unbalanced braces.

        Annotations still pending at end of input had no function to attach
        to and are discarded.
        """
        self.pending = []
        if self.state is State.GUARDED:
            self.state = State.OUTSIDE
            self.guard = None
            return [GUARD_CLOSE]
        self.state = State.OUTSIDE
        return []

    def transform(self, lines: Iterable[str]) -> list[str]:
        out: list[str] = []
        for line in lines:
            out.extend(self.feed(line))
        out.extend(self.finish())
        return out


def split_source_lines(text: str) -> list[str]:
    """Split *text* on ``\\n`` only, dropping a trailing ``\\r`` from each line.

    Form feeds and other characters :meth:`str.splitlines` treats as line
    boundaries stay inside their line.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def transform_text(
    text: str,
    extensions: ExtensionRegistry,
    table: AnnotationTable,
    config: LucyConfig | None = None,
) -> str:
    """Transform a whole source text; every output line ends with a newline."""
    lines = FileTransformer(extensions, table, config).transform(split_source_lines(text))
    return "".join(f"{line}\n" for line in lines)


def transform_file(
    input_path: Path,
    output_path: Path,
    extensions: ExtensionRegistry,
    table: AnnotationTable,
    config: LucyConfig | None = None,
) -> int:
    """Transform *input_path* into *output_path*.

    Both paths are opened before anything is consumed, so an unopenable
    output leaves the registry and table untouched.  Bytes that are not
    valid UTF-8 pass through unchanged.  Returns the number of annotation
    entries recorded.

    Raises:
        OSError: Either path cannot be opened.
    """
    transformer = FileTransformer(extensions, table, config)
    with open(input_path, encoding="utf-8", errors="surrogateescape", newline="\n") as src, open(
        output_path, "w", encoding="utf-8", errors="surrogateescape"
    ) as dst:
        for raw in src:
            for line in transformer.feed(raw.rstrip("\r\n")):
                dst.write(f"{line}\n")
        for line in transformer.finish():
            dst.write(f"{line}\n")
    return transformer.recorded
