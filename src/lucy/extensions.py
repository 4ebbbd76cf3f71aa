"""extensions.py - Registry of custom annotation aliases.

An extension maps a custom annotation name to one base annotation::

    // #annotation @Test(description) : @When(TARGET_TEST)

registers ``Test`` with base ``When`` and base argument ``TARGET_TEST``.
Resolution is single-hop: an extension's base is never looked up again.
"""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from lucy.parsing import extract_extension, is_extension_def

# Predefined testing vocabulary, ready to paste into a declarations file.
TEST_EXTENSION = "// #annotation @Test(description) : @When(TARGET_TEST)"
DISABLE_EXTENSION = "// #annotation @Disable(reason) : @When(__LUCY_TEST_DISABLE__)"


@dataclass
class Extension:
    """A registered custom annotation."""

    name: str
    args: str = ""
    base: str = ""
    base_arg: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "args": self.args, "base": self.base, "base_arg": self.base_arg}


class ExtensionRegistry:
    """Ordered, capacity-bounded collection of :class:`Extension` records.

    Lookups scan linearly and return the first registration of a name, so a
    later duplicate never shadows an earlier one.
    """

    def __init__(self, capacity: int = 1000) -> None:
        self.capacity = capacity
        self.dropped = 0
        self._items: list[Extension] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Extension]:
        return iter(self._items)

    @property
    def full(self) -> bool:
        return len(self._items) >= self.capacity

    def add(self, ext: Extension) -> bool:
        """Append *ext*.  Returns False (and counts a drop) once full."""
        if self.full:
            self.dropped += 1
            return False
        self._items.append(ext)
        return True

    def register_line(self, line: str) -> bool:
        """Parse an extension-definition line and register it.

        Returns False if the line is not an extension definition, names no
        extension, or the registry is full.
        """
        if not is_extension_def(line):
            return False
        parsed = extract_extension(line)
        if not parsed.name:
            return False
        return self.add(
            Extension(
                name=parsed.name,
                args=parsed.args,
                base=parsed.base,
                base_arg=parsed.base_arg,
            )
        )

    def load(self, path: Path) -> int:
        """Register every extension definition found in *path*.

        Best effort: an unreadable file only produces a warning and yields
        zero extensions.  Returns the number of extensions registered.
        """
        try:
            text = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            warnings.warn(f"Cannot read extension declarations {path}: {exc}", stacklevel=2)
            return 0

        added = 0
        for line in text.splitlines():
            if self.register_line(line):
                added += 1
        return added

    def lookup(self, name: str) -> Extension | None:
        for ext in self._items:
            if ext.name == name:
                return ext
        return None

    def resolve_base(self, name: str) -> str | None:
        """Return the base annotation *name* resolves to, or None if unregistered."""
        ext = self.lookup(name)
        return ext.base if ext is not None else None

    def clear(self) -> None:
        self._items.clear()
        self.dropped = 0
