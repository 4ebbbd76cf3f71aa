"""annotation.py - Annotation records and the run-wide Annotation Table.

One :class:`Annotation` is recorded per annotation comment that precedes a
function signature.  The :class:`AnnotationTable` collects them across every
file of a run, in the order they were recorded; that order is also the
enumeration order of the generated tracking array and of runtime queries.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

KIND_FUNCTION = "function"


@dataclass
class Annotation:
    """One recorded occurrence of an annotation on a function.

    ``target`` stays ``None`` until a runtime index binds the callable
    registered under ``target_name``.  ``condition`` is the guard symbol of
    the annotated function, if it has one; ``is_removed`` is True only when
    that guard is the disable symbol.
    """

    name: str = ""
    target_name: str = ""
    kind: str = KIND_FUNCTION
    is_removed: bool = False
    args: list[str] = field(default_factory=list)
    condition: str | None = None
    target: Callable[..., Any] | None = field(default=None, compare=False, repr=False)

    @property
    def arg_count(self) -> int:
        return len(self.args)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict (for JSON output).  ``target`` is omitted."""
        return {
            "name": self.name,
            "target_name": self.target_name,
            "kind": self.kind,
            "is_removed": self.is_removed,
            "args": list(self.args),
            "arg_count": self.arg_count,
            "condition": self.condition,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Annotation:
        return cls(
            name=str(data.get("name", "")),
            target_name=str(data.get("target_name", "")),
            kind=str(data.get("kind", KIND_FUNCTION)),
            is_removed=bool(data.get("is_removed", False)),
            args=[str(a) for a in data.get("args", [])],
            condition=data.get("condition"),
        )


class AnnotationTable:
    """Capacity-bounded, append-only registry of :class:`Annotation` entries.

    Entries past ``capacity`` are not stored: :meth:`add` returns False and
    ``dropped`` counts them.
    """

    def __init__(self, capacity: int = 1000) -> None:
        self.capacity = capacity
        self.dropped = 0
        self._entries: list[Annotation] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Annotation:
        return self._entries[index]

    @property
    def full(self) -> bool:
        return len(self._entries) >= self.capacity

    def add(self, entry: Annotation) -> bool:
        if self.full:
            self.dropped += 1
            return False
        self._entries.append(entry)
        return True

    def snapshot(self) -> tuple[Annotation, ...]:
        """Flat copy of the current entries, in table order."""
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.dropped = 0
