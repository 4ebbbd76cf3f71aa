"""runtime.py - Query annotated functions by annotation name at run time.

:class:`AnnotationIndex` stands in for reflection.  It is built from an
injected table (a manifest, an engine snapshot, or nothing at all, which
is an empty table), and functions are registered under their names::

    index = AnnotationIndex.from_manifest("build/annotations.json")

    @index.register
    def test_addition():
        ...

    for entry in index.find_annotated_blocks("Test"):
        entry.target()

Entries whose function was compiled out (``is_removed``) are never bound to
a callable, even if one was registered under the same name.

:func:`plan_tests` turns an index into the run plan a test driver follows:
``Test`` entries minus the functions also carrying ``Disable``, plus the
``Setup``/``Teardown`` hooks.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lucy.annotation import Annotation
from lucy.generate import read_manifest

TEST = "Test"
DISABLE = "Disable"
SETUP = "Setup"
TEARDOWN = "Teardown"


class AnnotationIndex:
    def __init__(
        self,
        entries: Iterable[Annotation] | None = None,
        functions: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        self._entries: tuple[Annotation, ...] = tuple(entries) if entries is not None else ()
        self._functions: dict[str, Callable[..., Any]] = dict(functions or {})

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_manifest(cls, path: Path | str) -> AnnotationIndex:
        entries, _ = read_manifest(Path(path))
        return cls(entries)

    def register(
        self, func: Callable[..., Any] | None = None, *, name: str | None = None
    ) -> Any:
        """Register *func* under *name* (default: its ``__name__``).

        Usable as ``index.register(f)``, ``@index.register`` or
        ``@index.register(name="f")``.  Returns the function unchanged.
        """

        def _register(fn: Callable[..., Any]) -> Callable[..., Any]:
            self._functions[name or fn.__name__] = fn
            return fn

        if func is None:
            return _register
        return _register(func)

    def resolve(self, target_name: str) -> Callable[..., Any] | None:
        return self._functions.get(target_name)

    def _bind(self, entry: Annotation) -> Annotation:
        target = None if entry.is_removed else self.resolve(entry.target_name)
        return dataclasses.replace(entry, args=list(entry.args), target=target)

    def entries(self) -> list[Annotation]:
        return [self._bind(entry) for entry in self._entries]

    def find_annotated_blocks(self, name: str) -> list[Annotation]:
        """Every entry whose annotation name equals *name*, in table order.

        Returns copies owned by the caller; an empty list when nothing matches.
        """
        return [self._bind(entry) for entry in self._entries if entry.name == name]


# ---------------------------------------------------------------------------
# Test plan
# ---------------------------------------------------------------------------


@dataclass
class PlannedTest:
    entry: Annotation
    description: str


@dataclass
class TestPlan:
    __test__ = False  # not a pytest class

    enabled: list[PlannedTest] = field(default_factory=list)
    disabled: list[PlannedTest] = field(default_factory=list)
    setups: list[Annotation] = field(default_factory=list)
    teardowns: list[Annotation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        def _test(t: PlannedTest) -> dict[str, Any]:
            return {"target_name": t.entry.target_name, "description": t.description}

        return {
            "enabled": [_test(t) for t in self.enabled],
            "disabled": [_test(t) for t in self.disabled],
            "setups": [e.target_name for e in self.setups],
            "teardowns": [e.target_name for e in self.teardowns],
        }


def describe(entry: Annotation) -> str:
    """First argument of *entry*, or its target name when it has none."""
    return entry.args[0] if entry.args and entry.args[0] else entry.target_name


def plan_tests(index: AnnotationIndex) -> TestPlan:
    """Cross-reference ``Test`` and ``Disable`` entries into a run plan.

    A test is disabled when its own entry is removed or when the same
    function also carries a ``Disable`` annotation.
    """
    disabled_targets = {e.target_name for e in index.find_annotated_blocks(DISABLE)}
    plan = TestPlan()
    for entry in index.find_annotated_blocks(TEST):
        planned = PlannedTest(entry, describe(entry))
        if entry.is_removed or entry.target_name in disabled_targets:
            plan.disabled.append(planned)
        else:
            plan.enabled.append(planned)
    plan.setups = [e for e in index.find_annotated_blocks(SETUP) if not e.is_removed]
    plan.teardowns = [e for e in index.find_annotated_blocks(TEARDOWN) if not e.is_removed]
    return plan
