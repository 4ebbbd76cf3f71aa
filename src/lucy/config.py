"""Centralised project configuration loader for lucy.

Reads ``lucy.toml`` from the project root and exposes every setting as
simple attributes so that the engine and the commands do not hardcode
capacities, the guard base name, or the disable marker.

A project without ``lucy.toml`` is perfectly valid: every setting has a
default, and :func:`load_config` returns them untouched.

Example ``lucy.toml``::

    [lucy]
    max_annotations = 1000
    max_args = 8
    disable_symbol = "__LUCY_TEST_DISABLE__"

Usage::

    from lucy.config import load_config

    cfg = load_config()
    cfg.max_annotations     # int, Annotation Table capacity
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

CONFIG_FILENAME = "lucy.toml"


@dataclass
class LucyConfig:
    """Parsed project configuration."""

    # Root directory (where lucy.toml lives, or cwd when there is none)
    root: Path = field(default_factory=Path.cwd)

    # --- capacities ---
    max_annotations: int = 1000
    max_extensions: int = 1000
    max_args: int = 8

    # --- base semantics ---
    condition_base: str = "When"
    disable_annotation: str = "Disable"
    disable_symbol: str = "__LUCY_TEST_DISABLE__"

    # --- generated artifacts ---
    runtime_header: str = "lucy.h"


# Expected value type per [lucy] key.
_KEY_TYPES: dict[str, type] = {
    "max_annotations": int,
    "max_extensions": int,
    "max_args": int,
    "condition_base": str,
    "disable_annotation": str,
    "disable_symbol": str,
    "runtime_header": str,
}


def _find_root(start: Path | None = None) -> Path | None:
    """Walk up from *start* (or cwd) to find lucy.toml.

    Returns ``None`` when no parent directory holds one.
    """
    if start is not None:
        return start
    candidate = Path.cwd().resolve()
    while candidate != candidate.parent:
        if (candidate / CONFIG_FILENAME).exists():
            return candidate
        candidate = candidate.parent
    return None


def load_config(root: Path | None = None) -> LucyConfig:
    """Load lucy.toml, falling back to defaults.

    Args:
        root: Project root directory.  Auto-detected if ``None``; when no
              ``lucy.toml`` is found the current directory is used.

    Raises:
        ValueError: A ``[lucy]`` key holds a value of the wrong type, or a
                    capacity is negative.
    """
    found = _find_root(root)
    base = found if found is not None else Path.cwd()
    cfg = LucyConfig(root=base)

    toml_path = base / CONFIG_FILENAME
    if not toml_path.exists():
        return cfg

    with open(toml_path, "rb") as f:
        raw = tomllib.load(f)

    section = raw.get("lucy", {})
    for key, value in section.items():
        if key not in _KEY_TYPES:
            continue
        expected = _KEY_TYPES[key]
        # bool is an int subclass; reject it for numeric settings
        if not isinstance(value, expected) or isinstance(value, bool):
            raise ValueError(
                f"{CONFIG_FILENAME}: [lucy] {key} must be {expected.__name__}, "
                f"got {type(value).__name__}"
            )
        if expected is int and value < 0:
            raise ValueError(f"{CONFIG_FILENAME}: [lucy] {key} must be >= 0, got {value}")
        setattr(cfg, key, value)

    return cfg
