"""generate.py - Emit the metadata artifacts for a processed run.

Four artifacts can be produced from the Annotation Table:

- **Declarations header** (``annotations.h``): include guard, the extension
  definitions re-emitted from the declarations file, one forward declaration
  per annotated function, and the tracking-array declarations.
- **Data source** (``annotations.c``): the ``LUCY_ANNOTATIONS`` array with one
  record per table entry, in table order.  Entries with a condition are split
  into an ``#ifdef`` alternative holding the real function pointer and an
  ``#else`` alternative with ``NULL`` and ``isRemoved = 1``, so one binary
  reflects whichever symbols were defined when it was compiled.
- **Runtime header** (``lucy.h``): the C record types and the
  ``find_annotated_blocks`` query, which takes the table to search as an
  argument and treats ``NULL`` as empty.  Programs that never link the data
  source still build and simply find nothing.
- **JSON manifest**: the table and the registered extensions, for
  ``lucy query``/``lucy plan`` and :class:`lucy.runtime.AnnotationIndex`.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import jinja2

from lucy.annotation import Annotation
from lucy.extensions import Extension
from lucy.parsing import MAX_ARGS, is_extension_def

MANIFEST_VERSION = 1

_TEMPLATE_OPTIONS: dict[str, Any] = {
    "trim_blocks": True,
    "lstrip_blocks": True,
    "keep_trailing_newline": True,
    "undefined": jinja2.StrictUndefined,
}

_DECLARATIONS_TEMPLATE = jinja2.Template(
    """\
/* Generated by lucy - do not edit. */
#ifndef {{ guard }}
#define {{ guard }}

#include "{{ runtime_header }}"

// User-defined Annotation Extensions
{% for line in extension_lines %}
{{ line }}
{% endfor %}

// Function Declarations
{% for name in target_names %}
extern void {{ name }}(void);
{% endfor %}

// Annotation Tracking Declarations
extern const struct Annotation LUCY_ANNOTATIONS[];
extern const int LUCY_ANNOTATION_COUNT;
extern const struct AnnotationTable LUCY_ANNOTATION_TABLE;
static inline int find_annotated_blocks(const struct AnnotationTable *table, const char *name,
                                        struct Annotation *matches, int max_matches);

#endif /* {{ guard }} */
""",
    **_TEMPLATE_OPTIONS,
)

_DATA_TEMPLATE = jinja2.Template(
    """\
/* Generated by lucy - do not edit. */
#include "{{ header_name }}"

// Generated Annotation Tracking
const struct Annotation LUCY_ANNOTATIONS[] = {
{% for row in rows %}
{% if row.condition %}
#ifdef {{ row.condition }}
    {{ row.enabled }},
#else
    {{ row.disabled }},
#endif
{% else %}
    {{ row.enabled }},
{% endif %}
{% endfor %}
{% if not rows %}
    {0},
{% endif %}
};

const int LUCY_ANNOTATION_COUNT = {{ rows | length }};
const struct AnnotationTable LUCY_ANNOTATION_TABLE = { LUCY_ANNOTATIONS, {{ rows | length }} };
""",
    **_TEMPLATE_OPTIONS,
)

_RUNTIME_TEMPLATE = jinja2.Template(
    """\
/* Generated by lucy - do not edit. */
#ifndef {{ guard }}
#define {{ guard }}

#include <stddef.h>
#include <string.h>

#define LUCY_MAX_ARGS {{ max_args }}

typedef void (*lucy_fn)(void);

/* One annotated function.  target is NULL when the function was compiled out. */
struct Annotation {
    const char *name;
    lucy_fn target;
    const char *kind;
    int isRemoved;
    const char *args[LUCY_MAX_ARGS];
    int argCount;
    const char *condition;
    const char *targetName;
};

struct AnnotationTable {
    const struct Annotation *entries;
    int count;
};

/* Copy the entries of table named name into matches (at most max_matches),
 * in table order.  A NULL table is empty.  Returns the number of matches. */
static inline int find_annotated_blocks(const struct AnnotationTable *table, const char *name,
                                        struct Annotation *matches, int max_matches)
{
    int found = 0;
    int i;
    if (table == NULL || table->entries == NULL || name == NULL) {
        return 0;
    }
    for (i = 0; i < table->count; i++) {
        if (table->entries[i].name != NULL && strcmp(table->entries[i].name, name) == 0) {
            if (matches != NULL && found < max_matches) {
                matches[found] = table->entries[i];
            }
            found++;
        }
    }
    return found;
}

#endif /* {{ guard }} */
""",
    **_TEMPLATE_OPTIONS,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def include_guard(filename: str) -> str:
    """Derive an include-guard macro from a header file name.

    >>> include_guard("annotations.h")
    'ANNOTATIONS_H'
    """
    guard = re.sub(r"[^A-Za-z0-9]", "_", Path(filename).name).upper()
    if not guard or guard[0].isdigit():
        guard = "_" + guard
    return guard


def c_string(value: str | None) -> str:
    """Render *value* as a C string literal, or ``NULL`` for None."""
    if value is None:
        return "NULL"
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def c_record(entry: Annotation, *, enabled: bool, max_args: int = MAX_ARGS) -> str:
    """Render one ``struct Annotation`` initializer.

    The disabled form always carries a ``NULL`` target and ``isRemoved = 1``.
    """
    target = entry.target_name if enabled else "NULL"
    removed = int(entry.is_removed) if enabled else 1
    args = list(entry.args[:max_args])
    slots = [c_string(a) for a in args] + ["NULL"] * (max_args - len(args))
    return (
        f"{{{c_string(entry.name)}, {target}, {c_string(entry.kind)}, {removed}, "
        f"{{{', '.join(slots)}}}, {len(args)}, {c_string(entry.condition)}, "
        f"{c_string(entry.target_name)}}}"
    )


def _distinct_targets(entries: Iterable[Annotation]) -> list[str]:
    return list(dict.fromkeys(e.target_name for e in entries if e.target_name))


def read_extension_lines(extensions_path: Path) -> list[str]:
    """Return the extension-definition lines of *extensions_path*.

    Raises:
        OSError: The file cannot be read.
    """
    text = Path(extensions_path).read_text(encoding="utf-8", errors="replace")
    return [line for line in text.splitlines() if is_extension_def(line)]


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def render_declarations(
    extension_lines: Sequence[str],
    entries: Iterable[Annotation],
    header_name: str = "annotations.h",
    runtime_header: str = "lucy.h",
) -> str:
    return _DECLARATIONS_TEMPLATE.render(
        guard=include_guard(header_name),
        runtime_header=runtime_header,
        extension_lines=list(extension_lines),
        target_names=_distinct_targets(entries),
    )


def render_data_artifact(
    entries: Iterable[Annotation],
    header_name: str = "annotations.h",
    max_args: int = MAX_ARGS,
) -> str:
    rows = [
        {
            "condition": entry.condition,
            "enabled": c_record(entry, enabled=True, max_args=max_args),
            "disabled": c_record(entry, enabled=False, max_args=max_args),
        }
        for entry in entries
    ]
    return _DATA_TEMPLATE.render(header_name=header_name, rows=rows)


def render_runtime_header(runtime_header: str = "lucy.h", max_args: int = MAX_ARGS) -> str:
    return _RUNTIME_TEMPLATE.render(guard=include_guard(runtime_header), max_args=max_args)


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------


def generate_declarations(
    extensions_path: Path,
    out_path: Path,
    entries: Iterable[Annotation],
    runtime_header: str = "lucy.h",
) -> None:
    """Write the declarations header to *out_path*.

    The extension declarations file is re-read here, so its definitions are
    re-emitted verbatim and in file order.

    Raises:
        OSError: *extensions_path* cannot be read or *out_path* written.
    """
    out_path = Path(out_path)
    extension_lines = read_extension_lines(extensions_path)
    text = render_declarations(extension_lines, entries, out_path.name, runtime_header)
    out_path.write_text(text, encoding="utf-8")


def generate_data_artifact(
    out_path: Path,
    entries: Iterable[Annotation],
    header_name: str = "annotations.h",
    max_args: int = MAX_ARGS,
) -> None:
    Path(out_path).write_text(
        render_data_artifact(entries, header_name, max_args), encoding="utf-8"
    )


def generate_runtime_header(out_path: Path, max_args: int = MAX_ARGS) -> None:
    out_path = Path(out_path)
    out_path.write_text(render_runtime_header(out_path.name, max_args), encoding="utf-8")


def build_manifest(
    entries: Iterable[Annotation], extensions: Iterable[Extension] = ()
) -> dict[str, Any]:
    annotations = [entry.to_dict() for entry in entries]
    return {
        "version": MANIFEST_VERSION,
        "count": len(annotations),
        "annotations": annotations,
        "extensions": [ext.to_dict() for ext in extensions],
    }


def write_manifest(
    out_path: Path, entries: Iterable[Annotation], extensions: Iterable[Extension] = ()
) -> None:
    data = build_manifest(entries, extensions)
    Path(out_path).write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def read_manifest(path: Path) -> tuple[list[Annotation], list[Extension]]:
    """Load a manifest written by :func:`write_manifest`.

    Raises:
        OSError: The file cannot be read.
        ValueError: The file is not a lucy manifest.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: not valid JSON ({exc})") from exc
    if not isinstance(data, dict) or "annotations" not in data:
        raise ValueError(f"{path}: not a lucy manifest")
    entries = [Annotation.from_dict(item) for item in data["annotations"]]
    extensions = [
        Extension(
            name=str(item.get("name", "")),
            args=str(item.get("args", "")),
            base=str(item.get("base", "")),
            base_arg=str(item.get("base_arg", "")),
        )
        for item in data.get("extensions", [])
    ]
    return entries, extensions
