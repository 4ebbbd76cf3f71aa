"""parsing.py - Line classification and extraction for lucy annotations.

Every function here looks at a single source line and nothing else: there
is no cross-line state.  The transformer (``lucy.transform``) strings them
together into a state machine.

Recognised line shapes:

1. **Annotation comment**: ``// @Name`` or ``// @Name(arg1, "arg 2")``.
   Several may be stacked directly above one function.

2. **Extension definition**: ``// #annotation @Name(args) : @Base(baseArgs)``.
   The ``: @Base(...)`` suffix is optional; without it the extension is a
   "plain" custom annotation with no conditional semantics.

3. **Function signature**: any line holding ``(``, ``)`` and ``{``.  This is
   a heuristic, not a parse.

4. **Function terminator**: any line holding ``}``.

Malformed input never raises: extraction returns a best-effort partial
result (e.g. the rest of the line as the argument when ``)`` is missing).
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Sentinels
# ---------------------------------------------------------------------------

ANNOTATION_PREFIX = "// @"
EXTENSION_PREFIX = "// #annotation "
EXTENSION_BASE_MARKER = " : @"

MAX_ARGS = 8


@dataclass
class ExtensionDef:
    """Components of one ``// #annotation`` line."""

    name: str = ""
    args: str = ""
    base: str = ""
    base_arg: str = ""


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def is_annotation(line: str) -> bool:
    """Return True if *line* begins with the annotation-comment sentinel."""
    return line.startswith(ANNOTATION_PREFIX)


def is_extension_def(line: str) -> bool:
    """Return True if *line* begins with the extension-definition sentinel."""
    return line.startswith(EXTENSION_PREFIX)


def is_function_definition(line: str) -> bool:
    return "(" in line and ")" in line and "{" in line


def is_function_end(line: str) -> bool:
    return "}" in line


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _find_closing(text: str, open_idx: int) -> int:
    """Return the index of the ``)`` matching the ``(`` at *open_idx*.

    Nested parentheses are counted and parentheses inside double-quoted
    strings are ignored.  Returns -1 when the group is never closed.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(open_idx, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _group_after(text: str, open_idx: int) -> tuple[str, int]:
    """Return (contents, end) of the parenthesised group opening at *open_idx*.

    Unterminated groups run to end of line; *end* is then ``len(text)``.
    """
    close = _find_closing(text, open_idx)
    if close == -1:
        return text[open_idx + 1 :], len(text)
    return text[open_idx + 1 : close], close + 1


def _read_name(text: str, start: int) -> int:
    """Return the index where an annotation name starting at *start* ends."""
    i = start
    while i < len(text) and text[i] != "(" and not text[i].isspace():
        i += 1
    return i


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def extract_annotation_name(line: str) -> tuple[str, str]:
    """Split an annotation comment into ``(name, arg)``.

    The name runs from just after ``@`` up to ``(``, whitespace, or end of
    line.  When ``(`` follows the name (blanks allowed in between) the
    argument is everything up to the matching ``)``, or to end of line if
    there is none.  The argument string is returned verbatim, not split.

    >>> extract_annotation_name('// @Test(TARGET_TEST, "desc")')
    ('Test', 'TARGET_TEST, "desc"')
    """
    at = line.find("@")
    if at == -1:
        return "", ""

    start = at + 1
    end = _read_name(line, start)
    name = line[start:end]

    paren = end
    while paren < len(line) and line[paren] in " \t":
        paren += 1
    if paren >= len(line) or line[paren] != "(":
        return name, ""

    arg, _ = _group_after(line, paren)
    return name, arg


def extract_extension(line: str) -> ExtensionDef:
    """Decompose a ``// #annotation`` line into its four components.

    Missing pieces come back empty: no ``: @Base(...)`` suffix yields empty
    ``base``/``base_arg``, a line without ``@`` yields an empty definition.
    """
    result = ExtensionDef()
    body_start = len(EXTENSION_PREFIX) if is_extension_def(line) else 0
    at = line.find("@", body_start)
    if at == -1:
        return result

    name_end = _read_name(line, at + 1)
    result.name = line[at + 1 : name_end]
    rest = name_end
    if name_end < len(line) and line[name_end] == "(":
        result.args, rest = _group_after(line, name_end)

    colon = line.find(EXTENSION_BASE_MARKER, rest)
    if colon == -1:
        return result

    base_start = colon + len(EXTENSION_BASE_MARKER)
    base_end = _read_name(line, base_start)
    result.base = line[base_start:base_end]
    if base_end < len(line) and line[base_end] == "(":
        result.base_arg, _ = _group_after(line, base_end)
    return result


def extract_function_name(line: str) -> str:
    """Return the text between the first space and the first ``(``.

    ``void test_func() {`` gives ``test_func``.  When no space precedes the
    parenthesis the name is taken from the start of the line.
    """
    paren = line.find("(")
    if paren == -1:
        paren = len(line)
    space = line.find(" ")
    start = space + 1 if 0 <= space < paren else 0
    return line[start:paren].strip()


def split_args(arg_str: str, max_args: int = MAX_ARGS) -> list[str]:
    """Split a comma-separated argument string into at most *max_args* items.

    Each token is stripped of surrounding whitespace, then of one pair of
    enclosing double quotes.  Commas inside double-quoted strings do not
    split.  Empty tokens are dropped; tokens past *max_args* are discarded.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_string = False
    escaped = False
    for ch in arg_str:
        if in_string:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == ",":
            tokens.append("".join(current))
            current = []
            continue
        if ch == '"':
            in_string = True
        current.append(ch)
    tokens.append("".join(current))

    args: list[str] = []
    for token in tokens:
        token = token.strip()
        if not token:
            continue
        if len(token) > 1 and token[0] == '"' and token[-1] == '"':
            token = token[1:-1]
        if len(args) >= max_args:
            break
        args.append(token)
    return args
