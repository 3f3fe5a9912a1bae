"""Library for selecting rendered documents by template path.

Patterns are matched against the path of each template within the chart one
path segment at a time, so `*` never matches across a `/`. Each segment is a
shell glob: `*` matches any run of characters, `?` a single character,
`[a-z]` a class which `[^a-z]` or `[!a-z]` negates, and `\\` escapes the
character after it:
```python
from chart_preview.selector import select_documents

docs = select_documents(result.documents, ["templates/*.yaml"])
```
"""

from collections.abc import Iterable, Sequence
import functools
import logging
import os
import re

from .exceptions import InputException, SelectorNotFoundError
from .manifest import SplitDocument

__all__ = [
    "normalize_pattern",
    "match_path",
    "select_documents",
]

_LOGGER = logging.getLogger(__name__)

PATH_SEPARATOR = "/"
ESCAPE = "\\"
NEGATE = ("^", "!")


def normalize_pattern(pattern: str) -> str:
    """Convert platform path separators in a pattern to `/`."""
    for sep in (os.sep, os.altsep):
        if sep and sep != PATH_SEPARATOR:
            pattern = pattern.replace(sep, PATH_SEPARATOR)
    return pattern


def _class_char(segment: str, pos: int) -> tuple[str, int]:
    """Return the class character at pos, unescaped, and the next position."""
    if pos >= len(segment):
        raise InputException(f"Invalid pattern '{segment}': unterminated '['")
    char = segment[pos]
    if char in "-]":
        raise InputException(f"Invalid pattern '{segment}': unexpected '{char}'")
    if char == ESCAPE:
        pos += 1
        if pos >= len(segment):
            raise InputException(f"Invalid pattern '{segment}': trailing escape")
        char = segment[pos]
    return char, pos + 1


def _translate_class(segment: str, pos: int) -> tuple[str, int]:
    """Translate the class starting after `[` at pos to a regex class."""
    negate = pos < len(segment) and segment[pos] in NEGATE
    if negate:
        pos += 1
    items: list[str] = []
    while not items or pos >= len(segment) or segment[pos] != "]":
        low, pos = _class_char(segment, pos)
        item = re.escape(low)
        if pos < len(segment) and segment[pos] == "-":
            high, pos = _class_char(segment, pos + 1)
            if high < low:
                raise InputException(
                    f"Invalid pattern '{segment}': bad range {low}-{high}"
                )
            item = f"{item}-{re.escape(high)}"
        items.append(item)
    return f"[{'^' if negate else ''}{''.join(items)}]", pos + 1


@functools.lru_cache(maxsize=256)
def _compile_segment(segment: str) -> re.Pattern[str]:
    """Compile a single glob path segment to a regular expression."""
    parts: list[str] = []
    pos = 0
    while pos < len(segment):
        char = segment[pos]
        pos += 1
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "[":
            char_class, pos = _translate_class(segment, pos)
            parts.append(char_class)
        elif char == ESCAPE:
            if pos >= len(segment):
                raise InputException(f"Invalid pattern '{segment}': trailing escape")
            parts.append(re.escape(segment[pos]))
            pos += 1
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def match_path(pattern: str, path: str) -> bool:
    """Return true if the template path matches the glob pattern.

    Raises `InputException` for a malformed pattern.
    """
    segments = [_compile_segment(part) for part in pattern.split(PATH_SEPARATOR)]
    path_parts = path.split(PATH_SEPARATOR)
    if len(segments) != len(path_parts):
        return False
    return all(
        segment.fullmatch(part) is not None
        for segment, part in zip(segments, path_parts)
    )


def select_documents(
    documents: Sequence[SplitDocument], patterns: Iterable[str]
) -> list[SplitDocument]:
    """Return the documents matching each pattern in pattern order.

    A document matched by more than one pattern is returned once per pattern.
    Raises `SelectorNotFoundError` for the first pattern that matches nothing.
    """
    selected: list[SplitDocument] = []
    for pattern in patterns:
        normalized = normalize_pattern(pattern)
        matches = [
            document
            for document in documents
            if document.path is not None and match_path(normalized, document.path)
        ]
        if not matches:
            raise SelectorNotFoundError(normalized)
        _LOGGER.debug("Pattern %s matched %d documents", normalized, len(matches))
        selected.extend(matches)
    return selected
