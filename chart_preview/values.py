"""Module for loading user supplied chart values.

Values files are merged in the order given and individual `key.path=value`
overrides are applied on top. Merging the result with the chart defaults is
left to the renderer.
"""

import logging
from pathlib import Path
import re
from typing import Any

import aiofiles
import yaml

from .exceptions import InputException

__all__ = [
    "merge_values",
    "set_value",
    "load_values",
]

_LOGGER = logging.getLogger(__name__)

_KEY_SEPARATOR = re.compile(r"(?<!\\)\.")
_ESCAPE = re.compile(r"\\(.)")


def merge_values(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of `base` with `override` merged into it.

    Nested mappings merge key by key while any other value, lists included,
    is replaced by the override.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = merge_values(current, value)
        merged[key] = value
    return merged


def _split_key(key: str) -> list[str]:
    """Split a dotted key path, honoring `\\.` escapes."""
    return [_ESCAPE.sub(r"\1", part) for part in _KEY_SEPARATOR.split(key)]


def set_value(values: dict[str, Any], expr: str) -> dict[str, Any]:
    """Set a value from a `key.path=value` expression.

    Dots in a key may be escaped with a backslash. The value is parsed as YAML
    so `replicas=2` sets an integer.
    """
    key, sep, raw = expr.partition("=")
    if not sep:
        raise InputException(f"Expected key=value format but got '{expr}'")
    if not key:
        raise InputException(f"Expected a key in '{expr}'")
    *parents, leaf = _split_key(key)

    node = values
    for name in parents:
        child = node.setdefault(name, {})
        if not isinstance(child, dict):
            raise InputException(
                f"Can't set '{key}', value at '{name}' is a {type(child).__name__}"
            )
        node = child

    try:
        node[leaf] = yaml.safe_load(raw) if raw else ""
    except yaml.YAMLError as err:
        raise InputException(f"Unable to parse value for '{key}': {err}") from err
    return values


async def _read_values_file(path: Path) -> dict[str, Any]:
    """Read a single values file, treating an empty file as no values."""
    _LOGGER.debug("Loading values file %s", path)
    try:
        async with aiofiles.open(path, encoding="utf-8") as values_file:
            doc = yaml.safe_load(await values_file.read())
    except (OSError, yaml.YAMLError) as err:
        raise InputException(f"Unable to read values file {path}: {err}") from err
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise InputException(
            f"Expected values file {path} to be a mapping, found {type(doc).__name__}"
        )
    return doc


async def load_values(
    files: list[Path] | None = None, set_values: list[str] | None = None
) -> dict[str, Any]:
    """Load values files and overrides into a single values object."""
    values: dict[str, Any] = {}
    for path in files or []:
        values = merge_values(values, await _read_values_file(path))
    for expr in set_values or []:
        set_value(values, expr)
    return values
