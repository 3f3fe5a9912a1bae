"""Library for formatting command output."""

import json
import sys
from typing import Any, Generator, TextIO

import yaml


PADDING = 4


def column_widths(rows: list[list[str]]) -> list[int]:
    """Return the padded width of each column, sized to its widest value."""
    return [max(len(value) for value in column) + PADDING for column in zip(*rows)]


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the header and each row aligned in columns."""
    if not headers:
        return
    data = [headers] + rows
    widths = column_widths(data)
    for row in data:
        yield "".join(value.ljust(width) for value, width in zip(row, widths))


class PrintFormatter:
    """A formatter that prints human readable console output."""

    def __init__(self, keys: list[str] | None = None):
        """Initialize the PrintFormatter with optional keys to print."""
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects."""
        if not data:
            return
        keys = self._keys if self._keys is not None else list(data[0])
        rows = [[str(row[key]) for key in keys] for row in data]
        yield from format_columns([key.upper() for key in keys], rows)

    def print(self, data: list[dict[str, Any]], file: TextIO = sys.stdout) -> None:
        """Output the data objects."""
        for line in self.format(data):
            print(line.rstrip(), file=file)


class YamlFormatter:
    """A formatter that prints the data objects as a yaml list."""

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects."""
        yield from yaml.dump(data, sort_keys=False, explicit_start=True).splitlines()

    def print(self, data: list[dict[str, Any]], file: TextIO = sys.stdout) -> None:
        """Output the data objects."""
        print(yaml.dump(data, sort_keys=False, explicit_start=True), end="", file=file)


class JsonFormatter:
    """A formatter that prints the data objects as a json list."""

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects."""
        yield from json.dumps(data, indent=2).splitlines()

    def print(self, data: list[dict[str, Any]], file: TextIO = sys.stdout) -> None:
        """Output the data objects."""
        for line in self.format(data):
            print(line, file=file)


FORMATTERS = {
    "table": PrintFormatter,
    "yaml": YamlFormatter,
    "json": JsonFormatter,
}
