"""Library for emitting rendered documents to a stream or a directory."""

from collections.abc import Iterable
import logging
from pathlib import Path, PurePosixPath
import sys
from typing import TextIO

import aiofiles
from aiofiles.os import makedirs

from .exceptions import InputException
from .manifest import SEPARATOR, SOURCE_PREFIX, SplitDocument

__all__ = [
    "write_stream",
    "write_document",
    "write_files",
]

_LOGGER = logging.getLogger(__name__)

DIR_MODE = 0o755


def write_stream(
    manifest: str,
    selected: Iterable[SplitDocument] | None = None,
    file: TextIO = sys.stdout,
) -> None:
    """Write the manifest blob, or only the selected documents, to a stream."""
    if selected is None:
        print(manifest, end="", file=file)
        return
    for document in selected:
        print(f"{SEPARATOR}\n{document.content}", file=file)


def _destination(output_dir: Path, name: str) -> Path:
    """Return the file for a template path, kept under the output directory."""
    relative = PurePosixPath(name.lstrip("/"))
    if not relative.parts or ".." in relative.parts:
        raise InputException(f"Template path '{name}' is not a relative file path")
    filename = output_dir.joinpath(*relative.parts)
    if not filename.resolve().is_relative_to(output_dir.resolve()):
        raise InputException(
            f"Template path '{name}' resolves outside of {output_dir}"
        )
    return filename


async def write_document(
    output_dir: Path, name: str, data: str, append: bool = False
) -> Path:
    """Write a single document record to a file under the output directory."""
    filename = _destination(output_dir, name)
    await makedirs(filename.parent, mode=DIR_MODE, exist_ok=True)
    mode = "a" if append else "w"
    async with aiofiles.open(filename, mode=mode, encoding="utf-8") as out:
        await out.write(f"{SEPARATOR}\n{SOURCE_PREFIX}{name}\n{data}\n")
    _LOGGER.info("wrote %s", filename)
    return filename


async def write_files(
    output_dir: Path, documents: Iterable[SplitDocument]
) -> list[Path]:
    """Write each document to a file named after its template path.

    The first document for a path creates the file and later documents with
    the same path are appended.
    """
    written: list[Path] = []
    for document in documents:
        if document.path is None:
            _LOGGER.warning(
                "Skipping document %s without a source path", document.key
            )
            continue
        filename = await write_document(
            output_dir,
            document.path,
            document.body,
            append=_destination(output_dir, document.path) in written,
        )
        if filename not in written:
            written.append(filename)
    return written
