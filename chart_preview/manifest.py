"""Library for assembling and splitting rendered release manifests.

The renderer produces a release manifest body and a list of hooks. These are
combined into a single multi-document YAML blob where every document is
preceded by a `# Source:` header naming the chart template that produced it:
```yaml
---
# Source: mychart/templates/service.yaml
apiVersion: v1
kind: Service
```

The blob can then be split back into individually addressable documents:
```python
from chart_preview import manifest

hooks = manifest.filter_hooks(rendered.hooks, skip_tests=True)
blob = manifest.assemble_manifest(rendered.manifest, hooks)
for key, doc in manifest.split_manifests(blob).items():
    print(f"Found {key} {doc.path} {doc.kind}")
```
"""

from collections.abc import Iterable
from dataclasses import dataclass
import enum
from functools import cached_property
import logging
from typing import Any

import yaml

from .chart import Hook
from .exceptions import MalformedSourceHeader

__all__ = [
    "SplitDocument",
    "is_test_hook",
    "filter_hooks",
    "assemble_manifest",
    "split_manifests",
    "parse_source_path",
    "source_path",
]

_LOGGER = logging.getLogger(__name__)

SEPARATOR = "---"
SOURCE_PREFIX = "# Source: "
HOOK_ANNOTATION = "helm.sh/hook"
KEY_TEMPLATE = "manifest-{index}"


@dataclass(frozen=True)
class SplitDocument:
    """A single document split out of a release manifest blob."""

    key: str
    """Identifier of the document, unique within the blob."""

    path: str | None
    """The path of the template within the chart, or None without a header."""

    text: str
    """The exact text of the document in the blob, including its separator."""

    @property
    def content(self) -> str:
        """Return the document without its leading separator line."""
        first, _, rest = self.text.partition("\n")
        if first.strip() == SEPARATOR:
            return rest.rstrip()
        return self.text.strip()

    @property
    def header(self) -> str | None:
        """Return the `# Source:` line of the document if present."""
        first, _, _ = self.content.partition("\n")
        if first.startswith(SOURCE_PREFIX):
            return first.rstrip()
        return None

    @property
    def body(self) -> str:
        """Return the document without its separator and source header."""
        if self.header is None:
            return self.content
        return self.content.partition("\n")[2]

    @cached_property
    def doc(self) -> dict[str, Any] | None:
        """Return the first parsed YAML object of the document."""
        try:
            for obj in yaml.safe_load_all(self.body):
                if isinstance(obj, dict):
                    return obj
        except yaml.YAMLError as err:
            _LOGGER.debug("Unable to parse document %s: %s", self.key, err)
        return None

    @property
    def kind(self) -> str | None:
        """Return the kind of the resource in the document."""
        if self.doc is None:
            return None
        kind = self.doc.get("kind")
        return kind if isinstance(kind, str) else None

    @property
    def is_hook(self) -> bool:
        """Return true if the resource is annotated as a lifecycle hook."""
        if self.doc is None:
            return False
        metadata = self.doc.get("metadata")
        if not isinstance(metadata, dict):
            return False
        annotations = metadata.get("annotations")
        return isinstance(annotations, dict) and HOOK_ANNOTATION in annotations


def is_test_hook(hook: Hook) -> bool:
    """Return true if the hook runs as part of a chart test."""
    return hook.is_test


def filter_hooks(hooks: Iterable[Hook], skip_tests: bool) -> list[Hook]:
    """Return the hooks to include in the output, preserving order."""
    return [hook for hook in hooks if not (skip_tests and is_test_hook(hook))]


def assemble_manifest(
    body: str, hooks: Iterable[Hook], disable_hooks: bool = False
) -> str:
    """Combine the release manifest body and hooks into a single blob."""
    parts = []
    if body := body.strip():
        parts.append(f"{body}\n")
    if not disable_hooks:
        for hook in hooks:
            parts.append(f"{SEPARATOR}\n{SOURCE_PREFIX}{hook.path}\n{hook.manifest}\n")
    return "".join(parts)


def parse_source_path(header: str) -> str:
    """Return the template path within the chart from a `# Source:` line.

    The leading chart name is removed and the remaining segments are joined
    with `/` regardless of platform.
    """
    if not header.startswith(SOURCE_PREFIX):
        raise MalformedSourceHeader(f"Expected '{SOURCE_PREFIX}' header: {header!r}")
    value = header[len(SOURCE_PREFIX) :].rstrip()
    chart_name, _, rest = value.partition("/")
    if not chart_name or not rest:
        raise MalformedSourceHeader(f"Expected '<chart>/<path>' in header: {header!r}")
    return "/".join(rest.split("/"))


def source_path(header: str | None) -> str | None:
    """Return the template path of a header, or None if it can't be parsed."""
    if header is None:
        return None
    try:
        return parse_source_path(header)
    except MalformedSourceHeader as err:
        _LOGGER.debug("Document excluded from path selection: %s", err)
        return None


class _ScanState(enum.Enum):
    """States of the manifest line scanner."""

    IN_DOCUMENT = "in-document"
    """Accumulating lines of the current document."""

    AFTER_SEPARATOR = "after-separator"
    """A separator line was seen, waiting to see if a header follows."""


def split_manifests(blob: str) -> dict[str, SplitDocument]:
    """Split a manifest blob into documents at each `---` and `# Source:` pair.

    A separator that is not directly followed by a source header stays part of
    the current document. Any text before the first header becomes a document
    without a path. The returned dict is ordered by position in the blob and
    joining the text of every document reproduces the blob.
    """
    result: dict[str, SplitDocument] = {}
    current: list[str] = []
    separator = ""
    state = _ScanState.IN_DOCUMENT

    def flush() -> None:
        if not current:
            return
        text = "".join(current)
        header: str | None = None
        if (
            len(current) > 1
            and current[0].strip() == SEPARATOR
            and current[1].startswith(SOURCE_PREFIX)
        ):
            header = current[1]
        key = KEY_TEMPLATE.format(index=len(result))
        result[key] = SplitDocument(key=key, path=source_path(header), text=text)

    for line in blob.splitlines(keepends=True):
        if state is _ScanState.AFTER_SEPARATOR:
            state = _ScanState.IN_DOCUMENT
            if line.startswith(SOURCE_PREFIX):
                flush()
                current = [separator, line]
                continue
            current.append(separator)
        if line.strip() == SEPARATOR:
            separator = line
            state = _ScanState.AFTER_SEPARATOR
            continue
        current.append(line)

    if state is _ScanState.AFTER_SEPARATOR:
        current.append(separator)
    flush()
    _LOGGER.debug("Split manifest into %d documents", len(result))
    return result
