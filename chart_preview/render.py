"""Library for rendering a chart into an ordered set of documents.

The chart is fetched, checked and templated by a `ChartRenderer` and the
rendered release is then post-processed into a manifest blob and a list of
documents in install order:
```python
from chart_preview.chart import ChartRef
from chart_preview.helm import Helm
from chart_preview.render import RenderOptions, render

helm = Helm(tmp_dir, cache_dir)
result = await render(
    helm,
    ChartRef("wordpress", repo_url="https://charts.example.com", version="8.1.1"),
    values={"replicaCount": 2},
    options=RenderOptions(namespace="default", skip_tests=True),
)
for document in result.documents:
    print(document.path)
```
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any

from .chart import (
    Bundle,
    ChartRef,
    RenderedOutput,
    check_dependencies,
    check_installable,
)
from .context import trace_stage
from .exceptions import CommandException, InputException, RenderFailure
from .manifest import SplitDocument, assemble_manifest, filter_hooks, split_manifests
from .ordering import sort_documents

__all__ = [
    "RenderOptions",
    "RenderResult",
    "ChartRenderer",
    "process_release",
    "render",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"
DEFAULT_RELEASE_NAME = "release-name"


@dataclass(frozen=True, kw_only=True)
class RenderOptions:
    """Options to use when rendering a chart."""

    skip_tests: bool = False
    """Omit hooks that run as part of a chart test."""

    disable_hooks: bool = False
    """Omit all hooks from the output."""

    namespace: str = DEFAULT_NAMESPACE
    """The namespace the release is rendered for."""

    release_name: str = DEFAULT_RELEASE_NAME
    """The name of the release."""

    dry_run: bool = True
    """Render without creating resources, the only supported mode."""

    client_only: bool = True
    """Render without consulting a cluster for capabilities or lookups."""

    def __post_init__(self) -> None:
        """Validate the options."""
        if not self.dry_run:
            raise InputException("Only dry run rendering is supported")


@dataclass(frozen=True)
class RenderResult:
    """The output of rendering a chart."""

    manifest: str
    """All rendered documents and hooks as a single blob."""

    documents: list[SplitDocument] = field(default_factory=list)
    """The documents of the blob in install order."""


class ChartRenderer(ABC):
    """Fetches and templates charts."""

    @abstractmethod
    async def fetch(self, ref: ChartRef) -> Bundle:
        """Fetch the chart and return its metadata."""

    @abstractmethod
    async def fetched_dependencies(self, bundle: Bundle) -> list[str]:
        """Return the names of dependency charts fetched with the chart."""

    @abstractmethod
    async def render(
        self, bundle: Bundle, values: dict[str, Any], options: RenderOptions
    ) -> RenderedOutput:
        """Template the chart with the specified values."""


def process_release(rendered: RenderedOutput, options: RenderOptions) -> RenderResult:
    """Turn a rendered release into a manifest blob and ordered documents."""
    with trace_stage("assemble"):
        hooks = filter_hooks(rendered.hooks, options.skip_tests)
        if len(hooks) != len(rendered.hooks):
            _LOGGER.debug("Skipped %d test hooks", len(rendered.hooks) - len(hooks))
        manifest = assemble_manifest(rendered.manifest, hooks, options.disable_hooks)
    with trace_stage("split"):
        documents = split_manifests(manifest)
    with trace_stage("order"):
        ordered = sort_documents(documents.values())
    return RenderResult(manifest=manifest, documents=ordered)


async def render(
    renderer: ChartRenderer,
    ref: ChartRef,
    values: dict[str, Any] | None = None,
    options: RenderOptions | None = None,
) -> RenderResult:
    """Render the chart into a manifest blob and ordered documents."""
    if options is None:
        options = RenderOptions()
    with trace_stage("render", str(ref)):
        with trace_stage("fetch"):
            bundle = await renderer.fetch(ref)
        _LOGGER.debug("Fetched chart %s version %s", bundle.name, bundle.version)
        check_installable(bundle.chart_type, bundle.name)
        if bundle.dependencies:
            fetched = await renderer.fetched_dependencies(bundle)
            check_dependencies(bundle.name, bundle.dependency_names, fetched)
        with trace_stage("template"):
            try:
                rendered = await renderer.render(bundle, values or {}, options)
            except CommandException as err:
                raise RenderFailure(bundle.name, str(err)) from err
        return process_release(rendered, options)
