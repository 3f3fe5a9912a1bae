"""Shared logic for actions that render a chart from command line flags."""

import logging
import pathlib
import tempfile
from typing import Any

from chart_preview.helm import Helm
from chart_preview.manifest import SplitDocument
from chart_preview.render import ChartRenderer, RenderResult, render
from chart_preview.selector import select_documents

from . import flags

_LOGGER = logging.getLogger(__name__)


async def render_chart(
    renderer: ChartRenderer | None = None, **kwargs: Any
) -> RenderResult:
    """Render the chart described by the flags.

    A helm renderer with a temporary working directory is used unless one
    is provided.
    """
    ref = flags.build_chart_ref(**kwargs)
    values = await flags.build_values(**kwargs)
    options = flags.build_render_options(**kwargs)
    if renderer is not None:
        return await render(renderer, ref, values, options)
    with tempfile.TemporaryDirectory() as tmp_dir:
        helm_dir = pathlib.Path(tmp_dir) / "helm"
        cache_dir = pathlib.Path(tmp_dir) / "cache"
        helm_dir.mkdir()
        cache_dir.mkdir()
        return await render(Helm(helm_dir, cache_dir), ref, values, options)


def selected_documents(
    result: RenderResult, show_only: list[str] | None
) -> list[SplitDocument] | None:
    """Return the documents matching `--show-only`, or None without patterns."""
    if not show_only:
        return None
    return select_documents(result.documents, show_only)
