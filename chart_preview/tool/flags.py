"""Library for common chart flags."""

from argparse import ArgumentParser, BooleanOptionalAction
import logging
import pathlib
from typing import Any

from chart_preview.chart import ChartRef
from chart_preview.render import (
    DEFAULT_NAMESPACE,
    DEFAULT_RELEASE_NAME,
    RenderOptions,
)
from chart_preview.values import load_values

_LOGGER = logging.getLogger(__name__)


def add_chart_flags(args: ArgumentParser) -> None:
    """Add flags that identify the chart and the values to render it with."""
    args.add_argument(
        "chart",
        type=str,
        help="Name of the chart in the repository, or a path to a local chart",
    )
    args.add_argument(
        "--repo",
        type=str,
        default=None,
        help="Chart repository url",
    )
    args.add_argument(
        "--version",
        type=str,
        default=None,
        help="Version of the chart, the latest version when not set",
    )
    args.add_argument(
        "--values",
        "-f",
        type=pathlib.Path,
        action="append",
        default=[],
        help="Values file to render the chart with, may be repeated",
    )
    args.add_argument(
        "--set",
        type=str,
        action="append",
        default=[],
        help="Set a value with key.path=value, may be repeated",
    )


def add_render_flags(args: ArgumentParser) -> None:
    """Add flags that control how the release is rendered."""
    args.add_argument(
        "--namespace",
        "-n",
        type=str,
        default=DEFAULT_NAMESPACE,
        help="Namespace the release is rendered for",
    )
    args.add_argument(
        "--release-name",
        type=str,
        default=DEFAULT_RELEASE_NAME,
        help="Name of the release",
    )
    args.add_argument(
        "--skip-tests",
        default=False,
        action=BooleanOptionalAction,
        help="Omit test hooks from the output",
    )
    args.add_argument(
        "--no-hooks",
        dest="disable_hooks",
        default=False,
        action="store_true",
        help="Omit all hooks from the output",
    )
    args.add_argument(
        "--client-only",
        default=True,
        action=BooleanOptionalAction,
        help="Render without consulting a cluster for capabilities and lookups",
    )
    args.add_argument(
        "--show-only",
        "-s",
        type=str,
        action="append",
        default=[],
        help="Only show documents rendered from templates matching this path "
        "or glob e.g. `templates/*.yaml`, may be repeated",
    )


def build_chart_ref(**kwargs: Any) -> ChartRef:
    """Build a chart reference from the flags."""
    return ChartRef(
        name=kwargs["chart"],
        repo_url=kwargs.get("repo"),
        version=kwargs.get("version"),
    )


async def build_values(**kwargs: Any) -> dict[str, Any]:
    """Load the values from the values files and overrides in the flags."""
    return await load_values(kwargs.get("values"), kwargs.get("set"))


def build_render_options(**kwargs: Any) -> RenderOptions:
    """Build a RenderOptions object from the flags."""
    _LOGGER.debug("Building render options from args: %s", kwargs)
    return RenderOptions(
        skip_tests=kwargs["skip_tests"],
        disable_hooks=kwargs["disable_hooks"],
        namespace=kwargs["namespace"],
        release_name=kwargs["release_name"],
        client_only=kwargs["client_only"],
    )
