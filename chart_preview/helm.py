"""Library for running `helm` to fetch and template charts locally.

You can fetch a chart from a repository and render it as a dry run install:
```python
from chart_preview.chart import ChartRef
from chart_preview.helm import Helm
from chart_preview.render import RenderOptions

helm = Helm(Path("/tmp/path/helm"), Path("/tmp/path/cache"))
bundle = await helm.fetch(ChartRef("wordpress", repo_url=url, version="8.1.1"))
rendered = await helm.render(bundle, values={}, options=RenderOptions())
for hook in rendered.hooks:
    print(f"Found hook {hook.path} {hook.events}")
```
"""

import json
import logging
from pathlib import Path
import tarfile
import tempfile
from typing import Any

import aiofiles
from aiofiles.os import listdir
from aiofiles.ospath import isdir
import yaml

from . import command
from .chart import Bundle, ChartRef, RenderedOutput
from .exceptions import HelmException, InputException
from .render import ChartRenderer, RenderOptions

__all__ = [
    "Helm",
]

_LOGGER = logging.getLogger(__name__)


HELM_BIN = "helm"
CHART_FILE = "Chart.yaml"
CHARTS_DIR = "charts"
ARCHIVE_SUFFIX = ".tgz"


def _load_chart_file(name: str, content: str) -> dict[str, Any]:
    """Parse the contents of a Chart.yaml file."""
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(f"Unable to parse {name}: {err}") from err
    if not isinstance(doc, dict):
        raise InputException(f"Invalid {name}, expected a mapping")
    return doc


def _archive_chart_name(archive: Path) -> str | None:
    """Return the chart name from the Chart.yaml inside a packaged chart."""
    try:
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar.getmembers():
                parts = member.name.split("/")
                if len(parts) != 2 or parts[1] != CHART_FILE:
                    continue
                if (chart_file := tar.extractfile(member)) is None:
                    continue
                doc = _load_chart_file(str(archive), chart_file.read().decode("utf-8"))
                return doc.get("name")
    except tarfile.TarError as err:
        _LOGGER.warning("Unable to read chart archive %s: %s", archive, err)
    return None


class Helm(ChartRenderer):
    """Fetches and renders charts with the helm command."""

    def __init__(self, tmp_dir: Path, cache_dir: Path) -> None:
        """Initialize Helm."""
        self._tmp_dir = tmp_dir
        self._flags = [
            "--repository-cache",
            str(cache_dir),
            "--repository-config",
            str(self._tmp_dir / "repository-config.yaml"),
        ]

    async def fetch(self, ref: ChartRef) -> Bundle:
        """Fetch the chart into the temporary directory and read its metadata.

        A chart name that refers to a local directory is used in place.
        """
        if ref.repo_url is None and await isdir(ref.name):
            chart_dir = Path(ref.name)
        else:
            dest = Path(tempfile.mkdtemp(prefix="chart-", dir=self._tmp_dir))
            args = [HELM_BIN, "pull", ref.name, "--untar", "--untardir", str(dest)]
            if ref.repo_url:
                args.extend(["--repo", ref.repo_url])
            if ref.version:
                args.extend(["--version", ref.version])
            args.extend(self._flags)
            await command.run(command.Command(args, exc=HelmException))
            entries = await listdir(dest)
            if len(entries) != 1:
                raise HelmException(
                    f"Expected a single chart for {ref} but found: {entries}"
                )
            chart_dir = dest / entries[0]
        chart_file = chart_dir / CHART_FILE
        try:
            async with aiofiles.open(chart_file, encoding="utf-8") as chart:
                content = await chart.read()
        except OSError as err:
            raise InputException(
                f"Unable to read {chart_file} for {ref}: {err}"
            ) from err
        return Bundle.parse_doc(
            _load_chart_file(str(chart_file), content),
            repo_url=ref.repo_url,
            path=str(chart_dir),
        )

    async def fetched_dependencies(self, bundle: Bundle) -> list[str]:
        """Return the names of charts in the charts/ directory of the bundle."""
        if bundle.path is None:
            return []
        charts_dir = Path(bundle.path) / CHARTS_DIR
        if not await isdir(charts_dir):
            return []
        names: list[str] = []
        for entry in sorted(await listdir(charts_dir)):
            path = charts_dir / entry
            name: str | None = None
            if await isdir(path):
                try:
                    async with aiofiles.open(path / CHART_FILE, encoding="utf-8") as f:
                        name = _load_chart_file(str(path), await f.read()).get("name")
                except FileNotFoundError:
                    _LOGGER.debug("Ignoring %s without %s", path, CHART_FILE)
            elif entry.endswith(ARCHIVE_SUFFIX):
                name = _archive_chart_name(path)
            if name:
                names.append(name)
        _LOGGER.debug("Chart %s has fetched dependencies %s", bundle.name, names)
        return names

    async def render(
        self, bundle: Bundle, values: dict[str, Any], options: RenderOptions
    ) -> RenderedOutput:
        """Return the release produced by a dry run install of the chart."""
        if bundle.path is None:
            raise InputException(f"Chart {bundle.name} has not been fetched")
        args: list[str] = [
            HELM_BIN,
            "install",
            options.release_name,
            bundle.path,
            "--namespace",
            options.namespace,
            "--replace",
            "--output",
            "json",
            "--dry-run=client" if options.client_only else "--dry-run=server",
        ]
        if values:
            values_path = self._tmp_dir / f"{options.release_name}-values.yaml"
            async with aiofiles.open(values_path, mode="w") as values_file:
                await values_file.write(yaml.dump(values, sort_keys=False))
            args.extend(["--values", str(values_path)])
        out = await command.run(command.Command(args, exc=HelmException))
        try:
            doc = json.loads(out)
        except json.JSONDecodeError as err:
            raise HelmException(
                f"Unable to parse release for chart {bundle.name}: {err}"
            ) from err
        return RenderedOutput.parse_doc(doc)
