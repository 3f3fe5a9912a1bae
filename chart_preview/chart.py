"""Representation of a chart and the release rendered from it.

A `Bundle` is the metadata of a fetched chart (the contents of `Chart.yaml`)
and is checked before any rendering happens:
```python
from chart_preview.chart import Bundle, check_installable, check_dependencies

bundle = Bundle.parse_doc(yaml.safe_load(chart_yaml))
check_installable(bundle.chart_type, bundle.name)
check_dependencies(bundle.name, bundle.dependency_names, ["postgresql"])
```

A `RenderedOutput` is the manifest body and lifecycle hooks produced by the
template renderer for a single release.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
import logging
from typing import Any

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig

from .exceptions import (
    InputException,
    MissingDependenciesError,
    NotInstallableError,
)

__all__ = [
    "ChartRef",
    "Dependency",
    "Bundle",
    "Hook",
    "RenderedOutput",
    "check_installable",
    "check_dependencies",
]

_LOGGER = logging.getLogger(__name__)


CHART_TYPE_APPLICATION = "application"
INSTALLABLE_TYPES = ("", CHART_TYPE_APPLICATION)
HOOK_TEST = "test"


def _omit_none(doc: dict[str, Any]) -> dict[str, Any]:
    """Drop keys with explicit null values so that field defaults apply."""
    return {k: v for k, v in doc.items() if v is not None}


class BaseModel(DataClassDictMixin):
    """Base class for all chart objects."""

    class Config(BaseConfig):
        omit_none = True


@dataclass(frozen=True)
class ChartRef:
    """Identifies the chart to fetch."""

    name: str
    """The chart name, or a path to a local chart directory."""

    repo_url: str | None = None
    """The chart repository url."""

    version: str | None = None
    """The chart version, or the latest version when unset."""

    def __str__(self) -> str:
        """Return a human readable reference for messages."""
        version = f"@{self.version}" if self.version else ""
        if self.repo_url:
            return f"{self.repo_url.rstrip('/')}/{self.name}{version}"
        return f"{self.name}{version}"


@dataclass(frozen=True)
class Dependency(BaseModel):
    """A dependency declared in the chart metadata."""

    name: str
    """The name of the dependent chart."""

    version: str | None = None
    """The version constraint of the dependent chart."""

    repository: str | None = None
    """The repository url of the dependent chart."""

    alias: str | None = None
    """An alternative name used for the chart values."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Dependency":
        """Parse a Dependency from a Chart.yaml dependencies entry."""
        if not isinstance(doc, dict) or not doc.get("name"):
            raise InputException(f"Invalid chart dependency missing name: {doc}")
        return cls.from_dict(_omit_none(doc))


@dataclass(frozen=True)
class Bundle(BaseModel):
    """The metadata of a fetched chart."""

    name: str
    """The name of the chart."""

    version: str
    """The version of the chart."""

    chart_type: str = ""
    """The chart type, either empty, `application` or `library`."""

    dependencies: list[Dependency] = field(default_factory=list)
    """Dependencies declared in Chart.yaml."""

    repo_url: str | None = None
    """The repository the chart was fetched from."""

    path: str | None = None
    """The local directory holding the fetched chart."""

    @classmethod
    def parse_doc(
        cls,
        doc: dict[str, Any],
        repo_url: str | None = None,
        path: str | None = None,
    ) -> "Bundle":
        """Parse a Bundle from the contents of a Chart.yaml file."""
        if not isinstance(doc, dict):
            raise InputException(f"Invalid Chart.yaml, expected a mapping: {doc}")
        if not (name := doc.get("name")):
            raise InputException(f"Invalid Chart.yaml missing name: {doc}")
        if not (version := doc.get("version")):
            raise InputException(f"Invalid Chart.yaml for '{name}' missing version")
        return cls(
            name=name,
            version=str(version),
            chart_type=doc.get("type") or "",
            dependencies=[
                Dependency.parse_doc(dep) for dep in doc.get("dependencies") or []
            ],
            repo_url=repo_url,
            path=path,
        )

    @property
    def dependency_names(self) -> list[str]:
        """Return the names of the declared dependencies."""
        return [dep.name for dep in self.dependencies]


@dataclass(frozen=True)
class Hook(BaseModel):
    """A lifecycle hook rendered separately from the release manifest."""

    name: str
    """The name of the resource in the hook."""

    path: str
    """The chart path of the template that produced the hook."""

    manifest: str = ""
    """The rendered hook manifest."""

    kind: str | None = None
    """The kind of the resource in the hook."""

    events: list[str] = field(default_factory=list)
    """Lifecycle events that trigger the hook e.g. `pre-install` or `test`."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Hook":
        """Parse a Hook from a release `hooks` entry."""
        if not isinstance(doc, dict) or not doc.get("path"):
            raise InputException(f"Invalid hook missing path: {doc}")
        return cls.from_dict({"name": "", **_omit_none(doc)})

    @property
    def is_test(self) -> bool:
        """Return true if the hook runs as part of a chart test."""
        return HOOK_TEST in self.events


@dataclass(frozen=True)
class RenderedOutput(BaseModel):
    """The output of the template renderer for a single release."""

    manifest: str = ""
    """The release manifest body, a multi-document YAML string."""

    hooks: list[Hook] = field(default_factory=list)
    """The rendered hooks in renderer order."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "RenderedOutput":
        """Parse a RenderedOutput from a release object."""
        if not isinstance(doc, dict):
            raise InputException(f"Invalid release, expected a mapping: {doc}")
        return cls(
            manifest=doc.get("manifest") or "",
            hooks=[Hook.parse_doc(hook) for hook in doc.get("hooks") or []],
        )


def check_installable(chart_type: str | None, chart_name: str = "") -> None:
    """Verify the chart type can be installed.

    Library charts only provide helpers to other charts and can't be rendered
    on their own.
    """
    if (chart_type or "") in INSTALLABLE_TYPES:
        return
    raise NotInstallableError(chart_name, str(chart_type))


def check_dependencies(
    chart_name: str, declared: Iterable[str], fetched: Iterable[str]
) -> None:
    """Verify every declared dependency is present in the fetched set.

    This does not resolve or fetch anything, it only checks the charts that
    were already retrieved alongside the chart.
    """
    available = set(fetched)
    missing = [name for name in declared if name not in available]
    if missing:
        _LOGGER.debug("Chart %s is missing dependencies: %s", chart_name, missing)
        raise MissingDependenciesError(chart_name, missing)
