"""Fixtures for chart-preview tests."""

from typing import Any

import pytest

from chart_preview.chart import Bundle, ChartRef, Dependency, Hook, RenderedOutput
from chart_preview.render import ChartRenderer, RenderOptions

CHART_MANIFEST = """---
# Source: mychart/templates/serviceaccount.yaml
apiVersion: v1
kind: ServiceAccount
metadata:
  name: release-name-mychart
---
# Source: mychart/templates/service.yaml
apiVersion: v1
kind: Service
metadata:
  name: release-name-mychart
spec:
  ports:
    - port: 80
---
# Source: mychart/templates/deployment.yaml
apiVersion: apps/v1
kind: Deployment
metadata:
  name: release-name-mychart
---
# Source: mychart/templates/namespace.yaml
apiVersion: v1
kind: Namespace
metadata:
  name: example
"""

TEST_HOOK = Hook(
    name="release-name-mychart-test-connection",
    kind="Pod",
    path="mychart/templates/tests/test-connection.yaml",
    manifest="""apiVersion: v1
kind: Pod
metadata:
  name: release-name-mychart-test-connection
  annotations:
    "helm.sh/hook": test""",
    events=["test"],
)

MIGRATE_HOOK = Hook(
    name="release-name-mychart-migrate",
    kind="Job",
    path="mychart/templates/hooks/migrate.yaml",
    manifest="""apiVersion: batch/v1
kind: Job
metadata:
  name: release-name-mychart-migrate
  annotations:
    "helm.sh/hook": pre-install""",
    events=["pre-install"],
)


class FakeRenderer(ChartRenderer):
    """A ChartRenderer that returns a fixed release."""

    def __init__(
        self,
        bundle: Bundle,
        rendered: RenderedOutput,
        fetched: list[str],
        error: Exception | None = None,
    ) -> None:
        """Initialize FakeRenderer."""
        self.bundle = bundle
        self.rendered = rendered
        self.fetched = fetched
        self.error = error
        self.refs: list[ChartRef] = []
        self.values: dict[str, Any] | None = None
        self.options: RenderOptions | None = None

    async def fetch(self, ref: ChartRef) -> Bundle:
        self.refs.append(ref)
        return self.bundle

    async def fetched_dependencies(self, bundle: Bundle) -> list[str]:
        return self.fetched

    async def render(
        self, bundle: Bundle, values: dict[str, Any], options: RenderOptions
    ) -> RenderedOutput:
        self.values = values
        self.options = options
        if self.error is not None:
            raise self.error
        return self.rendered


@pytest.fixture(name="chart_bundle")
def chart_bundle_fixture() -> Bundle:
    """Fixture for the metadata of the fetched chart."""
    return Bundle(
        name="mychart",
        version="0.1.0",
        chart_type="application",
        dependencies=[Dependency(name="postgresql", version="12.x.x")],
        path="/charts/mychart",
    )


@pytest.fixture(name="fetched_dependencies")
def fetched_dependencies_fixture() -> list[str]:
    """Fixture for the names of charts fetched with the chart."""
    return ["postgresql"]


@pytest.fixture(name="rendered_output")
def rendered_output_fixture() -> RenderedOutput:
    """Fixture for the release produced by the renderer."""
    return RenderedOutput(manifest=CHART_MANIFEST, hooks=[TEST_HOOK, MIGRATE_HOOK])


@pytest.fixture(name="render_error")
def render_error_fixture() -> Exception | None:
    """Fixture for an error raised by the renderer."""
    return None


@pytest.fixture(name="renderer")
def renderer_fixture(
    chart_bundle: Bundle,
    rendered_output: RenderedOutput,
    fetched_dependencies: list[str],
    render_error: Exception | None,
) -> FakeRenderer:
    """Fixture for a renderer that doesn't need the helm binary."""
    return FakeRenderer(
        chart_bundle, rendered_output, fetched_dependencies, error=render_error
    )
