"""Exceptions related to chart-preview."""

__all__ = [
    "ChartPreviewException",
    "InputException",
    "CommandException",
    "HelmException",
    "NotInstallableError",
    "MissingDependenciesError",
    "RenderFailure",
    "SelectorNotFoundError",
    "MalformedSourceHeader",
]


class ChartPreviewException(Exception):
    """Generic base exception used for this library."""


class InputException(ChartPreviewException):
    """Raised when the input files or values are not formatted as expected."""


class CommandException(ChartPreviewException):
    """Raised when there is a failure running a subcommand."""


class HelmException(CommandException):
    """Raised when there is a failure running a helm command."""


class NotInstallableError(ChartPreviewException):
    """Raised when a chart declares a type that can't be installed."""

    def __init__(self, chart_name: str, chart_type: str) -> None:
        super().__init__(
            f"Chart '{chart_name}' has type '{chart_type}' which is not installable"
        )
        self.chart_name = chart_name
        self.chart_type = chart_type


class MissingDependenciesError(ChartPreviewException):
    """Raised when a declared chart dependency has not been fetched."""

    def __init__(self, chart_name: str, missing: list[str]) -> None:
        super().__init__(
            f"Chart '{chart_name}' dependencies found in Chart.yaml but missing in "
            f"charts/ directory: {', '.join(missing)}; fetch dependencies before "
            "rendering (helm dependency build)"
        )
        self.chart_name = chart_name
        self.missing = missing


class RenderFailure(ChartPreviewException):
    """Raised when the template renderer fails to produce a release."""

    def __init__(self, chart_name: str, message: str | None) -> None:
        super().__init__(
            f"Chart '{chart_name}' failed to render: {message or 'Unknown error'}"
        )
        self.chart_name = chart_name
        self.message = message


class SelectorNotFoundError(ChartPreviewException):
    """Raised when a path or glob selector matches no rendered document."""

    def __init__(self, pattern: str) -> None:
        super().__init__(f"could not find template {pattern} in chart")
        self.pattern = pattern


class MalformedSourceHeader(InputException):
    """Raised when a document does not have a parseable `# Source:` line."""
