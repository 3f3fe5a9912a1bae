"""Test helpers for chart-preview tools."""

from pathlib import Path

from chart_preview.render import ChartRenderer
from chart_preview.tool.chart_preview import _make_parser


async def run_command(
    args: list[str], renderer: ChartRenderer, output_file: Path
) -> str:
    """Run a chart-preview command and return what it wrote to the output file."""
    parsed = _make_parser().parse_args(args + ["--output-file", str(output_file)])
    await parsed.cls().run(**vars(parsed), renderer=renderer)
    return output_file.read_text()
