"""Command line tool for previewing the documents rendered from a chart."""

import argparse
import asyncio
import logging
import sys
import traceback

from chart_preview.exceptions import ChartPreviewException
from . import ls, template

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for previewing a chart install.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    template.TemplateAction.register(subparsers)
    ls.ListAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Chart-preview command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except ChartPreviewException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("chart-preview error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
