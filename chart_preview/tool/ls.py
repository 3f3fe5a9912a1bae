"""Chart-preview ls action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import Any, cast

from chart_preview.ordering import categorize
from chart_preview.render import ChartRenderer

from . import flags
from .format import FORMATTERS
from .render_common import render_chart, selected_documents

_LOGGER = logging.getLogger(__name__)

EMPTY = "-"


class ListAction:
    """Chart-preview ls action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "ls",
                help="List the documents a dry run install of a chart would produce",
                description="""List the rendered documents of a chart in install
                    order with their template path, kind and category.""",
            ),
        )
        args.add_argument(
            "--output",
            "-o",
            choices=list(FORMATTERS),
            default="table",
            help="Output format of the command",
        )
        args.add_argument(
            "--output-file",
            type=str,
            default="/dev/stdout",
            help="Output file for the results of the command",
        )
        flags.add_chart_flags(args)
        flags.add_render_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output: str,
        output_file: str,
        show_only: list[str],
        renderer: ChartRenderer | None = None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        result = await render_chart(renderer, **kwargs)
        documents = selected_documents(result, show_only)
        if documents is None:
            documents = result.documents
        data: list[dict[str, Any]] = [
            {
                "path": document.path or EMPTY,
                "kind": document.kind or EMPTY,
                "category": categorize(document).value,
            }
            for document in documents
        ]
        formatter = FORMATTERS[output]()
        with open(output_file, "w") as file:
            formatter.print(data, file=file)
