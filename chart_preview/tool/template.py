"""Chart-preview template action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import pathlib
from typing import cast

from chart_preview.output import write_files, write_stream
from chart_preview.render import ChartRenderer

from . import flags
from .render_common import render_chart, selected_documents

_LOGGER = logging.getLogger(__name__)


class TemplateAction:
    """Chart-preview template action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "template",
                help="Render the documents a dry run install of a chart would produce",
                description="""Fetch a chart and render it without contacting a
                    cluster. The output contains the release manifest followed by
                    its hooks, or only the documents selected with --show-only.""",
            ),
        )
        args.add_argument(
            "--output-file",
            type=str,
            default="/dev/stdout",
            help="Output file for the results of the command",
        )
        args.add_argument(
            "--output-dir",
            type=pathlib.Path,
            default=None,
            help="Write each document to a file named after its template path "
            "under this directory instead of the output file",
        )
        flags.add_chart_flags(args)
        flags.add_render_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        output_file: str,
        output_dir: pathlib.Path | None,
        show_only: list[str],
        renderer: ChartRenderer | None = None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        result = await render_chart(renderer, **kwargs)
        selected = selected_documents(result, show_only)
        if output_dir is not None:
            documents = selected if selected is not None else result.documents
            written = await write_files(output_dir, documents)
            _LOGGER.debug("Wrote %d files to %s", len(written), output_dir)
            with open(output_file, "w") as file:
                for filename in written:
                    print(f"wrote {filename}", file=file)
            return
        with open(output_file, "w") as file:
            write_stream(result.manifest, selected, file=file)
