"""Page generation command line entry point.

Converts every Markdown document under the source directory into a
routable page artifact and writes the generated index. Options come from
``MDPAGES_*`` environment variables (optionally a ``.env`` file) and are
overridden by command line flags. A summary table is printed when the run
finishes.

Exit codes: ``0`` when the run completed (per-file errors included), ``2``
for invalid configuration and ``1`` when the output directory or index
cannot be written.

Examples
--------
::

    mdpages-generate --source docs --output site/Pages/Generated --base-route /docs
    python -m mdpages.program_generate_pages --list-routes --output site/Pages/Generated
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mdpages.exceptions import ConfigurationError, OutputDirectoryError
from mdpages.pipeline.page_generator.models import (
    ERROR_KIND_SKIPPED,
    GenerationSummary,
)
from mdpages.pipeline.page_generator.options import GenerationOptions
from mdpages.pipeline.page_generator.page_discovery import (
    GeneratedPageDiscoveryService,
)
from mdpages.pipeline.page_generator.runner import configure_logging, run_from_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_CONFIG_ERROR = 2

console = Console()


def setup_logging(log_level: str = "INFO", enable_file: bool = True) -> None:
    configure_logging(log_level, enable_file=enable_file)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser; unset flags defer to the environment."""
    parser = argparse.ArgumentParser(
        description="Generate routable pages from a directory of Markdown files."
    )
    parser.add_argument("--source", dest="source_directory", default=None)
    parser.add_argument("--output", dest="output_directory", default=None)
    parser.add_argument("--pattern", dest="file_pattern", default=None)
    parser.add_argument(
        "--recursive",
        dest="search_recursively",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Search subdirectories of the source directory.",
    )
    parser.add_argument(
        "--html-comments",
        dest="enable_html_comment_configuration",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Parse a leading HTML comment block as page configuration.",
    )
    parser.add_argument(
        "--yaml-frontmatter",
        dest="enable_yaml_frontmatter",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Parse YAML frontmatter as page configuration.",
    )
    parser.add_argument("--base-route", dest="base_route_path", default=None)
    parser.add_argument("--layout", dest="default_layout", default=None)
    parser.add_argument("--extension", dest="page_extension", default=None)
    parser.add_argument("--index-filename", dest="index_filename", default=None)
    parser.add_argument(
        "--precedence",
        dest="metadata_precedence",
        default=None,
        help="Comma-separated metadata sources, lowest priority first.",
    )
    parser.add_argument("--content-root", default=None)
    parser.add_argument("--env-file", default=".env")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument(
        "--list-routes",
        action="store_true",
        help="Print the routes recorded in the generated index and exit.",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> GenerationOptions:
    """Merge parsed flags over environment-derived options.

    Raises
    ------
    mdpages.exceptions.ConfigurationError
        If an environment variable holds an invalid value.
    """
    precedence = None
    if args.metadata_precedence is not None:
        precedence = tuple(
            part.strip() for part in args.metadata_precedence.split(",") if part.strip()
        )
    options = GenerationOptions.from_environment(
        args.env_file,
        source_directory=args.source_directory,
        output_directory=args.output_directory,
        file_pattern=args.file_pattern,
        search_recursively=args.search_recursively,
        enable_html_comment_configuration=args.enable_html_comment_configuration,
        enable_yaml_frontmatter=args.enable_yaml_frontmatter,
        base_route_path=args.base_route_path,
        default_layout=args.default_layout,
        page_extension=args.page_extension,
        index_filename=args.index_filename,
        metadata_precedence=precedence,
    )
    if args.content_root:
        options = options.resolve_paths(args.content_root)
    return options


def render_summary(summary: GenerationSummary) -> Table:
    """Build the end-of-run table: one row per generated or rejected file."""
    table = Table(
        title=f"Page generation: {summary.status}",
        show_header=True,
        header_style="bold blue",
    )
    table.add_column("Source", style="bold")
    table.add_column("Route")
    table.add_column("Status")
    for entry in summary.entries:
        table.add_row(escape(entry.source), escape(entry.route), "[green]generated[/green]")
    for error in summary.errors:
        colour = "yellow" if error.kind == ERROR_KIND_SKIPPED else "red"
        location = f" (line {error.line})" if error.line else ""
        table.add_row(
            escape(error.source_path),
            "",
            f"[{colour}]{error.kind}[/{colour}]: {error.code}{location}",
        )
    return table


def render_routes(service: GeneratedPageDiscoveryService) -> Table:
    table = Table(title="Generated routes", show_header=True, header_style="bold blue")
    table.add_column("Route", style="bold")
    table.add_column("Source")
    table.add_column("Title")
    for page in service.discover_pages():
        table.add_row(escape(page.route), escape(page.source), escape(page.title))
    return table


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint for page generation.

    Returns
    -------
    int
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, enable_file=not os.environ.get("DISABLE_FILE_LOGS"))

    try:
        options = options_from_args(args)
        if args.list_routes:
            options.validate()
            console.print(render_routes(GeneratedPageDiscoveryService.from_options(options)))
            return EXIT_OK
        summary = run_from_config(options)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc.message)
        console.print(f"[red]Configuration error:[/red] {escape(exc.message)}")
        return EXIT_CONFIG_ERROR
    except OutputDirectoryError as exc:
        logger.error("Generation aborted: %s", exc.message)
        console.print(f"[red]Output error:[/red] {escape(exc.message)}")
        return EXIT_IO_ERROR

    console.print(render_summary(summary))
    for warning in summary.warnings:
        console.print(f"[yellow]warning:[/yellow] {escape(warning)}")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
