"""Page generation orchestration.

``PageGenerator.run`` performs one generation pass:

1. Init: validate options and make sure the output directory exists.
2. Discover: list source files in deterministic order.
3. For each file: read, parse metadata, derive the route, check it against
   the routes assigned so far, convert the body and write the artifact.
4. Finalize: write the generated index and return a ``GenerationSummary``.

Per-file problems (unreadable file, malformed configuration, route
collision, conversion or write failure) are recorded and the batch goes on.
Invalid options and an unusable output directory abort the run.

Examples
--------
>>> from mdpages.pipeline.page_generator.generator import PageGenerator
>>> from mdpages.pipeline.page_generator.options import GenerationOptions
>>> summary = PageGenerator(GenerationOptions("docs", "out")).run()  # doctest: +SKIP
>>> summary.status  # doctest: +SKIP
'completed'
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from mdpages.exceptions import (
    ConfigurationParseError,
    ContentNotFoundError,
    OutputDirectoryError,
    RouteCollisionError,
)

from .content_source import ContentSource, FileSystemContentSource
from .converter import convert_markdown, first_heading
from .discovery import discover_markdown_files
from .index import write_index
from .metadata import parse_page_metadata
from .models import (
    ERROR_KIND_FAILED,
    ERROR_KIND_SKIPPED,
    FileError,
    GeneratedIndexEntry,
    GenerationSummary,
    PageRecord,
)
from .options import GenerationOptions
from .renderer import render_page_artifact, write_text_output
from .routing import (
    RouteTable,
    derive_route,
    output_path_for,
    title_from_filename,
    to_posix,
)

logger = logging.getLogger(__name__)


def prepare_page(
    relative_path: str, text: str, options: GenerationOptions
) -> PageRecord:
    r"""Resolve metadata, route, title and output path for one document.

    Used by both the generator and route recomputation so the two always
    agree.

    Parameters
    ----------
    relative_path : str
        Document path relative to the source directory.
    text : str
        Raw document text.
    options : GenerationOptions
        Active options.

    Returns
    -------
    PageRecord
        The resolved page. The title falls back to the first level-1
        heading of the body, then to a title built from the file name.

    Raises
    ------
    mdpages.exceptions.ConfigurationParseError
        If the document's configuration cannot be parsed.

    Examples
    --------
    >>> from mdpages.pipeline.page_generator.options import GenerationOptions
    >>> page = prepare_page("getting_started.md", "Text\n", GenerationOptions())
    >>> page.route, page.title, page.output_path
    ('/getting-started', 'Getting Started', 'getting_started.razor')
    """
    source_path = to_posix(relative_path).as_posix()
    parsed = parse_page_metadata(text, options, source_path)
    metadata = parsed.metadata
    stem = to_posix(source_path).stem
    title = (
        metadata.title
        or first_heading(parsed.body)
        or title_from_filename(stem)
        or stem
    )
    return PageRecord(
        source_path=source_path,
        output_path=output_path_for(source_path, options.page_extension).as_posix(),
        route=derive_route(source_path, metadata, options.base_route_path),
        title=title,
        description=metadata.description,
        layout=metadata.layout or options.default_layout,
        show_title=metadata.show_title,
        tags=metadata.tags,
        markdown_body=parsed.body,
        warnings=parsed.warnings,
    )


class PageGenerator:
    r"""Generate one page artifact per Markdown source plus a discovery index.

    Parameters
    ----------
    options : GenerationOptions
        Source/output directories and parsing options.
    content_source : ContentSource | None, optional
        Where document text is read from. Defaults to the file system
        rooted at ``options.source_directory``.
    converter : Callable[[str], str], optional
        Markdown to HTML conversion function.

    Notes
    -----
    The generator is the only writer to the output directory during a run.
    Generated files are overwritten in place; stale artifacts from earlier
    runs are not removed.
    """

    def __init__(
        self,
        options: GenerationOptions,
        content_source: ContentSource | None = None,
        converter: Callable[[str], str] = convert_markdown,
    ) -> None:
        self.options = options
        self.content_source = content_source or FileSystemContentSource(
            options.source_path
        )
        self.converter = converter

    def run(self) -> GenerationSummary:
        """Run a full generation pass.

        Returns
        -------
        GenerationSummary
            Generated entries, per-file errors and warnings.

        Raises
        ------
        mdpages.exceptions.ConfigurationError
            If the options are invalid; nothing is written.
        mdpages.exceptions.OutputDirectoryError
            If the output directory or the index cannot be written.
        """
        self._initialize()
        sources = discover_markdown_files(
            self.options.source_path,
            self.options.file_pattern,
            self.options.search_recursively,
        )
        logger.info("Found %d markdown files to process...", len(sources))

        summary = GenerationSummary(discovered=len(sources))
        routes = RouteTable()
        for relative_path in sources:
            self._process_file(relative_path, routes, summary)

        self._finalize(summary)
        return summary

    def _initialize(self) -> None:
        self.options.validate()
        output_dir = self.options.output_path
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputDirectoryError(
                f"Cannot create output directory {output_dir}: {exc}",
                context={"output_directory": str(output_dir)},
            ) from exc
        if not output_dir.is_dir():
            raise OutputDirectoryError(
                f"Output path is not a directory: {output_dir}",
                context={"output_directory": str(output_dir)},
            )

    def _record_error(
        self,
        summary: GenerationSummary,
        relative_path: str,
        kind: str,
        exc: BaseException,
    ) -> None:
        error = FileError.from_exception(relative_path, kind, exc)
        summary.errors.append(error)
        logger.error("Error processing %s: %s", relative_path, error.message)

    def _process_file(
        self, relative_path: str, routes: RouteTable, summary: GenerationSummary
    ) -> None:
        try:
            text = self.content_source.read(relative_path)
        except (ContentNotFoundError, OSError, UnicodeDecodeError) as exc:
            self._record_error(summary, relative_path, ERROR_KIND_FAILED, exc)
            return

        try:
            page = prepare_page(relative_path, text, self.options)
        except ConfigurationParseError as exc:
            self._record_error(summary, relative_path, ERROR_KIND_FAILED, exc)
            return
        summary.warnings.extend(page.warnings)

        try:
            routes.assign(page.source_path, page.route)
        except RouteCollisionError as exc:
            self._record_error(summary, relative_path, ERROR_KIND_SKIPPED, exc)
            return

        try:
            body_html = self.converter(page.markdown_body)
        except Exception as exc:
            logger.exception("Markdown conversion failed for %s", relative_path)
            routes.release(page.source_path)
            self._record_error(summary, relative_path, ERROR_KIND_FAILED, exc)
            return

        target = self.options.output_path / Path(page.output_path)
        try:
            write_text_output(render_page_artifact(page, body_html), target)
        except OSError as exc:
            routes.release(page.source_path)
            self._record_error(summary, relative_path, ERROR_KIND_FAILED, exc)
            return

        summary.entries.append(GeneratedIndexEntry.from_page(page))
        logger.info("Generated: %s -> %s", page.output_path, page.route)

    def _finalize(self, summary: GenerationSummary) -> None:
        index_path = self.options.index_path
        try:
            write_index(summary.entries, index_path)
        except OSError as exc:
            raise OutputDirectoryError(
                f"Cannot write generated index {index_path}: {exc}",
                context={"index_path": str(index_path)},
            ) from exc
        summary.index_path = str(index_path)
        logger.info(
            "Generation %s: %d succeeded, %d failed, %d skipped",
            summary.status,
            len(summary.entries),
            len(summary.failed),
            len(summary.skipped),
        )
