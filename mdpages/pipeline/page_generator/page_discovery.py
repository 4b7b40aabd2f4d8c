"""Discovery of generated pages at runtime.

A host reads the generated index back through a ``ContentSource`` to learn
which pages exist and under which route, without scanning Markdown sources.
``compute_route_table`` answers the same question from the sources and the
options alone, using the generator's own per-document resolution, so both
paths agree for the same inputs.

Examples
--------
>>> from mdpages.pipeline.page_generator.content_source import FileSystemContentSource
>>> service = GeneratedPageDiscoveryService(
...     FileSystemContentSource("Pages/Generated"))  # doctest: +SKIP
>>> service.discover_routes()  # doctest: +SKIP
{'index.md': '/', 'getting-started.md': '/getting-started'}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mdpages.config import GENERATED_INDEX_FILENAME
from mdpages.exceptions import (
    ConfigurationParseError,
    ContentNotFoundError,
    RouteCollisionError,
)

from .content_source import ContentSource, FileSystemContentSource
from .discovery import discover_markdown_files
from .generator import prepare_page
from .index import read_index
from .models import GeneratedIndexEntry
from .options import GenerationOptions
from .routing import RouteTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedPageInfo:
    """What a host needs to list or link a generated page."""

    source: str
    route: str
    title: str
    description: str | None = None
    layout: str | None = None
    show_title: bool = True
    tags: tuple[str, ...] = ()

    @classmethod
    def from_entry(cls, entry: GeneratedIndexEntry) -> GeneratedPageInfo:
        return cls(
            source=entry.source,
            route=entry.route,
            title=entry.title,
            description=entry.description,
            layout=entry.layout,
            show_title=entry.show_title,
            tags=entry.tags,
        )


class GeneratedPageDiscoveryService:
    r"""Read-only view over the generated index.

    Parameters
    ----------
    content_source : ContentSource
        Where the index is read from (file system or HTTP).
    index_path : str, optional
        Path of the index within ``content_source``.

    Notes
    -----
    A missing index means nothing has been generated yet and yields empty
    results. An index that cannot be parsed also yields empty results and
    is logged as a warning. The index is read on every call; callers that
    need caching use an ``HttpContentSource``, which caches per instance.
    """

    def __init__(
        self,
        content_source: ContentSource,
        index_path: str = GENERATED_INDEX_FILENAME,
    ) -> None:
        self.content_source = content_source
        self.index_path = index_path

    @classmethod
    def from_options(cls, options: GenerationOptions) -> GeneratedPageDiscoveryService:
        """Service reading the index a generator with ``options`` writes."""
        return cls(FileSystemContentSource(options.output_path), options.index_filename)

    def _load_entries(self) -> list[GeneratedIndexEntry]:
        try:
            text = self.content_source.read(self.index_path)
        except ContentNotFoundError:
            logger.debug("No generated index at %s", self.index_path)
            return []
        try:
            return read_index(text)
        except ValueError as exc:
            logger.warning("Ignoring invalid generated index %s: %s", self.index_path, exc)
            return []

    def discover_routes(self) -> dict[str, str]:
        """Return ``{source_path: route}`` in index order."""
        return {entry.source: entry.route for entry in self._load_entries()}

    def discover_pages(self) -> list[GeneratedPageInfo]:
        return [GeneratedPageInfo.from_entry(entry) for entry in self._load_entries()]

    def get_page_info(self, source_path: str) -> GeneratedPageInfo | None:
        """Return the page generated from ``source_path``, or ``None``."""
        wanted = source_path.replace("\\", "/")
        for page in self.discover_pages():
            if page.source == wanted:
                return page
        return None

    def get_pages_by_tags(self) -> dict[str, list[GeneratedPageInfo]]:
        """Group pages by tag; tags appear in first-seen order."""
        grouped: dict[str, list[GeneratedPageInfo]] = {}
        for page in self.discover_pages():
            for tag in page.tags:
                grouped.setdefault(tag, []).append(page)
        return grouped


def compute_route_table(
    options: GenerationOptions, content_source: ContentSource | None = None
) -> dict[str, str]:
    """Recompute ``{source_path: route}`` from the sources without generating.

    Files that cannot be read or parsed are left out, and of two files
    claiming the same route only the first in discovery order is kept,
    exactly as a generation run would do.

    Raises
    ------
    mdpages.exceptions.ConfigurationError
        If ``options`` are invalid.
    """
    options.validate()
    source = content_source or FileSystemContentSource(options.source_path)
    routes = RouteTable()
    for relative_path in discover_markdown_files(
        options.source_path, options.file_pattern, options.search_recursively
    ):
        try:
            page = prepare_page(relative_path, source.read(relative_path), options)
            routes.assign(page.source_path, page.route)
        except (
            ContentNotFoundError,
            ConfigurationParseError,
            RouteCollisionError,
            OSError,
            UnicodeDecodeError,
        ) as exc:
            logger.debug("Leaving %s out of the route table: %s", relative_path, exc)
    return routes.as_dict()
