"""Page generator pipeline.

Import surface for the page generation pipeline. All logic lives in the
submodules; this initializer only re-exports the names a build script or
web host needs.

References
----------
- ``options``: ``GenerationOptions`` and environment loading.
- ``metadata``: YAML frontmatter and HTML comment configuration parsing.
- ``routing``: Route derivation and the per-run ``RouteTable``.
- ``converter``: Markdown to HTML conversion.
- ``discovery``: Source file discovery.
- ``generator``: ``PageGenerator`` orchestration.
- ``page_discovery``: Reading the generated index back at runtime.

Usage
-----
    >>> from mdpages.pipeline.page_generator import GenerationOptions, PageGenerator
    >>> summary = PageGenerator(GenerationOptions("docs", "out")).run()  # doctest: +SKIP
"""

from .content_source import ContentSource, FileSystemContentSource, HttpContentSource
from .converter import convert_markdown
from .discovery import discover_markdown_files
from .generator import PageGenerator, prepare_page
from .metadata import PageMetadata, parse_page_metadata
from .models import GeneratedIndexEntry, GenerationSummary, PageRecord
from .options import GenerationOptions
from .page_discovery import (
    GeneratedPageDiscoveryService,
    GeneratedPageInfo,
    compute_route_table,
)
from .routing import RouteTable, derive_route
from .runner import run_from_config

__all__ = [
    "ContentSource",
    "FileSystemContentSource",
    "GeneratedIndexEntry",
    "GeneratedPageDiscoveryService",
    "GeneratedPageInfo",
    "GenerationOptions",
    "GenerationSummary",
    "HttpContentSource",
    "PageGenerator",
    "PageMetadata",
    "PageRecord",
    "RouteTable",
    "compute_route_table",
    "convert_markdown",
    "derive_route",
    "discover_markdown_files",
    "parse_page_metadata",
    "prepare_page",
    "run_from_config",
]
