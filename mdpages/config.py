"""Global configuration constants for the project.

Defines default paths, filenames and conversion settings used across the
page generation pipeline and its command line entrypoint.
"""

from __future__ import annotations

from pathlib import Path

# Project directories
PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
LOG_DIR: Path = PROJECT_ROOT / "logs"

# Generation defaults
DEFAULT_SOURCE_DIRECTORY: str = "MDFilesToConvert"
DEFAULT_OUTPUT_DIRECTORY: str = "Pages/Generated"
DEFAULT_FILE_PATTERN: str = "*.md"
DEFAULT_PAGE_EXTENSION: str = ".razor"
GENERATED_INDEX_FILENAME: str = "_generated_pages.json"

# Metadata sources, folded left to right (later sources win per field)
METADATA_SOURCE_HTML_COMMENT: str = "html_comment"
METADATA_SOURCE_YAML_FRONTMATTER: str = "yaml_frontmatter"
DEFAULT_METADATA_PRECEDENCE: tuple[str, ...] = (
    METADATA_SOURCE_HTML_COMMENT,
    METADATA_SOURCE_YAML_FRONTMATTER,
)
HTML_COMMENT_CONFIG_MARKER: str = "This is configuration data"

# Markdown conversion
MARKDOWN_EXTRAS: list[str] = [
    "tables",
    "fenced-code-blocks",
    "highlightjs-lang",
    "task_list",
    "footnotes",
    "strike",
    "cuddled-lists",
]

# Runtime content fetching
DEFAULT_CONTENT_PREFIX: str = "content"
DEFAULT_HTTP_TIMEOUT: int = 30

# Environment configuration
ENV_PREFIX: str = "MDPAGES_"

# CLI defaults and logging
LOG_FILENAME_GENERATE_PAGES: str = "generate_pages.log"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
