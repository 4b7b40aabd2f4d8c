"""Generation options for the page generator.

This module provides ``GenerationOptions``, the typed record of everything a
generation run needs to know: where Markdown sources live, where generated
pages go, how files are matched, which metadata mechanisms are enabled and
how routes are prefixed. Options are validated once at the start of a run.

Options may be built directly, or loaded from ``MDPAGES_*`` environment
variables and an optional ``.env`` file.

Examples
--------
>>> from mdpages.pipeline.page_generator.options import GenerationOptions
>>> opts = GenerationOptions(source_directory="docs", output_directory="out")
>>> opts.validate()
>>> opts.file_pattern
'*.md'
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from mdpages.config import (
    DEFAULT_FILE_PATTERN,
    DEFAULT_METADATA_PRECEDENCE,
    DEFAULT_OUTPUT_DIRECTORY,
    DEFAULT_PAGE_EXTENSION,
    DEFAULT_SOURCE_DIRECTORY,
    ENV_PREFIX,
    GENERATED_INDEX_FILENAME,
)
from mdpages.exceptions import ConfigurationError

_TRUE_VALUES = frozenset({"true", "yes", "1", "on"})
_FALSE_VALUES = frozenset({"false", "no", "0", "off"})


def parse_bool(value: str) -> bool:
    """Parse a case-insensitive boolean string.

    Raises
    ------
    ValueError
        If ``value`` is not a recognised boolean spelling.
    """
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean value: {value!r}")


@dataclass(frozen=True)
class GenerationOptions:
    r"""Options controlling one generation run.

    Attributes
    ----------
    source_directory : str | Path
        Directory containing the Markdown sources.
    output_directory : str | Path
        Directory receiving generated page artifacts and the index.
    file_pattern : str
        Glob pattern matched against file names.
    search_recursively : bool
        Whether subdirectories of the source directory are searched.
    enable_html_comment_configuration : bool
        Whether a leading HTML comment block is parsed as configuration.
    enable_yaml_frontmatter : bool
        Whether YAML frontmatter is parsed as configuration.
    base_route_path : str | None
        Prefix prepended to every route (e.g. ``"/docs"``).
    default_layout : str | None
        Layout used when a document does not name one.
    page_extension : str
        Extension of generated page artifacts.
    index_filename : str
        Name of the generated index inside the output directory.
    metadata_precedence : tuple[str, ...]
        Metadata sources in fold order; later sources win per field.
    """

    source_directory: str | Path = DEFAULT_SOURCE_DIRECTORY
    output_directory: str | Path = DEFAULT_OUTPUT_DIRECTORY
    file_pattern: str = DEFAULT_FILE_PATTERN
    search_recursively: bool = True
    enable_html_comment_configuration: bool = True
    enable_yaml_frontmatter: bool = True
    base_route_path: str | None = None
    default_layout: str | None = None
    page_extension: str = DEFAULT_PAGE_EXTENSION
    index_filename: str = GENERATED_INDEX_FILENAME
    metadata_precedence: tuple[str, ...] = DEFAULT_METADATA_PRECEDENCE

    @property
    def source_path(self) -> Path:
        return Path(self.source_directory)

    @property
    def output_path(self) -> Path:
        return Path(self.output_directory)

    @property
    def index_path(self) -> Path:
        return self.output_path / self.index_filename

    def validate(self) -> None:
        """Check the options for invalid or contradictory settings.

        Raises
        ------
        mdpages.exceptions.ConfigurationError
            If a required path or pattern is empty, both metadata mechanisms
            are disabled, the precedence list is invalid, the page extension
            is malformed or the base route contains a quote or line break.
        """
        if not str(self.source_directory).strip():
            raise ConfigurationError("source_directory cannot be empty.")
        if not str(self.output_directory).strip():
            raise ConfigurationError("output_directory cannot be empty.")
        if not self.file_pattern or not self.file_pattern.strip():
            raise ConfigurationError("file_pattern cannot be empty.")
        if (
            not self.enable_html_comment_configuration
            and not self.enable_yaml_frontmatter
        ):
            raise ConfigurationError(
                "At least one configuration method (HTML comments or YAML "
                "frontmatter) must be enabled."
            )
        unknown = [
            name
            for name in self.metadata_precedence
            if name not in DEFAULT_METADATA_PRECEDENCE
        ]
        if unknown:
            raise ConfigurationError(
                f"Unknown metadata sources in precedence: {', '.join(unknown)}",
                context={"metadata_precedence": list(self.metadata_precedence)},
            )
        if len(set(self.metadata_precedence)) != len(self.metadata_precedence):
            raise ConfigurationError(
                "metadata_precedence lists a source more than once.",
                context={"metadata_precedence": list(self.metadata_precedence)},
            )
        if not self.page_extension.startswith(".") or len(self.page_extension) < 2:
            raise ConfigurationError(
                f"page_extension must start with '.', got {self.page_extension!r}"
            )
        if self.base_route_path and any(ch in self.base_route_path for ch in '"\r\n'):
            raise ConfigurationError(
                f"base_route_path cannot contain quotes or line breaks: "
                f"{self.base_route_path!r}"
            )

    def resolve_paths(self, content_root: str | Path) -> GenerationOptions:
        """Return a copy with relative directories anchored at ``content_root``."""
        root = Path(content_root)

        def _absolute(value: str | Path) -> Path:
            path = Path(value)
            return path if path.is_absolute() else (root / path).resolve()

        return dataclasses.replace(
            self,
            source_directory=_absolute(self.source_directory),
            output_directory=_absolute(self.output_directory),
        )

    @classmethod
    def from_environment(
        cls, env_file: str | Path | None = None, **overrides: Any
    ) -> GenerationOptions:
        r"""Build options from ``MDPAGES_*`` environment variables.

        When ``env_file`` exists it is loaded first with ``python-dotenv``
        without overriding variables already set in the process. Keyword
        overrides whose value is not ``None`` take precedence over the
        environment.

        Parameters
        ----------
        env_file : str | Path | None, optional
            Optional ``.env`` file to load.
        **overrides : Any
            Field values that win over the environment.

        Returns
        -------
        GenerationOptions
            The options (not yet validated).

        Raises
        ------
        mdpages.exceptions.ConfigurationError
            If a boolean variable holds an unrecognised value.

        Examples
        --------
        >>> import os
        >>> os.environ["MDPAGES_BASE_ROUTE_PATH"] = "/docs"
        >>> GenerationOptions.from_environment().base_route_path
        '/docs'
        """
        if env_file is not None and Path(env_file).exists():
            load_dotenv(env_file, override=False)

        values: dict[str, Any] = {}
        for field in dataclasses.fields(cls):
            raw = os.getenv(f"{ENV_PREFIX}{field.name.upper()}")
            if raw is None:
                continue
            if field.name in (
                "search_recursively",
                "enable_html_comment_configuration",
                "enable_yaml_frontmatter",
            ):
                try:
                    values[field.name] = parse_bool(raw)
                except ValueError as exc:
                    raise ConfigurationError(
                        str(exc), context={"variable": f"{ENV_PREFIX}{field.name.upper()}"}
                    ) from exc
            elif field.name == "metadata_precedence":
                values[field.name] = tuple(
                    part.strip() for part in raw.split(",") if part.strip()
                )
            else:
                values[field.name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
