"""Headless runner for page generation.

This module wires configuration loading, logging setup and the
``PageGenerator`` together for programmatic invocation (build scripts,
tests, the command line wrapper).

Usage Examples
--------------
Typical programmatic usage with environment/config defaults::

    from mdpages.pipeline.page_generator.runner import run_from_config
    summary = run_from_config()
    print(summary.status)

Explicit options::

    from mdpages.pipeline.page_generator.options import GenerationOptions
    from mdpages.pipeline.page_generator.runner import run_from_config

    run_from_config(
        GenerationOptions(source_directory="docs", output_directory="site/pages"),
        content_root="/srv/project",
    )
"""

from __future__ import annotations

import logging
from pathlib import Path

from mdpages.config import LOG_DIR, LOG_FILENAME_GENERATE_PAGES, LOG_FORMAT

from .generator import PageGenerator
from .models import GenerationSummary
from .options import GenerationOptions

logger = logging.getLogger(__name__)


def configure_logging(log_level: str = "INFO", enable_file: bool = True) -> None:
    """Configure root logging for a generation run.

    Installs a console handler and, when ``enable_file`` is true, a file
    handler writing to ``LOG_DIR / LOG_FILENAME_GENERATE_PAGES``. Existing
    root handlers are removed first so repeated calls do not duplicate
    output.

    Parameters
    ----------
    log_level : str, optional
        Level name such as ``"DEBUG"``; unknown names fall back to INFO.
    enable_file : bool, optional
        Whether to also log to a file.

    Notes
    -----
    A log directory that cannot be created only disables file logging; the
    failure is reported on the console handler.

    Examples
    --------
    >>> from mdpages.pipeline.page_generator.runner import configure_logging
    >>> configure_logging(log_level="DEBUG", enable_file=False)
    """
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    file_error: OSError | None = None
    if enable_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
            handlers.insert(
                0,
                logging.FileHandler(LOG_DIR / LOG_FILENAME_GENERATE_PAGES, mode="a"),
            )
        except OSError as exc:
            file_error = exc
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    if file_error is not None:
        logger.warning("File logging disabled: %s", file_error)


def run_from_config(
    options: GenerationOptions | None = None,
    *,
    content_root: str | Path | None = None,
    env_file: str | Path | None = None,
) -> GenerationSummary:
    """Run one generation pass and return its summary.

    Parameters
    ----------
    options : GenerationOptions | None, optional
        Options to use. If ``None``, they are loaded with
        ``GenerationOptions.from_environment(env_file)``.
    content_root : str | Path | None, optional
        Directory that relative source/output directories are anchored at.
        If ``None``, they stay relative to the working directory.
    env_file : str | Path | None, optional
        ``.env`` file consulted when ``options`` is ``None``.

    Returns
    -------
    GenerationSummary
        Result of the run; per-file failures are listed, not raised.

    Raises
    ------
    mdpages.exceptions.ConfigurationError
        If the options are invalid.
    mdpages.exceptions.OutputDirectoryError
        If the output directory or index cannot be written.
    """
    if options is None:
        options = GenerationOptions.from_environment(env_file)
    if content_root is not None:
        options = options.resolve_paths(content_root)
    logger.info(
        "Generating pages from %s into %s",
        options.source_directory,
        options.output_directory,
    )
    return PageGenerator(options).run()


__all__ = ["configure_logging", "run_from_config"]
