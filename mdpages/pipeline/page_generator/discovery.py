"""Source file discovery.

Finds Markdown sources under a directory and returns their paths relative
to it, sorted so repeated runs over the same tree see the same order.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

from mdpages.config import DEFAULT_FILE_PATTERN

logger = logging.getLogger(__name__)


def _log_walk_error(error: OSError) -> None:
    logger.warning("Skipping unreadable directory %s: %s", error.filename, error)


def discover_markdown_files(
    source_directory: str | Path,
    file_pattern: str = DEFAULT_FILE_PATTERN,
    recursive: bool = True,
) -> list[str]:
    """Find files matching ``file_pattern`` in ``source_directory``.

    Parameters
    ----------
    source_directory : str | Path
        Directory to search.
    file_pattern : str, optional
        Glob pattern matched case-insensitively against file names.
    recursive : bool, optional
        Whether to descend into subdirectories.

    Returns
    -------
    list[str]
        POSIX-style paths relative to ``source_directory``, sorted
        lexicographically. A missing directory yields an empty list and
        unreadable subdirectories are skipped.

    Examples
    --------
    >>> discover_markdown_files("/no/such/dir")
    []
    """
    root = Path(source_directory)
    if not root.is_dir():
        logger.info("Source directory does not exist: %s", root)
        return []

    pattern = file_pattern.lower()
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        if recursive:
            dirnames.sort()
        else:
            dirnames.clear()
        for name in filenames:
            if not fnmatch.fnmatchcase(name.lower(), pattern):
                continue
            full_path = Path(dirpath) / name
            if full_path.is_file():
                found.append(full_path.relative_to(root).as_posix())
    return sorted(found)
