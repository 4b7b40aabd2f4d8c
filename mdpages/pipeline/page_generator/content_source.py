"""Content sources: where document and index text is read from.

The generator and the discovery service only need ``read(path) -> str``.
Build-time code reads from the file system; a runtime host that serves the
Markdown and the generated index as static assets can read them over HTTP
with ``HttpContentSource``, which keeps an in-memory cache per instance.

Examples
--------
>>> from mdpages.pipeline.page_generator.content_source import FileSystemContentSource
>>> source = FileSystemContentSource("docs")
>>> source.read("missing.md")  # doctest: +SKIP
Traceback (most recent call last):
mdpages.exceptions.ContentNotFoundError: CONTENT_NOT_FOUND: Content not found: missing.md
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import aiohttp

from mdpages.config import DEFAULT_CONTENT_PREFIX, DEFAULT_HTTP_TIMEOUT
from mdpages.exceptions import AppError, ContentNotFoundError

logger = logging.getLogger(__name__)


class ContentSource(ABC):
    """Read-only access to text content addressed by path."""

    @abstractmethod
    def read(self, path: str) -> str:
        """Return the text stored at ``path``.

        Raises
        ------
        mdpages.exceptions.ContentNotFoundError
            If nothing exists at ``path``.
        """


class FileSystemContentSource(ContentSource):
    """Read UTF-8 text files relative to a root directory.

    Line endings are normalized to ``\\n`` and a leading byte-order mark is
    dropped. Missing files raise ``ContentNotFoundError``; other ``OSError``
    failures propagate to the caller.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def read(self, path: str) -> str:
        candidate = Path(path)
        target = candidate if candidate.is_absolute() else self.root / candidate
        try:
            with target.open("r", encoding="utf-8-sig") as fh:
                return fh.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise ContentNotFoundError(
                str(path), context={"resolved_path": str(target)}
            ) from exc


class HttpContentSource(ContentSource):
    r"""Fetch content over HTTP with a per-instance cache.

    Paths are mapped to URLs relative to ``base_url``:

    - absolute ``http(s)://`` URLs are used as-is;
    - paths starting with ``/`` or ``./`` are resolved against ``base_url``;
    - paths already under ``content_prefix`` are resolved against ``base_url``;
    - anything else is placed under ``content_prefix``.

    Successful non-empty responses are cached by path for the lifetime of
    the instance; there is no shared cache.

    Parameters
    ----------
    base_url : str
        Site root, e.g. ``"https://example.org"``.
    content_prefix : str, optional
        Folder under which Markdown assets are served.
    timeout : int, optional
        Total request timeout in seconds.

    Examples
    --------
    >>> src = HttpContentSource("https://example.org")
    >>> src.url_for("guide.md")
    'https://example.org/content/guide.md'
    >>> src.url_for("/_generated_pages.json")
    'https://example.org/_generated_pages.json'
    """

    def __init__(
        self,
        base_url: str,
        content_prefix: str = DEFAULT_CONTENT_PREFIX,
        timeout: int = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.content_prefix = content_prefix.strip("/")
        self.timeout = timeout
        self._cache: dict[str, str] = {}

    def url_for(self, path: str) -> str:
        """Return the URL requested for ``path``."""
        if path.startswith(("http://", "https://")):
            return path
        cleaned = path.replace("\\", "/")
        if cleaned.startswith("./"):
            return f"{self.base_url}/{cleaned[2:]}"
        if cleaned.startswith("/"):
            return f"{self.base_url}{cleaned}"
        if not self.content_prefix or cleaned.startswith(f"{self.content_prefix}/"):
            return f"{self.base_url}/{cleaned}"
        return f"{self.base_url}/{self.content_prefix}/{cleaned}"

    def cached(self, path: str) -> str | None:
        return self._cache.get(path)

    async def fetch(self, session: aiohttp.ClientSession, path: str) -> str:
        r"""Fetch ``path`` using ``session``, consulting the cache first.

        Parameters
        ----------
        session : aiohttp.ClientSession
            Session used for the request; it is not closed here.
        path : str
            Content path or absolute URL.

        Returns
        -------
        str
            Response body.

        Raises
        ------
        mdpages.exceptions.ContentNotFoundError
            On a non-2xx status, a client error or a timeout.
        """
        if path in self._cache:
            logger.debug("Cache hit for %s", path)
            return self._cache[path]

        url = self.url_for(path)
        try:
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                status = response.status
                text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ContentNotFoundError(
                path, context={"url": url, "error": str(exc)}
            ) from exc

        if not 200 <= status < 300:
            logger.debug("Failed to load %s: HTTP %s", url, status)
            raise ContentNotFoundError(path, context={"url": url, "status_code": status})
        if text:
            self._cache[path] = text
        return text

    async def read_async(self, path: str) -> str:
        """Fetch ``path`` with a short-lived session."""
        if path in self._cache:
            return self._cache[path]
        async with aiohttp.ClientSession() as session:
            return await self.fetch(session, path)

    def read(self, path: str) -> str:
        """Blocking variant of ``read_async`` for callers without an event loop.

        Code already running inside an event loop (an async web host, for
        example) must ``await read_async(path)`` or ``fetch`` instead.

        Raises
        ------
        mdpages.exceptions.ContentNotFoundError
            If the content cannot be fetched.
        mdpages.exceptions.AppError
            With code ``EVENT_LOOP_RUNNING`` when called from a running loop.
        """
        if path in self._cache:
            return self._cache[path]
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            raise AppError(
                "EVENT_LOOP_RUNNING",
                "HttpContentSource.read cannot block inside a running event loop; "
                "await read_async() instead",
                context={"path": path},
            )
        return asyncio.run(self.read_async(path))
