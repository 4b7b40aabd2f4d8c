"""Tests for file system and HTTP content sources.

HTTP behaviour is exercised with fake sessions/responses injected in place
of ``aiohttp`` so no network access is needed.
"""

import asyncio
from pathlib import Path

import aiohttp
import pytest

from mdpages.exceptions import AppError, ContentNotFoundError
from mdpages.pipeline.page_generator import content_source as cs
from mdpages.pipeline.page_generator.content_source import (
    FileSystemContentSource,
    HttpContentSource,
)


class FakeResponse:
    def __init__(self, status: int, text: str):
        self.status = status
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, responses):
        self._responses = iter(responses)
        self.urls: list[str] = []

    def get(self, url, *args, **kwargs):
        self.urls.append(url)
        item = next(self._responses)
        if isinstance(item, BaseException):
            raise item
        return item

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def test_file_system_source_reads_utf8(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "page.md").write_bytes("\ufeffÅäö\r\nline".encode("utf-8"))
    source = FileSystemContentSource(tmp_path)
    assert source.read("sub/page.md") == "Åäö\nline"


def test_file_system_source_missing_file(tmp_path: Path) -> None:
    source = FileSystemContentSource(tmp_path)
    with pytest.raises(ContentNotFoundError) as excinfo:
        source.read("missing.md")
    assert excinfo.value.path == "missing.md"
    assert excinfo.value.code == "CONTENT_NOT_FOUND"


def test_file_system_source_directory_is_not_content(tmp_path: Path) -> None:
    (tmp_path / "dir.md").mkdir()
    with pytest.raises(ContentNotFoundError):
        FileSystemContentSource(tmp_path).read("dir.md")


@pytest.mark.parametrize(
    "path,url",
    [
        ("guide.md", "https://example.org/content/guide.md"),
        ("content/guide.md", "https://example.org/content/guide.md"),
        ("./_generated_pages.json", "https://example.org/_generated_pages.json"),
        ("/_generated_pages.json", "https://example.org/_generated_pages.json"),
        ("https://cdn.example.org/x.md", "https://cdn.example.org/x.md"),
        ("docs\\a.md", "https://example.org/content/docs/a.md"),
    ],
)
def test_url_mapping(path: str, url: str) -> None:
    assert HttpContentSource("https://example.org/").url_for(path) == url


def test_url_mapping_without_prefix() -> None:
    src = HttpContentSource("https://example.org", content_prefix="")
    assert src.url_for("guide.md") == "https://example.org/guide.md"


@pytest.mark.asyncio
async def test_fetch_success_is_cached() -> None:
    src = HttpContentSource("https://example.org")
    session = FakeSession([FakeResponse(200, "# Hello")])
    assert await src.fetch(session, "hello.md") == "# Hello"
    assert await src.fetch(session, "hello.md") == "# Hello"
    assert session.urls == ["https://example.org/content/hello.md"]
    assert src.cached("hello.md") == "# Hello"


@pytest.mark.asyncio
async def test_fetch_empty_body_is_not_cached() -> None:
    src = HttpContentSource("https://example.org")
    session = FakeSession([FakeResponse(200, ""), FakeResponse(200, "later")])
    assert await src.fetch(session, "e.md") == ""
    assert await src.fetch(session, "e.md") == "later"


@pytest.mark.asyncio
async def test_fetch_http_error_status() -> None:
    src = HttpContentSource("https://example.org")
    session = FakeSession([FakeResponse(404, "not found")])
    with pytest.raises(ContentNotFoundError) as excinfo:
        await src.fetch(session, "missing.md")
    assert excinfo.value.context["status_code"] == 404
    assert src.cached("missing.md") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc", [aiohttp.ClientConnectionError("down"), asyncio.TimeoutError()]
)
async def test_fetch_transport_errors(exc) -> None:
    src = HttpContentSource("https://example.org")
    with pytest.raises(ContentNotFoundError) as excinfo:
        await src.fetch(FakeSession([exc]), "x.md")
    assert excinfo.value.context["url"] == "https://example.org/content/x.md"


def test_blocking_read_uses_own_session(monkeypatch) -> None:
    session = FakeSession([FakeResponse(200, "body")])
    monkeypatch.setattr(cs.aiohttp, "ClientSession", lambda *a, **k: session)
    src = HttpContentSource("https://example.org")
    assert src.read("page.md") == "body"
    # Served from the cache; the fake session has no responses left.
    assert src.read("page.md") == "body"


@pytest.mark.asyncio
async def test_blocking_read_inside_event_loop_is_rejected() -> None:
    src = HttpContentSource("https://example.org")
    with pytest.raises(AppError) as excinfo:
        src.read("page.md")
    assert excinfo.value.code == "EVENT_LOOP_RUNNING"
    assert excinfo.value.context == {"path": "page.md"}


@pytest.mark.asyncio
async def test_blocking_read_inside_event_loop_serves_cache() -> None:
    src = HttpContentSource("https://example.org")
    await src.fetch(FakeSession([FakeResponse(200, "cached")]), "page.md")
    assert src.read("page.md") == "cached"
