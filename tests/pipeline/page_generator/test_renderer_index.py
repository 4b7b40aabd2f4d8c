"""Tests for page artifact rendering and the generated index format."""

import json
from pathlib import Path

import pytest

from mdpages.pipeline.page_generator.index import read_index, serialize_index, write_index
from mdpages.pipeline.page_generator.models import GeneratedIndexEntry, PageRecord
from mdpages.pipeline.page_generator.renderer import (
    escape_razor,
    render_page_artifact,
    write_text_output,
)


def _page(**overrides) -> PageRecord:
    values = dict(source_path="guide.md", output_path="guide.razor", route="/guide", title="Guide")
    values.update(overrides)
    return PageRecord(**values)


def test_minimal_artifact_layout() -> None:
    text = render_page_artifact(_page(), "<p>Body</p>")
    lines = text.splitlines()
    assert lines[0] == '@page "/guide"'
    assert "@layout" not in text
    assert "auto-generated from guide.md" in text
    assert "<PageTitle>Guide</PageTitle>" in text
    assert "<HeadContent>" not in text
    assert "<h1>Guide</h1>" in text
    assert '<div class="markdown-body">\n<p>Body</p>\n</div>' in text
    assert "page-tags" not in text
    assert text.endswith("</div>\n")


def test_full_artifact() -> None:
    page = _page(
        layout="DocsLayout",
        description='Say "hi" & <wave>',
        show_title=False,
        tags=("a", "b<c"),
    )
    text = render_page_artifact(page, "")
    assert text.splitlines()[1] == "@layout DocsLayout"
    assert 'content="Say &quot;hi&quot; &amp; &lt;wave&gt;"' in text
    assert "<h1>" not in text
    assert '<div class="markdown-body">\n</div>' in text
    assert '<span class="tag">a</span>' in text
    assert '<span class="tag">b&lt;c</span>' in text


def test_razor_at_signs_are_escaped() -> None:
    assert escape_razor("a@b @@") == "a@@b @@@@"
    text = render_page_artifact(_page(title="Mail @home"), "<p>x@y</p>")
    assert "<PageTitle>Mail @@home</PageTitle>" in text
    assert "<p>x@@y</p>" in text


def test_write_text_output_creates_parents_with_lf(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "page.razor"
    write_text_output("one\ntwo\n", target)
    assert target.read_bytes() == b"one\ntwo\n"


def test_write_text_output_propagates_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(OSError):
        write_text_output("x", blocker / "child.razor")


def test_index_serialization_shape(tmp_path: Path) -> None:
    entries = [
        GeneratedIndexEntry(source="index.md", route="/", output="index.razor", title="Home"),
        GeneratedIndexEntry(
            source="ü.md", route="/ü", output="ü.razor", title="Ü", show_title=False, tags=("x",)
        ),
    ]
    text = serialize_index(entries)
    assert text.endswith("\n")
    assert "ü" in text
    data = json.loads(text)
    assert data["version"] == 1
    assert data["pages"][1] == {
        "source": "ü.md",
        "route": "/ü",
        "output": "ü.razor",
        "title": "Ü",
        "description": None,
        "layout": None,
        "showTitle": False,
        "tags": ["x"],
    }
    path = tmp_path / "_generated_pages.json"
    write_index(entries, path)
    assert read_index(path.read_text(encoding="utf-8")) == entries


@pytest.mark.parametrize(
    "text",
    ["not json", "[]", '{"pages": {}}', '{"pages": [1]}', '{"pages": [{"route": "/"}]}'],
)
def test_read_index_rejects_bad_shapes(text: str) -> None:
    with pytest.raises(ValueError):
        read_index(text)
