"""Tests for the PageGenerator orchestration and per-document preparation."""

import json
from pathlib import Path

import pytest

from mdpages.exceptions import ConfigurationError, OutputDirectoryError
from mdpages.pipeline.page_generator.generator import PageGenerator, prepare_page
from mdpages.pipeline.page_generator.options import GenerationOptions


def _options(tmp_path: Path, **kwargs) -> GenerationOptions:
    return GenerationOptions(
        source_directory=tmp_path / "src", output_directory=tmp_path / "out", **kwargs
    )


def _index(tmp_path: Path) -> dict:
    return json.loads((tmp_path / "out" / "_generated_pages.json").read_text(encoding="utf-8"))


def test_prepare_page_title_fallbacks() -> None:
    opts = GenerationOptions()
    assert prepare_page("x.md", "---\ntitle: Meta\n---\n# Heading\n", opts).title == "Meta"
    assert prepare_page("x.md", "# Heading\n", opts).title == "Heading"
    assert prepare_page("my_file.md", "text", opts).title == "My File"
    assert prepare_page("___.md", "text", opts).title == "___"


def test_prepare_page_applies_default_layout_and_prefix() -> None:
    opts = GenerationOptions(default_layout="DocsLayout", base_route_path="docs")
    page = prepare_page("guides\\Intro.md", "Body", opts)
    assert page.source_path == "guides/Intro.md"
    assert page.output_path == "guides/Intro.razor"
    assert page.route == "/docs/intro"
    assert page.layout == "DocsLayout"
    override = prepare_page("x.md", "<!-- layout: Other -->\n", opts)
    assert override.layout == "Other"


def test_run_generates_pages_and_index(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "index.md", "# Home\n\nWelcome.\n")
    write_doc(
        tmp_path / "src",
        "guides/Getting_Started.md",
        "---\ntitle: Start Here\ntags: [intro]\ndescription: First steps\n---\nSome @text.\n",
    )
    summary = PageGenerator(_options(tmp_path)).run()

    assert summary.status == "completed"
    assert summary.succeeded == ["guides/Getting_Started.md", "index.md"]
    assert summary.failed == [] and summary.skipped == []

    page = (tmp_path / "out" / "guides" / "Getting_Started.razor").read_text(encoding="utf-8")
    assert page.startswith('@page "/getting-started"\n')
    assert "<PageTitle>Start Here</PageTitle>" in page
    assert '<meta name="description" content="First steps" />' in page
    assert "Some @@text." in page
    assert '<span class="tag">intro</span>' in page

    home = (tmp_path / "out" / "index.razor").read_text(encoding="utf-8")
    assert home.startswith('@page "/"\n')

    index = _index(tmp_path)
    assert [p["route"] for p in index["pages"]] == ["/getting-started", "/"]
    assert index["pages"][0]["tags"] == ["intro"]
    assert index["pages"][0]["output"] == "guides/Getting_Started.razor"


def test_defaults_only_document(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "plain.md", "Nothing special here.\n")
    summary = PageGenerator(_options(tmp_path)).run()
    entry = summary.entries[0]
    assert entry.route == "/plain"
    assert entry.title == "Plain"
    assert entry.show_title is True
    assert entry.tags == ()
    assert entry.layout is None


def test_route_collision_keeps_first_and_skips_second(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "a/intro.md", "A")
    write_doc(tmp_path / "src", "b/intro.md", "B")
    summary = PageGenerator(_options(tmp_path)).run()

    assert summary.status == "completed_with_errors"
    assert summary.succeeded == ["a/intro.md"]
    assert len(summary.skipped) == 1
    skipped = summary.skipped[0]
    assert skipped.source_path == "b/intro.md"
    assert skipped.code == "ROUTE_COLLISION_ERROR"
    artifacts = sorted(p.relative_to(tmp_path / "out").as_posix() for p in (tmp_path / "out").rglob("*.razor"))
    assert artifacts == ["a/intro.razor"]
    assert [p["route"] for p in _index(tmp_path)["pages"]].count("/intro") == 1


def test_explicit_route_collides_with_derived_route(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "about.md", "About")
    write_doc(tmp_path / "src", "zz.md", "---\nroute: /about\n---\nDuplicate")
    summary = PageGenerator(_options(tmp_path)).run()
    assert summary.succeeded == ["about.md"]
    assert summary.skipped[0].source_path == "zz.md"


def test_rerun_is_byte_identical(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "index.md", "---\ntags: [a, b]\n---\n# Home\n")
    write_doc(tmp_path / "src", "docs/page.md", "<!-- title: P -->\n| a |\n|---|\n| 1 |\n")
    opts = _options(tmp_path)
    PageGenerator(opts).run()
    first = {p: p.read_bytes() for p in (tmp_path / "out").rglob("*") if p.is_file()}
    PageGenerator(opts).run()
    second = {p: p.read_bytes() for p in (tmp_path / "out").rglob("*") if p.is_file()}
    assert first == second


def test_rerun_with_email_autolink_is_byte_identical(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "contact.md", "Mail <support@example.com> for help.\n")
    opts = _options(tmp_path)
    PageGenerator(opts).run()
    first = (tmp_path / "out" / "contact.razor").read_bytes()
    PageGenerator(opts).run()
    assert (tmp_path / "out" / "contact.razor").read_bytes() == first
    assert b"mailto:support@@example.com" in first


def test_route_with_quote_is_rejected_per_file(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "good.md", "Fine")
    write_doc(tmp_path / "src", "quoted.md", "---\nroute: '/say-\"hi\"'\n---\nBody\n")
    summary = PageGenerator(_options(tmp_path)).run()

    assert summary.succeeded == ["good.md"]
    assert [e.source_path for e in summary.failed] == ["quoted.md"]
    assert summary.failed[0].code == "CONFIGURATION_PARSE_ERROR"
    assert not (tmp_path / "out" / "quoted.razor").exists()


def test_missing_source_directory_produces_empty_index(tmp_path: Path) -> None:
    summary = PageGenerator(_options(tmp_path)).run()
    assert summary.status == "completed"
    assert summary.discovered == 0
    assert _index(tmp_path) == {"version": 1, "pages": []}


def test_one_malformed_file_among_ten(tmp_path: Path, write_doc) -> None:
    for i in range(9):
        write_doc(tmp_path / "src", f"page{i}.md", f"# Page {i}\n")
    write_doc(tmp_path / "src", "page9.md", "---\ntitle: [unclosed\n---\nBody\n")
    summary = PageGenerator(_options(tmp_path)).run()

    assert len(summary.succeeded) == 9
    assert len(summary.failed) == 1
    failure = summary.failed[0]
    assert failure.source_path == "page9.md"
    assert failure.code == "CONFIGURATION_PARSE_ERROR"
    assert failure.line is not None
    assert summary.status == "completed_with_errors"
    assert len(_index(tmp_path)["pages"]) == 9


def test_invalid_options_abort_before_writing(tmp_path: Path) -> None:
    opts = _options(
        tmp_path, enable_html_comment_configuration=False, enable_yaml_frontmatter=False
    )
    with pytest.raises(ConfigurationError):
        PageGenerator(opts).run()
    assert not (tmp_path / "out").exists()


def test_output_path_that_is_a_file_is_fatal(tmp_path: Path) -> None:
    (tmp_path / "out").write_text("not a directory", encoding="utf-8")
    with pytest.raises(OutputDirectoryError):
        PageGenerator(_options(tmp_path)).run()


def test_converter_failure_is_recorded(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "good.md", "ok")
    write_doc(tmp_path / "src", "bad.md", "explode")

    def converter(text: str) -> str:
        if "explode" in text:
            raise RuntimeError("boom")
        return "<p>ok</p>"

    summary = PageGenerator(_options(tmp_path), converter=converter).run()
    assert summary.succeeded == ["good.md"]
    assert summary.failed[0].code == "RUNTIMEERROR"
    assert not (tmp_path / "out" / "bad.razor").exists()


def test_write_failure_releases_route(tmp_path: Path, write_doc, monkeypatch) -> None:
    from mdpages.pipeline.page_generator import generator as gen

    write_doc(tmp_path / "src", "a/same.md", "first")
    write_doc(tmp_path / "src", "b/same.md", "second")
    real_write = gen.write_text_output

    def flaky_write(content: str, output_file: Path) -> None:
        if output_file.parent.name == "a":
            raise PermissionError("read-only")
        real_write(content, output_file)

    monkeypatch.setattr(gen, "write_text_output", flaky_write)
    summary = PageGenerator(_options(tmp_path)).run()
    assert [e.source_path for e in summary.failed] == ["a/same.md"]
    assert summary.succeeded == ["b/same.md"]


def test_warnings_are_collected(tmp_path: Path, write_doc) -> None:
    write_doc(tmp_path / "src", "w.md", "---\nshowTitle: sometimes\n---\nBody")
    summary = PageGenerator(_options(tmp_path)).run()
    assert summary.status == "completed"
    assert len(summary.warnings) == 1
    assert summary.to_dict()["warnings"] == summary.warnings
