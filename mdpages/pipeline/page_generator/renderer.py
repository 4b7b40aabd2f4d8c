"""Page artifact rendering and output helpers.

This module turns a resolved ``PageRecord`` plus its converted HTML body
into the text of a routable Razor page, and writes artifacts to disk. The
artifact carries everything the host needs to bind it to a route: the
``@page`` directive, an optional ``@layout``, the page title, an optional
description meta tag, the optional visible heading, the body and the tags.

Rendering is deterministic: no timestamps or absolute paths are embedded,
so regenerating an unchanged tree produces byte-identical files.

Example
-------
>>> from mdpages.pipeline.page_generator.models import PageRecord
>>> page = PageRecord(source_path="about.md", output_path="about.razor",
...                   route="/about", title="About")
>>> render_page_artifact(page, "<p>Hi</p>").splitlines()[0]
'@page "/about"'
"""

from __future__ import annotations

from html import escape
from pathlib import Path

from .models import PageRecord

GENERATED_NOTICE = (
    "@* This file was auto-generated from {source}. Do not edit directly. *@"
)


def escape_razor(markup: str) -> str:
    """Escape ``@`` so Razor treats it as a literal character."""
    return markup.replace("@", "@@")


def render_page_artifact(page: PageRecord, body_html: str) -> str:
    r"""Render the generated page for ``page``.

    Parameters
    ----------
    page : PageRecord
        Resolved route, title and metadata for the page.
    body_html : str
        Converted Markdown body.

    Returns
    -------
    str
        Artifact text ending with a single newline.

    Examples
    --------
    >>> from mdpages.pipeline.page_generator.models import PageRecord
    >>> page = PageRecord(source_path="a.md", output_path="a.razor", route="/a",
    ...                   title="A", show_title=False, tags=("x",))
    >>> text = render_page_artifact(page, "<p>mail me @ home</p>")
    >>> "<h1>" in text, "@@ home" in text, '<span class="tag">x</span>' in text
    (False, True, True)
    """
    lines = [f'@page "{page.route}"']
    if page.layout:
        lines.append(f"@layout {page.layout}")
    lines.append("")
    lines.append(GENERATED_NOTICE.format(source=page.source_path))
    lines.append("")
    lines.append(f"<PageTitle>{escape_razor(escape(page.title))}</PageTitle>")
    lines.append("")

    if page.description:
        description = escape_razor(escape(page.description, quote=True))
        lines.append("<HeadContent>")
        lines.append(f'    <meta name="description" content="{description}" />')
        lines.append("</HeadContent>")
        lines.append("")

    if page.show_title:
        lines.append(f"<h1>{escape_razor(escape(page.title))}</h1>")
        lines.append("")

    lines.append('<div class="markdown-body">')
    if body_html:
        lines.append(escape_razor(body_html))
    lines.append("</div>")

    if page.tags:
        lines.append("")
        lines.append('<div class="page-tags">')
        lines.append("    <strong>Tags:</strong>")
        for tag in page.tags:
            lines.append(f'    <span class="tag">{escape_razor(escape(tag))}</span>')
        lines.append("</div>")

    return "\n".join(lines) + "\n"


def write_text_output(content: str, output_file: Path) -> None:
    r"""Write ``content`` to ``output_file`` as UTF-8 with LF line endings.

    Parent directories of `output_file` are created as needed.

    Raises
    ------
    OSError
        If the directory cannot be created or the file cannot be written.

    Examples
    --------
    >>> import tempfile
    >>> from pathlib import Path
    >>> target = Path(tempfile.gettempdir()) / "mdpages_doctest" / "page.razor"
    >>> write_text_output("hello\n", target)
    >>> target.read_text(encoding="utf-8")
    'hello\n'
    """
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with output_file.open("w", encoding="utf-8", newline="\n") as fh:
        fh.write(content)
