"""Markdown to HTML conversion.

Conversion is delegated to ``markdown2`` with the extras listed in
``mdpages.config.MARKDOWN_EXTRAS`` (tables, fenced code blocks tagged with
their language, task lists, footnotes, strikethrough). Inline HTML passes
through unchanged. The functions here are pure: they never touch the file
system and return the same markup for the same input, so the build-time
generator and a runtime renderer can share them.

Example
-------
>>> from mdpages.pipeline.page_generator.converter import convert_markdown
>>> convert_markdown("# Welcome")
'<h1>Welcome</h1>'
"""

from __future__ import annotations

import re
from html import escape

import markdown2

from mdpages.config import MARKDOWN_EXTRAS

_PRE_BLOCK_RE = re.compile(r"(<pre\b.*?</pre>)", re.DOTALL | re.IGNORECASE)
_FENCED_BLOCK_RE = re.compile(r"^(```|~~~).*?^\1[ \t]*$", re.DOTALL | re.MULTILINE)
_H1_RE = re.compile(r"^#[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
_EMAIL_EMPHASIS_CHARS = str.maketrans({"_": "&#95;", "*": "&#42;"})


class StableMarkdown(markdown2.Markdown):
    """markdown2 renderer whose email autolinks are the same on every run.

    markdown2 obfuscates ``<user@host>`` autolinks with randomly chosen
    character entities; here the address is written as a plain ``mailto:``
    link, with ``_`` and ``*`` encoded so emphasis never applies inside it.
    """

    def _encode_email_address(self, addr: str) -> str:
        address = escape(addr, quote=True).translate(_EMAIL_EMPHASIS_CHARS)
        return f'<a href="mailto:{address}">{address}</a>'


def convert_markdown(markdown_text: str, extras: list[str] | None = None) -> str:
    r"""Convert Markdown text to an embeddable HTML fragment.

    Parameters
    ----------
    markdown_text : str
        Markdown source, without frontmatter or configuration comments.
    extras : list[str] | None, optional
        ``markdown2`` extras to enable. Defaults to ``MARKDOWN_EXTRAS``.

    Returns
    -------
    str
        Cleaned HTML markup; an empty string for blank input.

    Raises
    ------
    TypeError
        If ``markdown_text`` is not a string.

    Examples
    --------
    >>> "<table>" in convert_markdown("| a | b |\n|---|---|\n| 1 | 2 |\n")
    True
    """
    if not isinstance(markdown_text, str):
        raise TypeError("Markdown input must be a string.")
    if not markdown_text.strip():
        return ""
    renderer = StableMarkdown(
        extras=list(MARKDOWN_EXTRAS if extras is None else extras)
    )
    html = renderer.convert(markdown_text)
    return clean_html_output(str(html))


def clean_html_output(html_content: str) -> str:
    r"""Remove empty paragraphs and excess blank lines from generated HTML.

    Text inside ``<pre>`` blocks is left untouched.

    Raises
    ------
    TypeError
        If input is not str.

    Examples
    --------
    >>> clean_html_output("<p></p><h1>Hi</h1>\n\n\n\n<p>&nbsp;</p>")
    '<h1>Hi</h1>'
    """
    if not isinstance(html_content, str):
        raise TypeError("Input must be a string.")
    parts = _PRE_BLOCK_RE.split(html_content)
    for i in range(0, len(parts), 2):
        part = parts[i]
        part = re.sub(r"<p>\s*</p>", "", part)
        part = re.sub(r"<p>&nbsp;</p>", "", part)
        part = re.sub(r"<p><br\s*/?>\s*</p>", "", part)
        part = re.sub(r"\n\s*\n\s*\n+", "\n\n", part)
        parts[i] = part
    return "".join(parts).strip()


def first_heading(markdown_text: str) -> str | None:
    """Return the text of the first level-1 ATX heading outside code fences."""
    without_code = _FENCED_BLOCK_RE.sub("", markdown_text)
    match = _H1_RE.search(without_code)
    return match.group(1).strip() if match else None
