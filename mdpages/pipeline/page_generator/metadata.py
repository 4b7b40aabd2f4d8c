"""Per-document metadata parsing.

Markdown documents may declare page settings in two ways:

- YAML frontmatter: a ``---`` line, YAML key/value content and a closing
  ``---`` line at the very top of the file.
- An HTML comment block at the top of the body, either a single comment
  holding ``key: value`` lines or the marker form::

      <!-- This is configuration data -->
      <!-- @page "/custom" -->
      <!-- title: Custom page -->

Each mechanism yields a ``PartialMetadata`` in which unset fields are
``None``. ``parse_page_metadata`` runs the enabled mechanisms and folds the
partial records in the configured precedence order: a later source wins
only for the fields it actually sets. With the default order the HTML
comment is applied first and YAML frontmatter last, so frontmatter wins
when both set the same field.

Recognised keys are ``route``, ``title``, ``description``, ``layout``,
``showTitle`` (or ``show_title``) and ``tags``; anything else is ignored.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

import yaml

from mdpages.config import (
    HTML_COMMENT_CONFIG_MARKER,
    METADATA_SOURCE_HTML_COMMENT,
    METADATA_SOURCE_YAML_FRONTMATTER,
)
from mdpages.exceptions import ConfigurationParseError

from .options import GenerationOptions, parse_bool

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE
)
_MARKER_RE = re.compile(
    r"^<!--\s*" + re.escape(HTML_COMMENT_CONFIG_MARKER) + r"\s*-->$", re.IGNORECASE
)
_PAGE_DIRECTIVE_RE = re.compile(r'^@page\s+"([^"]+)"')
_KEY_VALUE_RE = re.compile(r"^([A-Za-z_][\w-]*)\s*:\s*(.*)$")
_LIST_ITEM_RE = re.compile(r"^-\s+(.*)$")
_UNSAFE_ROUTE_CHARS = ('"', "\n", "\r")

_KEY_ALIASES = {
    "route": "route",
    "title": "title",
    "description": "description",
    "layout": "layout",
    "showtitle": "show_title",
    "show_title": "show_title",
    "tags": "tags",
}


@dataclass(frozen=True)
class PageMetadata:
    """Resolved configuration for one document."""

    route: str | None = None
    title: str | None = None
    description: str | None = None
    layout: str | None = None
    show_title: bool = True
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class PartialMetadata:
    """Configuration contributed by one source; ``None`` means not set."""

    route: str | None = None
    title: str | None = None
    description: str | None = None
    layout: str | None = None
    show_title: bool | None = None
    tags: tuple[str, ...] | None = None


class SourceResult(NamedTuple):
    """Outcome of running one metadata source over a document."""

    metadata: PartialMetadata
    body: str
    warnings: tuple[str, ...]
    found: bool


class ParsedDocument(NamedTuple):
    """Resolved metadata, the remaining Markdown body and any warnings."""

    metadata: PageMetadata
    body: str
    warnings: tuple[str, ...]


def normalize_newlines(text: str) -> str:
    """Strip a byte-order mark and convert CRLF/CR line endings to LF."""
    return text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def normalize_tags(raw: Any) -> tuple[str, ...]:
    """Normalize a tags value into an ordered tuple of non-empty strings.

    Lists are taken element by element. Strings are split on commas, except
    that a bracketed string such as ``"[a, b]"`` is read as a YAML flow list.

    Examples
    --------
    >>> normalize_tags(["a", " b ", ""])
    ('a', 'b')
    >>> normalize_tags("a, b,c")
    ('a', 'b', 'c')
    >>> normalize_tags("[a, b]")
    ('a', 'b')
    """
    if raw is None:
        return ()
    if isinstance(raw, (list, tuple)):
        candidates: list[Any] = list(raw)
    elif isinstance(raw, str):
        val = raw.strip()
        if not val:
            return ()
        if val.startswith("[") and val.endswith("]"):
            try:
                parsed = yaml.safe_load(val)
            except yaml.YAMLError:
                parsed = None
            candidates = parsed if isinstance(parsed, list) else val[1:-1].split(",")
        else:
            candidates = val.split(",")
    else:
        candidates = [raw]
    result: list[str] = []
    for item in candidates:
        if item is None:
            continue
        text = str(item).strip().strip('"').strip("'").strip()
        if text:
            result.append(text)
    return tuple(result)


def _coerce_text(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else None


def _partial_from_mapping(
    data: Mapping[str, Any], source_path: str, origin: str
) -> tuple[PartialMetadata, list[str]]:
    """Build a partial record from raw key/value pairs, ignoring unknown keys."""
    values: dict[str, Any] = {}
    warnings: list[str] = []
    for raw_key, raw_value in data.items():
        key = _KEY_ALIASES.get(str(raw_key).strip().lower().replace("-", "_"))
        if key is None:
            continue
        if key == "tags":
            tags = normalize_tags(raw_value)
            values["tags"] = tags or None
        elif key == "show_title":
            if raw_value is None:
                continue
            if isinstance(raw_value, bool):
                values["show_title"] = raw_value
                continue
            try:
                values["show_title"] = parse_bool(str(raw_value))
            except ValueError:
                message = (
                    f"{source_path}: invalid showTitle value {raw_value!r} in "
                    f"{origin}; using the default"
                )
                logger.warning(message)
                warnings.append(message)
        elif key == "route":
            route = _coerce_text(raw_value)
            if route is not None and any(ch in route for ch in _UNSAFE_ROUTE_CHARS):
                raise ConfigurationParseError(
                    f"Route {route!r} in {origin} contains a quote or line break",
                    source_path=source_path,
                )
            values["route"] = route
        else:
            text = _coerce_text(raw_value)
            values[key] = text.strip() if text is not None else None
    return PartialMetadata(**values), warnings


def parse_yaml_frontmatter(
    text: str, source_path: str = "<memory>", line_offset: int = 0
) -> SourceResult:
    r"""Extract YAML frontmatter from the top of ``text``.

    Parameters
    ----------
    text : str
        Document text with LF line endings.
    source_path : str, optional
        Path used in warnings and errors.
    line_offset : int, optional
        Number of document lines preceding ``text``, used to report
        error lines relative to the whole document.

    Returns
    -------
    SourceResult
        Partial metadata, the body after the closing delimiter, warnings and
        whether frontmatter was present. Without an opening delimiter the
        whole text is returned as body.

    Raises
    ------
    mdpages.exceptions.ConfigurationParseError
        If the YAML is malformed or is not a mapping.

    Examples
    --------
    >>> result = parse_yaml_frontmatter("---\ntitle: Hi\n---\n# Body\n")
    >>> result.metadata.title, result.body
    ('Hi', '# Body\n')
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return SourceResult(PartialMetadata(), text, (), False)
    yaml_text = match.group(1)
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        line = line_offset + (mark.line + 2 if mark is not None else 1)
        problem = getattr(exc, "problem", None) or str(exc)
        raise ConfigurationParseError(
            f"Malformed YAML frontmatter: {problem}",
            source_path=source_path,
            line=line,
        ) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationParseError(
            f"YAML frontmatter must be a mapping, got {type(data).__name__}",
            source_path=source_path,
            line=line_offset + 2,
        )
    partial, warnings = _partial_from_mapping(data, source_path, "YAML frontmatter")
    return SourceResult(partial, text[match.end() :], tuple(warnings), True)


def _entries_to_mapping(entries: Iterable[str]) -> tuple[dict[str, Any], bool]:
    """Turn comment lines into key/value pairs; report if any key was known.

    A key with no value followed by ``- item`` lines takes those items as a
    list, so ``tags:`` may be written one tag per line.
    """
    data: dict[str, Any] = {}
    recognised = False
    list_key: str | None = None
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        item = _LIST_ITEM_RE.match(entry)
        if item and list_key is not None:
            current = data.get(list_key)
            items = current if isinstance(current, list) else []
            items.append(item.group(1).strip())
            data[list_key] = items
            continue
        list_key = None
        page = _PAGE_DIRECTIVE_RE.match(entry)
        if page:
            data["route"] = page.group(1)
            recognised = True
            continue
        kv = _KEY_VALUE_RE.match(entry)
        if kv:
            key, value = kv.group(1), kv.group(2).strip()
            if value.startswith('"') and value.endswith('"') and len(value) >= 2:
                value = value[1:-1]
            data[key] = value
            if not value:
                list_key = key
            if key.lower().replace("-", "_") in _KEY_ALIASES:
                recognised = True
    return data, recognised


def parse_html_comment_configuration(
    text: str, source_path: str = "<memory>", line_offset: int = 0
) -> SourceResult:
    r"""Extract configuration from an HTML comment block at the top of ``text``.

    Leading blank lines are skipped. A comment that contains no recognised
    key is ordinary content and is left in the body.

    Raises
    ------
    mdpages.exceptions.ConfigurationParseError
        If a configuration comment is opened but never closed.

    Examples
    --------
    >>> result = parse_html_comment_configuration("<!--\nroute: /x\n-->\nBody")
    >>> result.metadata.route, result.body
    ('/x', 'Body')
    """
    lines = text.split("\n")
    start = next((i for i, line in enumerate(lines) if line.strip()), None)
    if start is None or not lines[start].strip().startswith("<!--"):
        return SourceResult(PartialMetadata(), text, (), False)

    first = lines[start].strip()
    if _MARKER_RE.match(first):
        entries: list[str] = []
        end = start + 1
        while end < len(lines):
            line = lines[end].strip()
            if len(line) < 7 or not (line.startswith("<!--") and line.endswith("-->")):
                break
            entries.append(line[4:-3])
            end += 1
        data, _ = _entries_to_mapping(entries)
        body = "\n".join(lines[end:])
    else:
        close = next(
            (i for i in range(start, len(lines)) if "-->" in lines[i]), None
        )
        if close is None:
            _, recognised = _entries_to_mapping([first[4:], *lines[start + 1 :]])
            if recognised:
                raise ConfigurationParseError(
                    "Unterminated HTML comment configuration block",
                    source_path=source_path,
                    line=line_offset + start + 1,
                )
            return SourceResult(PartialMetadata(), text, (), False)
        block = "\n".join(lines[start : close + 1]).strip()
        inner = block[4 : block.index("-->")]
        data, recognised = _entries_to_mapping(inner.split("\n"))
        if not recognised:
            return SourceResult(PartialMetadata(), text, (), False)
        trailing = lines[close][lines[close].index("-->") + 3 :]
        rest = lines[close + 1 :]
        body = "\n".join([trailing.lstrip(), *rest] if trailing.strip() else rest)

    partial, warnings = _partial_from_mapping(data, source_path, "HTML comment")
    return SourceResult(partial, body, tuple(warnings), True)


def merge_metadata(partials: Iterable[PartialMetadata]) -> PageMetadata:
    """Fold partial records left to right; later records win for set fields."""
    resolved: dict[str, Any] = {}
    for partial in partials:
        for field in dataclasses.fields(partial):
            value = getattr(partial, field.name)
            if value is not None:
                resolved[field.name] = value
    return PageMetadata(**resolved)


def parse_page_metadata(
    text: str, options: GenerationOptions, source_path: str = "<memory>"
) -> ParsedDocument:
    r"""Parse a document's configuration and return it with the remaining body.

    Frontmatter is looked for first, then an HTML comment block at the top
    of what remains. A document whose comment block precedes its
    frontmatter is accepted too. Only mechanisms enabled in ``options`` run.

    Parameters
    ----------
    text : str
        Raw document text.
    options : GenerationOptions
        Enabled mechanisms and precedence order.
    source_path : str, optional
        Path used in warnings and errors.

    Returns
    -------
    ParsedDocument
        Resolved ``PageMetadata`` (defaults applied), body and warnings.

    Raises
    ------
    mdpages.exceptions.ConfigurationParseError
        If an enabled mechanism finds a malformed block.

    Examples
    --------
    >>> from mdpages.pipeline.page_generator.options import GenerationOptions
    >>> doc = parse_page_metadata("# Hello\n", GenerationOptions())
    >>> doc.metadata.show_title, doc.metadata.tags, doc.body
    (True, (), '# Hello\n')
    """
    body = normalize_newlines(text)
    partials: dict[str, PartialMetadata] = {}
    warnings: list[str] = []
    frontmatter_found = False

    def _consumed(before: str, after: str) -> int:
        return before.count("\n", 0, len(before) - len(after))

    offset = 0
    if options.enable_yaml_frontmatter:
        result = parse_yaml_frontmatter(body, source_path, offset)
        if result.found:
            frontmatter_found = True
            offset += _consumed(body, result.body)
            partials[METADATA_SOURCE_YAML_FRONTMATTER] = result.metadata
            warnings.extend(result.warnings)
            body = result.body

    if options.enable_html_comment_configuration:
        result = parse_html_comment_configuration(body, source_path, offset)
        if result.found:
            offset += _consumed(body, result.body)
            partials[METADATA_SOURCE_HTML_COMMENT] = result.metadata
            warnings.extend(result.warnings)
            body = result.body
            if options.enable_yaml_frontmatter and not frontmatter_found:
                stripped = body.lstrip("\n")
                trailing = parse_yaml_frontmatter(
                    stripped, source_path, offset + len(body) - len(stripped)
                )
                if trailing.found:
                    partials[METADATA_SOURCE_YAML_FRONTMATTER] = trailing.metadata
                    warnings.extend(trailing.warnings)
                    body = trailing.body

    ordered = [
        partials[name] for name in options.metadata_precedence if name in partials
    ]
    return ParsedDocument(merge_metadata(ordered), body, tuple(warnings))
