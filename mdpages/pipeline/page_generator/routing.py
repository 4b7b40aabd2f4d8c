"""Route derivation for generated pages.

Routes are derived from the file name only: ``guides/Getting_Started.md``
and ``Getting_Started.md`` both map to ``/getting-started``. Nested source
directories are flattened on purpose, which means two files with the same
name in different folders collide; the page generator reports that as a
``RouteCollisionError``.

An explicit ``route`` in a document's metadata is used verbatim (no
normalization) and is still prefixed with the configured base route.

Examples
--------
>>> derive_route("index.md")
'/'
>>> derive_route("My_Post Name.md")
'/my-post-name'
>>> derive_route("a---b.md", base_prefix="docs/")
'/docs/a-b'
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from mdpages.exceptions import RouteCollisionError

from .metadata import PageMetadata

_HYPHEN_RUN_RE = re.compile(r"-{2,}")


def to_posix(relative_path: str | Path) -> PurePosixPath:
    """Return ``relative_path`` as a POSIX path regardless of separator style."""
    return PurePosixPath(str(relative_path).replace("\\", "/"))


def normalize_base_prefix(base_prefix: str | None) -> str:
    """Return the prefix with one leading slash and no trailing slash.

    An empty or ``None`` prefix becomes ``""``.
    """
    if base_prefix is None:
        return ""
    trimmed = base_prefix.strip().strip("/")
    return f"/{trimmed}" if trimmed else ""


def slugify_stem(stem: str) -> str:
    """Lowercase a file stem and turn spaces and underscores into single hyphens.

    Characters other than spaces and underscores are kept as they are.

    Examples
    --------
    >>> slugify_stem("Troubleshooting & FAQ")
    'troubleshooting-&-faq'
    >>> slugify_stem("Quick   Start")
    'quick-start'
    """
    slug = stem.lower().replace(" ", "-").replace("_", "-")
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")


def _apply_prefix(route: str, prefix: str) -> str:
    if not prefix:
        return route
    if route == "/":
        return prefix
    if route.startswith("/"):
        return prefix + route
    return f"{prefix}/{route}"


def derive_route(
    relative_path: str | Path,
    metadata: PageMetadata | None = None,
    base_prefix: str | None = None,
) -> str:
    r"""Derive the canonical route for a source document.

    Parameters
    ----------
    relative_path : str | Path
        Path of the document relative to the source directory.
    metadata : PageMetadata | None, optional
        Parsed metadata; an explicit ``route`` wins over the file name.
    base_prefix : str | None, optional
        Prefix concatenated in front of every route.

    Returns
    -------
    str
        The route. ``index`` documents map to ``/`` (or the prefix itself).

    Examples
    --------
    >>> from mdpages.pipeline.page_generator.metadata import PageMetadata
    >>> derive_route("about.md", PageMetadata(route="custom/path"))
    'custom/path'
    >>> derive_route("index.md", base_prefix="/docs")
    '/docs'
    """
    prefix = normalize_base_prefix(base_prefix)
    if metadata is not None and metadata.route is not None:
        return _apply_prefix(metadata.route, prefix)

    stem = to_posix(relative_path).stem
    if stem.lower() == "index":
        return prefix or "/"
    slug = slugify_stem(stem)
    if not slug:
        return prefix or "/"
    return _apply_prefix(f"/{slug}", prefix)


def title_from_filename(stem: str) -> str:
    """Build a display title from a file stem.

    Examples
    --------
    >>> title_from_filename("getting-started")
    'Getting Started'
    >>> title_from_filename("API_reference")
    'Api Reference'
    """
    words = [word for word in re.split(r"[-_\s]+", stem) if word]
    return " ".join(word[0].upper() + word[1:].lower() for word in words)


def output_path_for(relative_path: str | Path, extension: str) -> PurePosixPath:
    """Mirror ``relative_path`` with its extension replaced by ``extension``.

    Examples
    --------
    >>> str(output_path_for("guides/intro.md", ".razor"))
    'guides/intro.razor'
    """
    return to_posix(relative_path).with_suffix(extension)


class RouteTable:
    """Routes assigned during one generation run, keyed by source path.

    The table is created fresh for each run and passed explicitly through
    the per-file step. The first source to claim a route keeps it.
    """

    def __init__(self) -> None:
        self._owners: dict[str, str] = {}
        self._routes: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, route: object) -> bool:
        return route in self._owners

    def owner_of(self, route: str) -> str | None:
        return self._owners.get(route)

    def assign(self, source_path: str, route: str) -> None:
        """Record ``route`` for ``source_path``.

        Raises
        ------
        mdpages.exceptions.RouteCollisionError
            If another source already holds ``route``.
        """
        existing = self._owners.get(route)
        if existing is not None:
            raise RouteCollisionError(
                route, source_path=source_path, existing_source=existing
            )
        self._owners[route] = source_path
        self._routes[source_path] = route

    def release(self, source_path: str) -> None:
        """Drop the route held by ``source_path``, if any."""
        route = self._routes.pop(source_path, None)
        if route is not None:
            self._owners.pop(route, None)

    def as_dict(self) -> dict[str, str]:
        """Return ``{source_path: route}`` in assignment order."""
        return dict(self._routes)
