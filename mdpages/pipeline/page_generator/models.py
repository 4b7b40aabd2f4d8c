"""Records passed between the page generation stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mdpages.exceptions import AppError

STATUS_COMPLETED = "completed"
STATUS_COMPLETED_WITH_ERRORS = "completed_with_errors"

ERROR_KIND_FAILED = "failed"
ERROR_KIND_SKIPPED = "skipped"


@dataclass(frozen=True)
class PageRecord:
    """Everything resolved for one source document before conversion.

    Attributes
    ----------
    source_path : str
        POSIX path relative to the source directory.
    output_path : str
        POSIX path of the artifact relative to the output directory.
    route : str
        Route the page is served at.
    title : str
        Page title (metadata, first heading or file name).
    markdown_body : str
        Markdown left after configuration blocks were removed.
    warnings : tuple[str, ...]
        Non-fatal metadata problems.
    """

    source_path: str
    output_path: str
    route: str
    title: str
    description: str | None = None
    layout: str | None = None
    show_title: bool = True
    tags: tuple[str, ...] = ()
    markdown_body: str = ""
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class GeneratedIndexEntry:
    """One generated page as recorded in the discovery index."""

    source: str
    route: str
    output: str
    title: str
    description: str | None = None
    layout: str | None = None
    show_title: bool = True
    tags: tuple[str, ...] = ()

    @classmethod
    def from_page(cls, page: PageRecord) -> GeneratedIndexEntry:
        return cls(
            source=page.source_path,
            route=page.route,
            output=page.output_path,
            title=page.title,
            description=page.description,
            layout=page.layout,
            show_title=page.show_title,
            tags=page.tags,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "route": self.route,
            "output": self.output,
            "title": self.title,
            "description": self.description,
            "layout": self.layout,
            "showTitle": self.show_title,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeneratedIndexEntry:
        """Build an entry from its JSON form.

        Raises
        ------
        ValueError
            If ``source`` or ``route`` is missing or not a string.
        """
        source = data.get("source")
        route = data.get("route")
        if not isinstance(source, str) or not isinstance(route, str):
            raise ValueError(f"Index entry needs string 'source' and 'route': {data!r}")
        tags = data.get("tags") or []
        return cls(
            source=source,
            route=route,
            output=str(data.get("output") or ""),
            title=str(data.get("title") or ""),
            description=data.get("description"),
            layout=data.get("layout"),
            show_title=bool(data.get("showTitle", True)),
            tags=tuple(str(tag) for tag in tags),
        )


@dataclass(frozen=True)
class FileError:
    """A per-file problem recorded during a run."""

    source_path: str
    kind: str
    code: str
    message: str
    line: int | None = None

    @classmethod
    def from_exception(
        cls, source_path: str, kind: str, exc: BaseException
    ) -> FileError:
        if isinstance(exc, AppError):
            return cls(
                source_path=source_path,
                kind=kind,
                code=exc.code,
                message=exc.message,
                line=exc.context.get("line"),
            )
        return cls(
            source_path=source_path,
            kind=kind,
            code=type(exc).__name__.upper(),
            message=str(exc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_path": self.source_path,
            "kind": self.kind,
            "error_code": self.code,
            "message": self.message,
            "line": self.line,
        }


@dataclass
class GenerationSummary:
    """Outcome of one generation run.

    ``errors`` keeps per-file problems in the order they occurred; files
    that failed to read, parse, convert or write are ``failed`` and files
    that lost a route collision are ``skipped``.
    """

    discovered: int = 0
    entries: list[GeneratedIndexEntry] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    index_path: str | None = None

    @property
    def succeeded(self) -> list[str]:
        return [entry.source for entry in self.entries]

    @property
    def failed(self) -> list[FileError]:
        return [err for err in self.errors if err.kind == ERROR_KIND_FAILED]

    @property
    def skipped(self) -> list[FileError]:
        return [err for err in self.errors if err.kind == ERROR_KIND_SKIPPED]

    @property
    def status(self) -> str:
        return STATUS_COMPLETED_WITH_ERRORS if self.errors else STATUS_COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "discovered": self.discovered,
            "succeeded": len(self.entries),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "errors": [err.to_dict() for err in self.errors],
            "warnings": list(self.warnings),
            "index_path": self.index_path,
        }
