"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and the
specialized subclasses used by the page generation pipeline: invalid
options, unparseable per-file configuration, route collisions, missing
content and an unusable output directory. Per-file errors are recorded in
the run summary; only configuration and output-directory errors abort a run.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'CONFIGURATION_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    transient : bool, optional
        Whether the error is temporary and may be retried.

    Attributes
    ----------
    code : str
        Stable machine-readable error code.
    message : str
        Human-readable message.
    context : dict
        Structured, non-sensitive context for logging.
    transient : bool
        True if the error is transient.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'}, transient=True)
    >>> e.code
    'CODE'
    """

    __slots__ = ("code", "message", "context", "transient")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})
        self.transient = bool(transient)

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
            "is_transient": self.transient,
        }


class ConfigurationError(AppError):
    """Raised for invalid or contradictory generation options."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "CONFIGURATION_ERROR", message, context=context, transient=False
        )


class ConfigurationParseError(AppError):
    """Raised when a document's frontmatter or comment block cannot be parsed.

    Parameters
    ----------
    message : str
        Description of the parse failure.
    source_path : str
        Path of the offending document, relative to the source directory.
    line : int | None, optional
        1-based line number in the document where parsing failed.
    """

    def __init__(
        self,
        message: str,
        *,
        source_path: str,
        line: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = {"source_path": source_path, "line": line}
        ctx.update(context or {})
        location = f"{source_path}:{line}" if line is not None else source_path
        super().__init__(
            "CONFIGURATION_PARSE_ERROR",
            f"{location}: {message}",
            context=ctx,
            transient=False,
        )
        self.source_path = source_path
        self.line = line


class RouteCollisionError(AppError):
    """Raised when a document derives a route already assigned in the run."""

    def __init__(self, route: str, *, source_path: str, existing_source: str) -> None:
        super().__init__(
            "ROUTE_COLLISION_ERROR",
            f"Route '{route}' from {source_path} is already used by {existing_source}",
            context={
                "route": route,
                "source_path": source_path,
                "existing_source": existing_source,
            },
            transient=False,
        )
        self.route = route
        self.source_path = source_path
        self.existing_source = existing_source


class ContentNotFoundError(AppError):
    """Raised by a content source when the requested path cannot be read."""

    def __init__(
        self, path: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        ctx = {"path": path}
        ctx.update(context or {})
        super().__init__(
            "CONTENT_NOT_FOUND", f"Content not found: {path}", context=ctx
        )
        self.path = path


class OutputDirectoryError(AppError):
    """Raised when the output directory cannot be created or written."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "OUTPUT_DIRECTORY_ERROR", message, context=context, transient=False
        )
