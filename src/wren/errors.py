"""Wren exception hierarchy.

Shared across Registry, Router, Context, the dispatcher and middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration is invalid.

    Typically surfaces during ``App.compose()`` at startup.
    """


class RouteConflict(ConfigurationError):  # noqa: N818
    """Two registrations claim the same route or parameter slot.

    Only raised when strict routing is enabled; otherwise the conflict is
    logged and the later registration wins.
    """


class TemplateNotFound(WrenError):  # noqa: N818
    """The render collaborator could not resolve a template identifier."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Template not found: {name!r}")
        self.name = name


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, handlers, or ``Context.throw()``.
    The dispatcher catches these and hands them to the registered error
    handler, or answers with ``detail`` as plain text.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request method and path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class StaticNotFound(NotFound):
    """404 — a static route matched but the file does not exist."""

    def __init__(self, detail: str = "File not found") -> None:
        super().__init__(detail=detail)


def status_of(exc: BaseException) -> int:
    """Return the HTTP status a failure declares, defaulting to 500.

    ``HTTPError`` carries its status; any other exception may declare one
    through an integer ``status`` attribute.
    """
    if isinstance(exc, HTTPError):
        return exc.status
    status = getattr(exc, "status", None)
    if isinstance(status, int) and not isinstance(status, bool) and 100 <= status <= 599:
        return status
    return 500


def message_of(exc: BaseException) -> str:
    """Return the human-readable message of a failure."""
    if isinstance(exc, HTTPError):
        return exc.detail or f"Error {exc.status}"
    return str(exc) or "Internal Server Error"
