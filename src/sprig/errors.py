"""Sprig exception hierarchy.

Shared across Router, App, handlers, and middleware so every module
raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass

HTTP_STATUS: dict[int, str] = {
    # Success
    200: "OK",
    201: "Created",
    202: "Accepted",
    204: "No Content",
    # Redirection
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    # Client errors
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    # Server errors
    500: "Internal Server Error",
}


def status_phrase(status: int) -> str:
    """Return the reason phrase for *status*, or ``"Unknown Error"``."""
    return HTTP_STATUS.get(status, "Unknown Error")


class SprigError(Exception):
    """Base for all sprig-specific errors."""


class ConfigurationError(SprigError):
    """Raised when app configuration or service wiring is invalid."""


class InvalidToken(SprigError):  # noqa: N818
    """Raised when a JWT cannot be verified or has expired."""


@dataclass(frozen=True, slots=True)
class HTTPError(SprigError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. ``App.handle`` catches
    these and turns them into a response with the matching status.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)

    @staticmethod
    def make(status: int, detail: str | None = None) -> HTTPError:
        """Build a plain ``HTTPError`` for *status*, defaulting the detail to its reason phrase.

        Subclasses fix their own status, so this always builds the base type.
        """
        return HTTPError(status=status, detail=detail if detail is not None else status_phrase(status))


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the path resolved to a route, but not for this HTTP method.

    Carries an ``Allow`` header listing the methods registered at the
    matched path.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "Method Not Allowed") -> None:
        super().__init__(
            status=405,
            detail=detail,
            headers=(("Allow", ", ".join(sorted(allowed))),),
        )

    @property
    def allowed(self) -> frozenset[str]:
        """Methods registered at the matched path."""
        value = dict(self.headers).get("Allow", "")
        return frozenset(m for m in value.split(", ") if m)
