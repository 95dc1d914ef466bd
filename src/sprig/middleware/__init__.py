"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(request: Request, response: Response, next: Next) -> Response | None

Built-in middleware:
    SessionMiddleware -- Signed cookie sessions with flash values (requires itsdangerous)
"""

from sprig.middleware.protocol import Handler, Middleware, Next
from sprig.middleware.sessions import Session, SessionConfig, SessionMiddleware, get_session

__all__ = [
    "Handler",
    "Middleware",
    "Next",
    "Session",
    "SessionConfig",
    "SessionMiddleware",
    "get_session",
]
