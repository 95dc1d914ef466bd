"""Session middleware — signed cookie sessions with flash values.

Session data is serialized as JSON and signed with ``itsdangerous``.
The active ``Session`` lives in a ContextVar, reachable through
``get_session()`` from any handler or middleware running inside
``SessionMiddleware``.

Flash values survive exactly one more request: at the start of every
request the previous request's flashes become readable and older ones
are dropped.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from sprig.config import AppConfig
from sprig.errors import ConfigurationError
from sprig.http.request import Request
from sprig.http.response import Response
from sprig.middleware.protocol import Next

logger = logging.getLogger("sprig.sessions")

_FLASH_OLD = "__flash_old"
_FLASH_NEW = "__flash_new"

_session_var: ContextVar[Session | None] = ContextVar("sprig_session", default=None)


class Session:
    """Dict-backed session with flash support.

    ``get`` prefers a flash value from the previous request over a
    regular value stored under the same key.
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})
        # Age flashes: last request's "new" become this request's "old"
        self._data[_FLASH_OLD] = self._data.pop(_FLASH_NEW, None) or {}
        self._data[_FLASH_NEW] = {}

    def get(self, key: str, default: Any = None) -> Any:
        flashed = self._data[_FLASH_OLD]
        if key in flashed:
            return flashed[key]
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def flash(self, key: str, value: Any) -> None:
        """Store *value* for the next request only."""
        self._data[_FLASH_NEW][key] = value

    def pop(self, key: str, default: Any = None) -> Any:
        """Remove and return a stored value. Flash bookkeeping keys are not removable."""
        if key in (_FLASH_OLD, _FLASH_NEW):
            return default
        return self._data.pop(key, default)

    def clear(self) -> None:
        """Drop everything, flashes included."""
        self._data = {_FLASH_OLD: {}, _FLASH_NEW: {}}

    def __contains__(self, key: object) -> bool:
        return key in self._data[_FLASH_OLD] or (
            key in self._data and key not in (_FLASH_OLD, _FLASH_NEW)
        )

    def to_dict(self) -> dict[str, Any]:
        """Payload written to the cookie. Already-read flashes are left out."""
        return {k: v for k, v in self._data.items() if k != _FLASH_OLD}


def get_session() -> Session:
    """Return the current session.

    Raises ``LookupError`` if called outside a request handled by
    ``SessionMiddleware``.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Ensure SessionMiddleware is registered "
            "before accessing the session."
        )
        raise LookupError(msg)
    return session


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required. Sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "sprig_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    @classmethod
    def from_app_config(cls, config: AppConfig, **overrides: Any) -> SessionConfig:
        """Take the secret, cookie name and lifetime from an ``AppConfig``."""
        return cls(
            secret_key=config.secret_key,
            cookie_name=config.session_cookie,
            max_age=config.session_max_age,
            **overrides,
        )


class SessionMiddleware:
    """Signed cookie session middleware.

    Usage::

        from sprig.middleware.sessions import SessionConfig, SessionMiddleware, get_session

        app.use(SessionMiddleware(SessionConfig(secret_key="change-me")))

        @app.post("/login")
        def login(request, response):
            get_session().flash("notice", "Welcome back")
            return Response.redirect("/")
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="sprig.session")

    def _load(self, request: Request) -> Session:
        cookie_value = request.cookies.get(self._config.cookie_name)
        if not cookie_value:
            return Session()
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadData:
            logger.debug("Discarding session cookie with bad or expired signature")
            return Session()
        return Session(data if isinstance(data, dict) else None)

    def _save(self, response: Response, session: Session) -> Response:
        cfg = self._config
        return response.with_cookie(
            cfg.cookie_name,
            self._serializer.dumps(session.to_dict()),
            max_age=cfg.max_age,
            path=cfg.path,
            domain=cfg.domain,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )

    def __call__(self, request: Request, response: Response, next: Next) -> Response:
        """Load the session, run the rest of the pipeline, then re-sign it."""
        session = self._load(request)
        token = _session_var.set(session)
        try:
            response = next(request, response)
        finally:
            _session_var.reset(token)
        return self._save(response, session)
