"""Sprig application class.

Wraps a Router with a registration facade, a service container, and the
request entry point that turns routing and handler failures into HTTP
responses. Serves WSGI directly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any, TypeAlias

from sprig.config import JSON, AppConfig
from sprig.container import Container
from sprig.environment import Environment
from sprig.errors import HTTPError, status_phrase
from sprig.http.request import Request
from sprig.http.response import Response, StartResponse
from sprig.jwt import JWT
from sprig.middleware.protocol import Handler, Middleware
from sprig.routing.router import Router

logger = logging.getLogger("sprig.server")

ErrorHandler: TypeAlias = Callable[[Request, Exception], Response | str | None]

GENERIC_ERROR = "Something went wrong. Please try again later."


class App:
    """The sprig application.

    Routes and middleware are registered at import time; ``handle`` (or
    the WSGI ``__call__``) serves requests afterwards::

        app = App(AppConfig(debug=True))

        @app.get("/user/:id")
        def show_user(request, response):
            return response.with_body(f"User {request.get('id')}")
    """

    __slots__ = ("_error_handlers", "config", "container", "router")

    def __init__(self, config: AppConfig | None = None, *, router: Router | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self.router: Router = router or Router()
        self.container: Container = Container()
        self._error_handlers: dict[int | type[Exception], ErrorHandler] = {}

        self.container.once(AppConfig, lambda _c: self.config)
        self.container.once(Router, lambda _c: self.router)
        if self.config.jwt_secret:
            self.container.once(JWT, lambda _c: JWT(self.config.jwt_secret))

    # -- Construction helpers --

    @classmethod
    def from_env(cls, path: str | Path = ".env", **overrides: Any) -> App:
        """Create an app configured from a ``.env`` file (missing file is fine).

        ``LOG_LEVEL`` sets the level of the ``sprig`` logger; handlers are
        left to the host application.
        """
        env = Environment().load(path)
        app = cls(AppConfig.from_environment(env, **overrides))
        app.container.once(Environment, lambda _c: env)
        logging.getLogger("sprig").setLevel(app.config.log_level.upper())
        return app

    @classmethod
    def api(cls, config: AppConfig | None = None) -> App:
        """Create an app whose own error responses are JSON."""
        return cls(replace(config or AppConfig(), content_type=JSON))

    # -- Route registration --

    def add(
        self,
        method: str,
        path: str,
        handler: Handler,
        middleware: Iterable[Middleware] = (),
    ) -> App:
        self.router.add(method, path, handler, middleware)
        return self

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] | None = None,
        middleware: Iterable[Middleware] = (),
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``:name`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            middleware: Per-route middleware, innermost.
        """
        stack = tuple(middleware)
        verbs = tuple(methods or ("GET",))

        def decorator(func: Handler) -> Handler:
            for method in verbs:
                self.router.add(method, path, func, stack)
            return func

        return decorator

    def get(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("GET",), middleware=middleware)

    def post(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("POST",), middleware=middleware)

    def put(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PUT",), middleware=middleware)

    def patch(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PATCH",), middleware=middleware)

    def delete(self, path: str, *, middleware: Iterable[Middleware] = ()) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("DELETE",), middleware=middleware)

    def use(self, middleware: Middleware) -> App:
        """Add global middleware for routes registered after this call."""
        self.router.use(middleware)
        return self

    def group(
        self,
        prefix: str,
        configure: Callable[[App], object],
        middleware: Iterable[Middleware] = (),
    ) -> App:
        """Register routes under *prefix*; *configure* receives this app."""
        self.router.group(prefix, lambda _router: configure(self), middleware)
        return self

    # -- Error handlers --

    def error(self, key: int | type[Exception]) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler for a status code or exception type.

        The handler receives ``(request, exc)`` and returns a Response,
        a string body, or None for the default rendering::

            @app.error(404)
            def missing(request, exc):
                return f"Nothing at /{request.path}"
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._error_handlers[key] = func
            return func

        return decorator

    def _find_error_handler(self, exc: Exception, status: int) -> ErrorHandler | None:
        # Exact type, then status code, then base classes
        handler = self._error_handlers.get(type(exc)) or self._error_handlers.get(status)
        if handler is not None:
            return handler
        for cls in type(exc).__mro__[1:]:
            if cls in self._error_handlers:
                return self._error_handlers[cls]
        return None

    def _error_response(self, status: int, detail: str) -> Response:
        if self.config.is_api:
            return Response.json({"error": detail}, status=status)
        return Response(body=detail, status=status, content_type=self.config.content_type)

    def _run_error_handler(
        self,
        handler: ErrorHandler,
        request: Request,
        exc: Exception,
        status: int,
    ) -> Response | None:
        result = handler(request, exc)
        if result is None:
            return None
        if isinstance(result, Response):
            # A handler that left the status alone still reports the error status
            if result.status == 200:
                result.with_status(status)
            return result
        return Response(body=str(result), status=status, content_type=self.config.content_type)

    # -- Request handling --

    def handle(self, request: Request) -> Response:
        """Dispatch *request* and always return a Response.

        ``HTTPError`` (including ``NotFound`` and ``MethodNotAllowed``)
        becomes a response with its status, detail, and headers. Any other
        exception is logged and becomes a generic 500.
        """
        try:
            return self.router.dispatch(request, Response())
        except HTTPError as exc:
            return self._handle_http_error(exc, request)
        except Exception as exc:
            return self._handle_internal_error(exc, request)

    def _handle_http_error(self, exc: HTTPError, request: Request) -> Response:
        logger.debug("%d %s /%s: %s", exc.status, request.method, request.path, exc.detail)

        handler = self._find_error_handler(exc, exc.status)
        response = None
        if handler is not None:
            response = self._run_error_handler(handler, request, exc, exc.status)
        if response is None:
            response = self._error_response(exc.status, exc.detail or f"Error {exc.status}")
        return response.with_headers(exc.headers)

    def _handle_internal_error(self, exc: Exception, request: Request) -> Response:
        logger.exception("500 %s /%s", request.method, request.path)

        handler = self._find_error_handler(exc, 500)
        if handler is not None:
            response = self._run_error_handler(handler, request, exc, 500)
            if response is not None:
                return response

        detail = f"{GENERIC_ERROR}\n\n{exc!r}" if self.config.debug else GENERIC_ERROR
        return self._error_response(500, detail)

    def __call__(self, environ: Mapping[str, Any], start_response: StartResponse) -> list[bytes]:
        """WSGI entry point.

        A request that cannot be built from *environ* gets a 400 (or the
        status of the ``HTTPError`` raised while parsing it).
        """
        try:
            request = Request.from_environ(environ)
        except HTTPError as exc:
            response = self._error_response(exc.status, exc.detail or f"Error {exc.status}")
            response.with_headers(exc.headers)
        except Exception:
            logger.exception("400 unreadable request")
            response = self._error_response(400, status_phrase(400))
        else:
            response = self.handle(request)
        return response.send(start_response)

