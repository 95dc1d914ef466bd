"""Sprig — a small synchronous web framework built around a trie router.

Basic usage::

    from sprig import App

    app = App()

    @app.get("/user/:id")
    def show_user(request, response):
        return response.with_body(f"User {request.get('id')}")

    # Any WSGI server can host it:  gunicorn myapp:app

The router on its own::

    from sprig import Request, Response, Router

    router = Router().add("GET", "/home", lambda req, res: res.with_body("Welcome Home"))
    router.dispatch(Request.create("GET", "/home"), Response()).text  # "Welcome Home"
"""

__version__ = "0.1.0"
__all__ = [
    "JWT",
    "App",
    "AppConfig",
    "ConfigurationError",
    "Container",
    "Environment",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "Router",
    "SprigError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import sprig`` fast while providing a clean top-level API.
    """
    if name == "App":
        from sprig.app import App

        return App

    if name == "AppConfig":
        from sprig.config import AppConfig

        return AppConfig

    if name == "Container":
        from sprig.container import Container

        return Container

    if name == "Environment":
        from sprig.environment import Environment

        return Environment

    if name == "JWT":
        from sprig.jwt import JWT

        return JWT

    if name == "Request":
        from sprig.http.request import Request

        return Request

    if name == "Response":
        from sprig.http.response import Response

        return Response

    if name == "Router":
        from sprig.routing.router import Router

        return Router

    if name in ("Middleware", "Next"):
        from sprig.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("SprigError", "ConfigurationError", "HTTPError", "MethodNotAllowed", "NotFound"):
        from sprig import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
