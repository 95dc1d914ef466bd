"""Middleware protocol and the handler / next type aliases.

A middleware is any callable matching::

    def my_mw(request: Request, response: Response, next: Next) -> Response | None: ...

No base class required. The router checks nothing but the call shape.

Returning ``None`` means "keep the response this layer was handed";
returning a ``Response`` substitutes it.
"""

from collections.abc import Callable
from typing import Protocol, TypeAlias

from sprig.http.request import Request
from sprig.http.response import Response

# Terminal route handler: may return a Response or mutate the one given
Handler: TypeAlias = Callable[[Request, Response], Response | None]

# The rest of the pipeline, as seen from inside a middleware. Always returns
# a Response; an inner layer that returns None yields the one it was handed.
Next: TypeAlias = Callable[[Request, Response], Response]


class Middleware(Protocol):
    """Protocol for sprig middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def timing(request: Request, response: Response, next: Next) -> Response | None:
            start = time.monotonic()
            response = next(request, response)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class RequireJson:
            def __call__(self, request, response, next): ...
    """

    def __call__(self, request: Request, response: Response, next: Next) -> Response | None: ...
