"""Router with trie-based path matching and middleware pipelines.

Paths are split into segments and stored in a prefix trie. A segment
written as ``:name`` captures whatever the request has at that position.
At lookup, literal children are tried before the parameter child, with
backtracking: a literal branch that dead-ends deeper down gives the
parameter branch at the same depth its turn.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable

from sprig.errors import ConfigurationError, MethodNotAllowed, NotFound
from sprig.http.request import Request
from sprig.http.response import Response
from sprig.middleware.protocol import Handler, Middleware, Next
from sprig.routing.route import Route, RouteMatch

logger = logging.getLogger("sprig.routing")

_SLASHES = re.compile(r"/+")


def normalize_path(path: str) -> str:
    """Collapse repeated slashes and trim surrounding ones.

    ``"/a//b/"``, ``"a/b"`` and ``"/a/b"`` all normalize to ``"a/b"``.
    Registration and lookup both go through here.
    """
    return _SLASHES.sub("/", path).strip("/")


def _split(path: str) -> list[str]:
    normalized = normalize_path(path)
    return normalized.split("/") if normalized else []


class _TrieNode:
    """A node in the route trie."""

    __slots__ = ("children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        # Literal segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Shared by every ":name" segment at this depth
        self.param_child: _TrieNode | None = None
        # Non-empty only at leaves
        self.routes_by_method: dict[str, Route] = {}


def _layer(middleware: Middleware, inner: Callable[[Request, Response], Response | None]) -> Next:
    """Wrap *inner* so *middleware* receives it as ``next``."""

    def call_next(request: Request, response: Response) -> Response:
        result = inner(request, response)
        return result if isinstance(result, Response) else response

    def call(request: Request, response: Response) -> Response | None:
        return middleware(request, response, call_next)

    return call


class Router:
    """Trie router with global, group, and per-route middleware.

    Usage::

        router = Router()
        router.use(log_requests)
        router.add("GET", "/user/:id", show_user)
        router.group("/admin", lambda r: r.add("GET", "/stats", stats), [require_admin])

        response = router.dispatch(request, Response())

    Global middleware is captured into each route when the route is
    added. Routes added before a ``use()`` call are not wrapped by it.
    """

    __slots__ = ("_global_middleware", "_group_middleware", "_prefix", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._global_middleware: list[Middleware] = []
        # Registration scope, only meaningful inside group()
        self._prefix = ""
        self._group_middleware: list[Middleware] = []

    # -- Registration --

    def use(self, middleware: Middleware) -> Router:
        """Add middleware that wraps every route registered from now on."""
        self._global_middleware.append(middleware)
        return self

    def group(
        self,
        prefix: str,
        configure: Callable[[Router], object],
        middleware: Iterable[Middleware] = (),
    ) -> Router:
        """Register routes under a shared prefix and middleware stack.

        *configure* receives this router; routes it adds get *prefix*
        prepended and *middleware* appended after any enclosing group's.
        The previous scope is restored afterwards, even if *configure*
        raises.
        """
        previous_prefix = self._prefix
        previous_middleware = self._group_middleware

        self._prefix = f"{previous_prefix}/{prefix}"
        self._group_middleware = [*previous_middleware, *middleware]
        try:
            configure(self)
        finally:
            self._prefix = previous_prefix
            self._group_middleware = previous_middleware
        return self

    def add(
        self,
        method: str,
        path: str,
        handler: Handler,
        middleware: Iterable[Middleware] = (),
    ) -> Router:
        """Register *handler* for *method* at *path*.

        Re-adding the same method and path replaces the earlier route.
        """
        method = method.upper()
        full_path = normalize_path(f"{self._prefix}/{path}")
        node = self._root
        param_names: list[str] = []

        for segment in _split(full_path):
            if segment.startswith(":"):
                name = segment[1:]
                if not name:
                    msg = f"Empty parameter name in route path {path!r}."
                    raise ConfigurationError(msg)
                param_names.append(name)
                if node.param_child is None:
                    node.param_child = _TrieNode()
                node = node.param_child
            else:
                node = node.children.setdefault(segment, _TrieNode())

        node.routes_by_method[method] = Route(
            method=method,
            path="/" + full_path,
            param_names=tuple(param_names),
            middleware=(*self._global_middleware, *self._group_middleware, *middleware),
            handler=handler,
        )
        logger.debug("Registered %s /%s", method, full_path)
        return self

    def get(self, path: str, handler: Handler, middleware: Iterable[Middleware] = ()) -> Router:
        return self.add("GET", path, handler, middleware)

    def post(self, path: str, handler: Handler, middleware: Iterable[Middleware] = ()) -> Router:
        return self.add("POST", path, handler, middleware)

    def put(self, path: str, handler: Handler, middleware: Iterable[Middleware] = ()) -> Router:
        return self.add("PUT", path, handler, middleware)

    def patch(self, path: str, handler: Handler, middleware: Iterable[Middleware] = ()) -> Router:
        return self.add("PATCH", path, handler, middleware)

    def delete(self, path: str, handler: Handler, middleware: Iterable[Middleware] = ()) -> Router:
        return self.add("DELETE", path, handler, middleware)

    def options(self, path: str, handler: Handler, middleware: Iterable[Middleware] = ()) -> Router:
        return self.add("OPTIONS", path, handler, middleware)

    def head(self, path: str, handler: Handler, middleware: Iterable[Middleware] = ()) -> Router:
        return self.add("HEAD", path, handler, middleware)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """Every registered route, literal branches before parameter ones."""
        result: list[Route] = []
        self._collect_routes(self._root, result)
        return result

    def _collect_routes(self, node: _TrieNode, result: list[Route]) -> None:
        result.extend(node.routes_by_method.values())
        for child in node.children.values():
            self._collect_routes(child, result)
        if node.param_child is not None:
            self._collect_routes(node.param_child, result)

    # -- Lookup --

    def match(self, method: str, path: str) -> RouteMatch:
        """Resolve *method* and *path* to a route and its captured parameters.

        Raises ``NotFound`` if no leaf matches the path.
        Raises ``MethodNotAllowed`` if a leaf matches but not for *method*.
        """
        found = self._search(self._root, _split(path), 0, [])
        if found is None:
            raise NotFound()

        node, values = found
        route = node.routes_by_method.get(method.upper())
        if route is None:
            raise MethodNotAllowed(frozenset(node.routes_by_method))

        return RouteMatch(route=route, parameters=dict(zip(route.param_names, values, strict=True)))

    def _search(
        self,
        node: _TrieNode,
        segments: list[str],
        index: int,
        values: list[str],
    ) -> tuple[_TrieNode, list[str]] | None:
        """Depth-first walk: literal child first, then the parameter child."""
        if index == len(segments):
            if node.routes_by_method:
                return node, values
            return None

        segment = segments[index]

        child = node.children.get(segment)
        if child is not None:
            found = self._search(child, segments, index + 1, values)
            if found is not None:
                return found

        if node.param_child is not None:
            return self._search(node.param_child, segments, index + 1, [*values, segment])

        return None

    # -- Dispatch --

    def dispatch(self, request: Request, response: Response) -> Response:
        """Run the route matching *request* and return the final response.

        Sets ``request.parameters`` from the captured path segments, then
        runs the route's middleware (first registered outermost) around
        its handler. If the pipeline returns a ``Response`` it wins;
        otherwise *response*, as mutated by the pipeline, is returned.

        Routing errors and anything raised by handlers or middleware
        propagate to the caller.
        """
        try:
            matched = self.match(request.method, request.path)
        except (NotFound, MethodNotAllowed) as exc:
            logger.debug("%d %s /%s", exc.status, request.method, request.path)
            raise

        route = matched.route
        request.parameters = matched.parameters

        pipeline: Callable[[Request, Response], Response | None] = route.handler
        for middleware in reversed(route.middleware):
            pipeline = _layer(middleware, pipeline)

        result = pipeline(request, response)
        if isinstance(result, Response):
            return result
        return response
