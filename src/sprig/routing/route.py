"""Route and RouteMatch dataclasses."""

from dataclasses import dataclass

from sprig.middleware.protocol import Handler, Middleware


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route, stored at a trie leaf under its method.

    ``middleware`` is the full stack for this route, outermost first:
    global, then group, then per-route.
    """

    method: str
    path: str
    param_names: tuple[str, ...]
    middleware: tuple[Middleware, ...]
    handler: Handler


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful lookup."""

    route: Route
    parameters: dict[str, str]
