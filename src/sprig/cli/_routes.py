"""``sprig routes`` — print the route table of an app."""

import argparse
import sys

from sprig.cli._resolve import resolve_app
from sprig.routing.route import Route


def _handler_name(route: Route) -> str:
    handler = route.handler
    name = getattr(handler, "__qualname__", None) or type(handler).__name__
    module = getattr(handler, "__module__", None)
    return f"{module}.{name}" if module else name


def format_routes(routes: list[Route]) -> list[str]:
    """Render METHOD / PATH / MIDDLEWARE / HANDLER rows, header first."""
    rows = [
        (route.method, route.path, str(len(route.middleware)), _handler_name(route))
        for route in routes
    ]
    header = ("METHOD", "PATH", "MW", "HANDLER")
    widths = [max(len(row[i]) for row in (header, *rows)) for i in range(3)]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:>{widths[2]}}}  {{}}"
    lines = [fmt.format(*header)]
    lines.append("-" * min(len(lines[0]) + 8, 80))
    lines.extend(fmt.format(*row) for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and print its routes, optionally filtered by method."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.router.routes
    if args.method:
        routes = [r for r in routes if r.method == args.method.upper()]

    if not routes:
        print("No routes registered.")
        return

    for line in format_routes(routes):
        print(line)
