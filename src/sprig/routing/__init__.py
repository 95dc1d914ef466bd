"""Routing — path trie with literal-first matching and middleware pipelines.

Routes are registered during bootstrap; the trie is read-only while
requests are served.
"""

from sprig.routing.route import Route, RouteMatch
from sprig.routing.router import Router, normalize_path

__all__ = ["Route", "RouteMatch", "Router", "normalize_path"]
