"""Routing: the path-matching engine behind ``Mux``.

``Mux`` only talks to the narrow ``Matcher`` protocol. ``TrieMatcher`` is
the default implementation; any other engine honouring the protocol can
be injected with ``Mux(engine=...)``.
"""

from wren.routing.engine import BoundaryHandler, Matcher
from wren.routing.route import ANY_METHOD, Route, RouteMatch
from wren.routing.trie import TrieMatcher

__all__ = ["ANY_METHOD", "BoundaryHandler", "Matcher", "Route", "RouteMatch", "TrieMatcher"]
