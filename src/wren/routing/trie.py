"""Segment-trie matching engine.

Patterns are split on ``/`` into static segments, ``{name}`` /
``{name:converter}`` parameters, and a trailing catch-all (``{name:path}``
or ``*``). Static children are tried before the parameter child, which is
tried before the catch-all. Empty segments are ignored, so trailing and
doubled slashes never change which route matches.
"""

import logging
import re
from dataclasses import dataclass

from wren.errors import ConfigurationError, MethodNotAllowed, NotFound
from wren.http.request import Request
from wren.http.writer import ResponseWriter, write_error
from wren.routing.engine import BoundaryHandler
from wren.routing.params import CONVERTERS, WILDCARD
from wren.routing.route import ANY_METHOD, PathSegment, Route, RouteMatch

logger = logging.getLogger("wren.routing")

_FLASK_PARAM = re.compile(r"<[^>]*>")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id}"        -> [..., PathSegment("{id}", is_param=True, param_name="id")]
        "/users/{id:int}"    -> [..., PathSegment("{id:int}", ..., param_type="int")]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", ..., param_type="path")]
        "/static/*"          -> [..., PathSegment("*", ..., param_name="*", param_type="path")]

    Raises ``ConfigurationError`` for malformed patterns.
    """
    segments: list[PathSegment] = []
    parts = [p for p in path.strip("/").split("/") if p]
    for index, part in enumerate(parts):
        if _FLASK_PARAM.search(part):
            msg = (
                f"Route {path!r} uses <param> syntax. "
                "Wren expects {param} or {param:converter} instead."
            )
            raise ConfigurationError(msg)

        if part == WILDCARD:
            segment = PathSegment(value=part, is_param=True, param_name=WILDCARD, param_type="path")
        elif part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            param_name, _, param_type = inner.partition(":")
            param_type = param_type or "str"
            if not param_name:
                msg = f"Route {path!r} has an unnamed parameter segment {part!r}."
                raise ConfigurationError(msg)
            if param_type not in CONVERTERS:
                known = ", ".join(sorted(CONVERTERS))
                msg = f"Route {path!r} uses unknown converter {param_type!r} (known: {known})."
                raise ConfigurationError(msg)
            segment = PathSegment(
                value=part, is_param=True, param_name=param_name, param_type=param_type
            )
        elif "{" in part or "}" in part:
            msg = f"Route {path!r} has a malformed segment {part!r}."
            raise ConfigurationError(msg)
        else:
            segment = PathSegment(value=part)

        if segment.param_type == "path" and index != len(parts) - 1:
            msg = f"Route {path!r}: a catch-all segment must be the last one."
            raise ConfigurationError(msg)
        segments.append(segment)
    return segments


class _TrieNode:
    """A node in the route trie."""

    __slots__ = ("catch_all", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (one param edge per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all edge, consumes the rest of the path
        self.catch_all: _CatchAllEdge | None = None
        # Routes ending here, keyed by method (ANY_METHOD for any)
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    param_name: str
    node: _TrieNode


async def _default_not_found(w: ResponseWriter, request: Request) -> None:  # noqa: ARG001
    write_error(w, "404 page not found", 404)


async def _default_method_not_allowed(w: ResponseWriter, request: Request) -> None:  # noqa: ARG001
    write_error(w, "405 method not allowed", 405)


class TrieMatcher:
    """Trie-based implementation of the ``Matcher`` protocol.

    Usage::

        engine = TrieMatcher()
        engine.register_method("GET", "/users/{id:int}", boundary_handler)
        match = engine.match("GET", "/users/42")
        match.path_params  # {"id": "42"}
    """

    __slots__ = ("_method_not_allowed", "_not_found", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._not_found: BoundaryHandler = _default_not_found
        self._method_not_allowed: BoundaryHandler = _default_method_not_allowed

    # -- Registration --

    def register_any(self, pattern: str, handler: BoundaryHandler, *, name: str | None = None) -> None:
        """Register *handler* for every method at *pattern*."""
        self._add(Route(path=pattern, handler=handler, methods=frozenset({ANY_METHOD}), name=name))

    def register_method(
        self, method: str, pattern: str, handler: BoundaryHandler, *, name: str | None = None
    ) -> None:
        """Register *handler* for one method at *pattern*."""
        route = Route(path=pattern, handler=handler, methods=frozenset({method.upper()}), name=name)
        self._add(route)

    def set_not_found(self, handler: BoundaryHandler) -> None:
        self._not_found = handler

    def set_method_not_allowed(self, handler: BoundaryHandler) -> None:
        self._method_not_allowed = handler

    def _add(self, route: Route) -> None:
        node = self._root
        for seg in parse_path(route.path):
            if seg.param_type == "path":
                name = seg.param_name or WILDCARD
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(param_name=name, node=_TrieNode())
                elif node.catch_all.param_name != name:
                    msg = (
                        f"Route {route.path!r}: catch-all {seg.value!r} conflicts with "
                        f"{node.catch_all.param_name!r} at the same position."
                    )
                    raise ConfigurationError(msg)
                node = node.catch_all.node
                break

            if seg.is_param:
                if node.param_child is None:
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{CONVERTERS[seg.param_type]}$"),
                        node=_TrieNode(),
                    )
                elif (
                    node.param_child.param_name != seg.param_name
                    or node.param_child.param_type != seg.param_type
                ):
                    existing = node.param_child
                    msg = (
                        f"Route {route.path!r}: segment {seg.value!r} conflicts with "
                        f"{{{existing.param_name}:{existing.param_type}}} at the same position."
                    )
                    raise ConfigurationError(msg)
                node = node.param_child.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        for method in route.methods:
            if method in node.routes_by_method:
                logger.debug("replacing %s %s", method, route.path)
            node.routes_by_method[method] = route
        logger.debug("registered %s %s", ",".join(sorted(route.methods)), route.path)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """Every registered route, in trie order."""
        seen: set[int] = set()
        result: list[Route] = []
        self._collect_routes(self._root, seen, result)
        return result

    def _collect_routes(self, node: _TrieNode, seen: set[int], result: list[Route]) -> None:
        for route in node.routes_by_method.values():
            if id(route) not in seen:
                seen.add(id(route))
                result.append(route)
        for child in node.children.values():
            self._collect_routes(child, seen, result)
        if node.param_child is not None:
            self._collect_routes(node.param_child.node, seen, result)
        if node.catch_all is not None:
            self._collect_routes(node.catch_all.node, seen, result)

    # -- Matching --

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a method and path against the registered routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        method = method.upper()
        parts = [p for p in path.strip("/").split("/") if p]

        found = self._match_node(self._root, parts, 0, {}, method)
        if found is not None:
            node, params = found
            route = node.routes_by_method.get(method) or node.routes_by_method[ANY_METHOD]
            return RouteMatch(route=route, path_params=params)

        found = self._match_node(self._root, parts, 0, {}, None)
        if found is None:
            msg = f"No route matches {method} {path!r}"
            raise NotFound(msg)
        node, _ = found
        raise MethodNotAllowed(frozenset(node.routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
        method: str | None,
    ) -> tuple[_TrieNode, dict[str, str]] | None:
        """Find the first node that ends the path and accepts *method*.

        ``method=None`` accepts any node that has routes at all.
        """
        if index == len(parts):
            if self._accepts(node, method):
                return node, params
            return None

        part = parts[index]

        # 1. Static child (exact match)
        child = node.children.get(part)
        if child is not None:
            result = self._match_node(child, parts, index + 1, params, method)
            if result is not None:
                return result

        # 2. Parameter child
        edge = node.param_child
        if edge is not None and edge.regex.match(part):
            new_params = {**params, edge.param_name: part}
            result = self._match_node(edge.node, parts, index + 1, new_params, method)
            if result is not None:
                return result

        # 3. Catch-all
        if node.catch_all is not None and self._accepts(node.catch_all.node, method):
            remaining = "/".join(parts[index:])
            return node.catch_all.node, {**params, node.catch_all.param_name: remaining}

        return None

    @staticmethod
    def _accepts(node: _TrieNode, method: str | None) -> bool:
        routes = node.routes_by_method
        if method is None:
            return bool(routes)
        return method in routes or ANY_METHOD in routes

    # -- Dispatch --

    async def dispatch(self, w: ResponseWriter, request: Request) -> None:
        """Resolve *request* and run the matching boundary handler (or a hook)."""
        try:
            match = self.match(request.method, request.path)
        except MethodNotAllowed as exc:
            for name, value in exc.headers:
                w.headers.set(name, value)
            await self._method_not_allowed(w, request)
            return
        except NotFound:
            await self._not_found(w, request)
            return

        if match.path_params:
            request = request.with_path_params(match.path_params)
        await match.route.handler(w, request)

    def __repr__(self) -> str:
        return f"<TrieMatcher routes={len(self.routes)}>"
