"""Route records produced by the matching engine."""

from collections.abc import Mapping
from dataclasses import dataclass

from wren.routing.engine import BoundaryHandler

# Method key for routes registered with ``register_any``
ANY_METHOD = "*"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:   ``users``      (is_param=False)
    Param:    ``{id}``       (is_param=True, param_name="id")
    Typed:    ``{id:int}``   (is_param=True, param_name="id", param_type="int")
    Wildcard: ``*``          (is_param=True, param_name="*", param_type="path")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """One registration: full pattern, methods, and the boundary handler.

    ``methods`` is ``{ANY_METHOD}`` for any-method registrations. ``name``
    is the readable name of the handler originally registered.
    """

    path: str
    handler: BoundaryHandler
    methods: frozenset[str]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful match."""

    route: Route
    path_params: Mapping[str, str]
