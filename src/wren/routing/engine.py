"""The matching-engine contract ``Mux`` delegates to.

Engines map a concrete method and path to a registered handler. They
never see middleware or failures: everything they store is already a
``BoundaryHandler``, the infallible shape produced by
``wren.server.adaptor.adapt``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.writer import ResponseWriter
    from wren.routing.route import Route

type BoundaryHandler = Callable[[ResponseWriter, Request], Awaitable[None]]


class Matcher(Protocol):
    """Narrow path-matching capability.

    Registration happens during setup only. Once serving starts the engine
    is shared read-only by every request; registering concurrently with
    dispatch is the caller's responsibility to avoid.
    """

    def register_any(self, pattern: str, handler: BoundaryHandler, *, name: str | None = None) -> None: ...

    def register_method(
        self, method: str, pattern: str, handler: BoundaryHandler, *, name: str | None = None
    ) -> None: ...

    def set_not_found(self, handler: BoundaryHandler) -> None: ...

    def set_method_not_allowed(self, handler: BoundaryHandler) -> None: ...

    async def dispatch(self, w: ResponseWriter, request: Request) -> None: ...

    @property
    def routes(self) -> Sequence[Route]: ...
