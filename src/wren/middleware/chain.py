"""Middleware type and the immutable Chain.

A middleware is any callable that takes a handler and returns a handler::

    def timing(next: Handler) -> Handler:
        async def timed(w: ResponseWriter, request: Request) -> Exception | None:
            start = time.monotonic()
            failure = await next(w, request)
            logger.info("%s took %.3fs", request.path, time.monotonic() - start)
            return failure
        return timed

It must not mutate the handler it wraps. A middleware that wants to stop
the request simply does not call ``next`` and writes (or returns) its own
outcome instead.
"""

from collections.abc import Callable
from dataclasses import dataclass

from wren.handlers import Handler

type Middleware = Callable[[Handler], Handler]


@dataclass(frozen=True, slots=True, init=False)
class Chain:
    """An ordered, immutable sequence of middleware.

    Once created, a chain always holds the same middleware in the same
    order. ``append`` and ``extend`` return new chains.

    Usage::

        std = Chain(rate_limit, csrf)
        index = std.then(index_handler)
        auth = std.append(require_login).then(account_handler)
    """

    middlewares: tuple[Middleware, ...] = ()

    def __init__(self, *middlewares: Middleware) -> None:
        object.__setattr__(self, "middlewares", tuple(middlewares))

    def then(self, handler: Handler) -> Handler:
        """Wrap *handler* in every middleware of the chain.

        ``Chain(m1, m2, m3).then(h)`` is ``m1(m2(m3(h)))``: a request
        reaches m1 first, then m2, then m3, then h (assuming each one
        calls the next). Each call builds a fresh wrapping, so one chain
        can be reused for any number of handlers.

        An empty chain returns *handler* itself.
        """
        for middleware in reversed(self.middlewares):
            handler = middleware(handler)
        return handler

    def append(self, *middlewares: Middleware) -> "Chain":
        """Return a new chain with *middlewares* added last in the request flow.

        ::

            std = Chain(m1, m2)
            ext = std.append(m3, m4)
            # std: m1 -> m2
            # ext: m1 -> m2 -> m3 -> m4
        """
        return Chain(*self.middlewares, *middlewares)

    def extend(self, chain: "Chain") -> "Chain":
        """Return a new chain with every middleware of *chain* added last."""
        return self.append(*chain.middlewares)

    def __len__(self) -> int:
        return len(self.middlewares)
