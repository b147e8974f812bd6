"""Mux: scoped router over a shared matching engine.

A root ``Mux`` owns the matching engine. ``with_``, ``group`` and
``route`` derive new instances that share the engine and config but own
their middleware stack and path prefix:

    mux = Mux()
    mux.use(log_requests)

    @mux.get("/health")
    def health(w, request):
        w.write("ok")

    def api(r: Mux) -> None:
        r.use(require_token)
        r.get("/users/{id:int}", show_user)   # GET /api/users/42

    mux.route("/api", api)

Setup (``use`` and every registration) must finish before serving
starts. The engine is then shared read-only by all requests; structural
changes while serving are not supported.
"""

from collections.abc import Callable
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren.config import MuxConfig
from wren.errors import ConfigurationError
from wren.handlers import Handler, as_handler, handler_name, strip_prefix
from wren.http.request import Request
from wren.http.writer import ResponseWriter
from wren.middleware.chain import Chain, Middleware
from wren.routing.engine import Matcher
from wren.routing.route import Route
from wren.routing.trie import TrieMatcher
from wren.server.adaptor import adapt
from wren.server.handler import handle_lifespan, handle_request

HTTP_METHODS = frozenset(
    {"CONNECT", "DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT", "TRACE"}
)

type HandlerLike = Handler | Callable[..., Any]


def join_pattern(prefix: str, pattern: str) -> str:
    """Join a prefix and a pattern with exactly one separator between them."""
    if not prefix:
        return pattern
    return prefix.rstrip("/") + "/" + pattern.lstrip("/")


class Mux:
    """HTTP request multiplexer with scoped middleware and prefixes.

    A ``Mux`` is itself a handler (``await mux(w, request)``), so it can be
    mounted under another Mux. ``mux.asgi`` is its ASGI 3.0 entry point.
    """

    __slots__ = ("_config", "_engine", "_middlewares", "_prefix")

    def __init__(self, config: MuxConfig | None = None, *, engine: Matcher | None = None) -> None:
        self._config: MuxConfig = config or MuxConfig()
        self._engine: Matcher = engine if engine is not None else TrieMatcher()
        self._middlewares: tuple[Middleware, ...] = ()
        self._prefix: str = ""

    def _derive(self, middlewares: tuple[Middleware, ...], prefix: str) -> "Mux":
        child = Mux.__new__(Mux)
        child._config = self._config
        child._engine = self._engine
        child._middlewares = middlewares
        child._prefix = prefix
        return child

    # -- Properties --

    @property
    def config(self) -> MuxConfig:
        return self._config

    @property
    def engine(self) -> Matcher:
        return self._engine

    @property
    def prefix(self) -> str:
        """Path prefix accumulated from ancestor ``route`` calls."""
        return self._prefix

    @property
    def middlewares(self) -> tuple[Middleware, ...]:
        """Middleware applied to handlers registered from now on."""
        return self._middlewares

    @property
    def routes(self) -> list[Route]:
        """Every route registered on the shared engine."""
        return list(self._engine.routes)

    # -- Composition --

    def use(self, *middlewares: Middleware) -> None:
        """Append middleware to this Mux's stack.

        Only handlers registered afterwards (here or on instances derived
        afterwards) are wrapped; earlier registrations are unaffected.
        """
        self._middlewares = (*self._middlewares, *middlewares)

    def with_(self, *middlewares: Middleware) -> "Mux":
        """Return a Mux with *middlewares* added, for one-off registrations.

        ::

            mux.with_(require_admin).delete("/users/{id}", delete_user)
        """
        return self._derive((*self._middlewares, *middlewares), self._prefix)

    def group(self, fn: Callable[["Mux"], Any] | None = None) -> "Mux":
        """Return an inline Mux with a copy of the middleware stack.

        *fn*, if given, is called with the new Mux, which scopes any
        ``use`` calls it makes to the routes it registers.
        """
        inner = self.with_()
        if fn is not None:
            fn(inner)
        return inner

    def route(self, pattern: str, fn: Callable[["Mux"], Any] | None = None) -> "Mux":
        """Return a Mux whose routes all live under *pattern*.

        The new prefix is this prefix plus *pattern*, normalised to start and
        end with ``/``: ``route("/v1")`` then ``route("api")`` registers under
        ``/v1/api/``.
        """
        joined = join_pattern(self._prefix, pattern).strip("/")
        prefix = f"/{joined}/" if joined else "/"
        inner = self._derive(self._middlewares, prefix)
        if fn is not None:
            fn(inner)
        return inner

    # -- Registration --

    def _wrap(self, handler: HandlerLike) -> tuple[Any, str]:
        resolved = as_handler(handler)
        boundary = adapt(Chain(*self._middlewares).then(resolved))
        return boundary, handler_name(handler)

    def handle(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        """Register *handler* for every method at *pattern*.

        Without *handler*, returns a decorator.
        """
        if handler is None:

            def decorator(func: HandlerLike) -> HandlerLike:
                self.handle(pattern, func)
                return func

            return decorator

        boundary, name = self._wrap(handler)
        self._engine.register_any(join_pattern(self._prefix, pattern), boundary, name=name)
        return None

    def method(
        self, method: str, pattern: str, handler: HandlerLike | None = None
    ) -> Any:
        """Register *handler* for one HTTP *method* at *pattern*.

        Without *handler*, returns a decorator::

            @mux.method("GET", "/")
            def index(w, request): ...
        """
        verb = method.upper()
        if verb not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {method!r}. Expected one of: {', '.join(sorted(HTTP_METHODS))}"
            raise ConfigurationError(msg)

        if handler is None:

            def decorator(func: HandlerLike) -> HandlerLike:
                self.method(verb, pattern, func)
                return func

            return decorator

        boundary, name = self._wrap(handler)
        self._engine.register_method(verb, join_pattern(self._prefix, pattern), boundary, name=name)
        return None

    def connect(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("CONNECT", pattern, handler)

    def delete(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("DELETE", pattern, handler)

    def get(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("GET", pattern, handler)

    def head(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("HEAD", pattern, handler)

    def options(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("OPTIONS", pattern, handler)

    def patch(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("PATCH", pattern, handler)

    def post(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("POST", pattern, handler)

    def put(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("PUT", pattern, handler)

    def trace(self, pattern: str, handler: HandlerLike | None = None) -> Any:
        return self.method("TRACE", pattern, handler)

    def mount(self, pattern: str, handler: HandlerLike) -> None:
        """Serve everything under *pattern* with *handler*, path stripped.

        ::

            mux.mount("/static", file_server("./public"))
            mux.mount("/admin", admin_mux)   # admin_mux sees "/users", not "/admin/users"
        """
        base = "/" + join_pattern(self._prefix, pattern).strip("/")
        if base == "/":
            msg = "mount() needs a non-root pattern; register the handler with handle('/*') instead."
            raise ConfigurationError(msg)
        boundary, _ = self._wrap(strip_prefix(base, as_handler(handler)))
        name = handler_name(handler)
        self._engine.register_any(base, boundary, name=name)
        self._engine.register_any(base + "/*", boundary, name=name)

    # -- Hooks --

    def not_found(self, handler: HandlerLike) -> None:
        """Set the handler used when no route matches the path.

        The default replies ``404 page not found``.
        """
        self._engine.set_not_found(adapt(as_handler(handler)))

    def method_not_allowed(self, handler: HandlerLike) -> None:
        """Set the handler used when a path matches but its method doesn't.

        The ``Allow`` header is already set when *handler* runs. The
        default replies ``405 method not allowed``.
        """
        self._engine.set_method_not_allowed(adapt(as_handler(handler)))

    # -- Serving --

    async def __call__(self, w: ResponseWriter, request: Request) -> Exception | None:
        """Dispatch *request* through the engine. Never reports a failure."""
        await self._engine.dispatch(w, request)
        return None

    async def asgi(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await handle_lifespan(scope, receive, send)
            return
        await handle_request(scope, receive, send, dispatch=self._engine.dispatch)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start serving with pounce (``pip install wren[server]``)."""
        from wren.server.dev import run_server

        run_server(self.asgi, self._config, host=host, port=port)

    def __repr__(self) -> str:
        return f"<Mux prefix={self._prefix!r} middlewares={len(self._middlewares)}>"
