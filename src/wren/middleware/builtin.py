"""Built-in middleware: access logging, CORS, fixed response headers."""

import logging
import time
from dataclasses import dataclass

from wren.handlers import Handler
from wren.http.request import Request
from wren.http.writer import ResponseWriter
from wren.middleware.chain import Middleware

access_logger = logging.getLogger("wren.access")


def log_requests(next: Handler) -> Handler:
    """Log one line per request: method, path, status, duration, failure.

    A failed request logs ``-`` as its status, because the status is only
    decided by the boundary adaptor after this middleware returns.
    """

    async def logged(w: ResponseWriter, request: Request) -> Exception | None:
        start = time.perf_counter()
        failure = await next(w, request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        if failure is not None:
            access_logger.info(
                "%s %s - %.1fms failed: %s", request.method, request.path, elapsed_ms, failure
            )
        else:
            status = w.status if w.status is not None else 200
            access_logger.info("%s %s %d %.1fms", request.method, request.path, status, elapsed_ms)
        return failure

    return logged


def set_header(name: str, value: str) -> Middleware:
    """Return middleware that sets a response header before the handler runs."""

    def middleware(next: Handler) -> Handler:
        async def with_header(w: ResponseWriter, request: Request) -> Exception | None:
            w.headers.set(name, value)
            return await next(w, request)

        return with_header

    return middleware


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS middleware configuration.

    All fields have secure defaults (nothing is allowed).
    Override what you need::

        CORSConfig(
            allow_origins=("https://example.com",),
            allow_methods=("GET", "POST"),
        )
    """

    allow_origins: tuple[str, ...] = ()
    allow_methods: tuple[str, ...] = ("GET", "HEAD", "OPTIONS")
    allow_headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 600  # 10 minutes


class CORSMiddleware:
    """Standards-compliant CORS middleware.

    Handles:
    - Preflight ``OPTIONS`` requests (answers 204 without calling the handler)
    - Simple and actual requests (adds CORS headers before the handler writes)
    - Credential support (``Access-Control-Allow-Credentials``)
    - Wildcard origins (``"*"``) when credentials are disabled

    Usage::

        mux.use(CORSMiddleware(CORSConfig(
            allow_origins=("https://example.com",),
            allow_methods=("GET", "POST", "PUT"),
            allow_headers=("Content-Type", "Authorization"),
        )))

    Preflight requests only reach this middleware when an ``OPTIONS``
    route (or an any-method route) exists for the path.
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    def _is_allowed_origin(self, origin: str) -> bool:
        if "*" in self.config.allow_origins:
            return True
        return origin in self.config.allow_origins

    def _add_cors_headers(self, w: ResponseWriter, origin: str) -> None:
        cfg = self.config

        if "*" in cfg.allow_origins and not cfg.allow_credentials:
            w.headers.set("Access-Control-Allow-Origin", "*")
        else:
            w.headers.set("Access-Control-Allow-Origin", origin)
            w.headers.add("Vary", "Origin")

        if cfg.allow_credentials:
            w.headers.set("Access-Control-Allow-Credentials", "true")

        if cfg.expose_headers:
            w.headers.set("Access-Control-Expose-Headers", ", ".join(cfg.expose_headers))

    def _preflight(self, w: ResponseWriter, origin: str, request_method: str | None) -> None:
        cfg = self.config
        self._add_cors_headers(w, origin)

        if request_method:
            w.headers.set("Access-Control-Allow-Methods", ", ".join(cfg.allow_methods))
        if cfg.allow_headers:
            w.headers.set("Access-Control-Allow-Headers", ", ".join(cfg.allow_headers))
        w.headers.set("Access-Control-Max-Age", str(cfg.max_age))
        w.write_header(204)

    def __call__(self, next: Handler) -> Handler:
        async def cors(w: ResponseWriter, request: Request) -> Exception | None:
            origin = request.headers.get("origin")

            # No Origin header, or not one we serve: not our business
            if origin is None or not self._is_allowed_origin(origin):
                return await next(w, request)

            if request.method == "OPTIONS":
                self._preflight(w, origin, request.headers.get("access-control-request-method"))
                return None

            self._add_cors_headers(w, origin)
            return await next(w, request)

        return cors
