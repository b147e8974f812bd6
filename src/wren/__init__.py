"""Wren: an HTTP request router with composable middleware.

Handlers receive a response writer and a request, and report failure by
returning (or raising) an exception. The Mux turns failures into a single
error response.

Basic usage::

    from wren import Mux, error

    mux = Mux()

    @mux.get("/users/{id:int}")
    async def show_user(w, request):
        user = await find_user(request.path_params["id"])
        if user is None:
            return error(404, "no such user")
        w.write(user.name)

    mux.run()

Any ASGI server can host ``mux.asgi``; ``mux.run()`` uses pounce
(``pip install wren[server]``).
"""

__version__ = "0.1.0"
__all__ = [
    "Chain",
    "ConfigurationError",
    "Handler",
    "HandlerFunc",
    "MethodNotAllowed",
    "Middleware",
    "Mux",
    "MuxConfig",
    "NotFound",
    "Request",
    "Response",
    "ResponseWriter",
    "StatusError",
    "WrenError",
    "error",
    "error_handler",
    "errorf",
    "file_server",
    "redirect_handler",
    "strip_prefix",
    "write_error",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "Mux":
        from wren.mux import Mux

        return Mux

    if name == "MuxConfig":
        from wren.config import MuxConfig

        return MuxConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name in ("ResponseWriter", "write_error"):
        from wren.http import writer as _writer

        return getattr(_writer, name)

    if name in ("Chain", "Middleware"):
        from wren.middleware import chain as _chain

        return getattr(_chain, name)

    if name in (
        "Handler",
        "HandlerFunc",
        "error_handler",
        "file_server",
        "redirect_handler",
        "strip_prefix",
    ):
        from wren import handlers as _handlers

        return getattr(_handlers, name)

    if name in (
        "ConfigurationError",
        "MethodNotAllowed",
        "NotFound",
        "StatusError",
        "WrenError",
        "error",
        "errorf",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
