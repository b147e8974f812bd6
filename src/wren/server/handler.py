"""ASGI handler: the only component that touches raw ASGI directly.

Builds a Request and a fresh ResponseWriter per HTTP scope, hands both to
the dispatcher, then sends whatever the writer holds. Lifespan scopes are
acknowledged so any ASGI server can host a ``Mux``.
"""

import logging

from wren._internal.asgi import Receive, Scope, Send
from wren.http.request import Request
from wren.http.response import Response
from wren.http.writer import ResponseWriter
from wren.routing.engine import BoundaryHandler
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatch: BoundaryHandler,
) -> None:
    """Process a single HTTP request through *dispatch*."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    w = ResponseWriter()
    try:
        await dispatch(w, request)
        response = w.snapshot()
    except Exception:
        # Boundary handlers never fail; this is a bug in a hook or the engine.
        logger.exception("500 %s %s", request.method, request.path)
        response = Response(
            status=500,
            headers=(("Content-Type", "text/plain; charset=utf-8"),),
            body=b"Internal Server Error",
        )

    await send_response(response, send, method=request.method)


async def handle_lifespan(scope: Scope, receive: Receive, send: Send) -> None:  # noqa: ARG001
    """Acknowledge ASGI lifespan startup and shutdown."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return
