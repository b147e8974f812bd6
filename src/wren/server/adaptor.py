"""Boundary adaptor: fallible handler in, infallible handler out.

The single place where a handler failure becomes an HTTP response:

- no failure: nothing more is written (the handler already answered)
- status failure: the failure's headers, then its status and message
- plain failure: status 500 and the failure's message

Exactly one response write per failure. Exceptions raised out of the
handler are treated the same as returned ones. Return values that are
not exceptions are ignored.
"""

import logging

from wren.errors import StatusError, status_of
from wren.handlers import Handler, handler_name
from wren.http.request import Request
from wren.http.writer import ResponseWriter, write_error
from wren.routing.engine import BoundaryHandler

logger = logging.getLogger("wren.server")


def adapt(handler: Handler) -> BoundaryHandler:
    """Wrap *handler* so that any failure it reports is written to the response."""

    async def boundary(w: ResponseWriter, request: Request) -> None:
        try:
            failure = await handler(w, request)
        except Exception as exc:
            failure = exc
        if isinstance(failure, BaseException):
            write_failure(w, request, failure)
        elif failure is not None:
            logger.debug("%s returned %r, not a failure; ignored", boundary.__name__, failure)

    boundary.__name__ = handler_name(handler)
    return boundary


def write_failure(w: ResponseWriter, request: Request, failure: BaseException) -> None:
    """Translate *failure* into a single status response on *w*."""
    if w.committed:
        logger.error(
            "%s %s failed after the response was started (status %s): %s",
            request.method,
            request.path,
            w.status,
            failure,
            exc_info=failure,
        )
        return

    status = status_of(failure)
    if status is not None:
        logger.debug("%d %s %s: %s", status, request.method, request.path, failure)
        if isinstance(failure, StatusError):
            for name, value in failure.headers:
                w.headers.set(name, value)
        write_error(w, str(failure), status)
    else:
        logger.error("500 %s %s: %s", request.method, request.path, failure, exc_info=failure)
        write_error(w, str(failure), 500)
