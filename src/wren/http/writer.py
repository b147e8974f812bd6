"""The response sink handed to every handler.

A ``ResponseWriter`` buffers exactly one response. Headers stay mutable
until the status is committed by ``write_header`` (or implicitly by the
first ``write``); the header set is snapshotted at that moment, and any
later ``write_header`` call is logged and ignored.

Handlers must not assume they are the first to touch the writer: earlier
middleware may already have committed a redirect or an error. Check
``committed`` before writing a final response.
"""

import logging

from wren.http.headers import ResponseHeaders
from wren.http.response import Response

logger = logging.getLogger("wren.server")


class ResponseWriter:
    """Buffered, single-response sink.

    Usage::

        async def hello(w: ResponseWriter, request: Request) -> None:
            w.headers.set("Content-Type", "text/plain; charset=utf-8")
            w.write("hello")
    """

    __slots__ = ("_body", "_committed_headers", "_status", "headers")

    def __init__(self) -> None:
        self.headers = ResponseHeaders()
        self._status: int | None = None
        self._committed_headers: tuple[tuple[str, str], ...] = ()
        self._body = bytearray()

    @property
    def committed(self) -> bool:
        """True once a status has been written."""
        return self._status is not None

    @property
    def status(self) -> int | None:
        """The committed status, or ``None`` if nothing was written yet."""
        return self._status

    def write_header(self, status: int) -> None:
        """Commit the status code and the current header set.

        Only the first call has any effect.
        """
        if self._status is not None:
            logger.warning(
                "superfluous write_header(%d): status %d already written", status, self._status
            )
            return
        self._status = status
        self._committed_headers = self.headers.items()

    def write(self, data: str | bytes) -> int:
        """Append to the body, committing status 200 if needed."""
        if self._status is None:
            self.write_header(200)
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        self._body.extend(chunk)
        return len(chunk)

    def snapshot(self) -> Response:
        """Freeze what has been written so far.

        An untouched writer snapshots as an empty ``200``.
        """
        if self._status is None:
            return Response(status=200, headers=self.headers.items(), body=bytes(self._body))
        return Response(
            status=self._status,
            headers=self._committed_headers,
            body=bytes(self._body),
        )


def write_error(w: ResponseWriter, message: str, status: int) -> None:
    """Reply with *status* and a plain-text body of exactly *message*."""
    w.headers.delete("Content-Length")
    w.headers.set("Content-Type", "text/plain; charset=utf-8")
    w.headers.set("X-Content-Type-Options", "nosniff")
    w.write_header(status)
    w.write(message)
