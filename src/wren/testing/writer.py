"""A ResponseWriter that records every status write, for unit tests.

Lets a test call a handler or middleware directly and assert how many
times it tried to commit a status, not only the final outcome.
"""

from wren.http.writer import ResponseWriter


class RecordingWriter(ResponseWriter):
    """``ResponseWriter`` that keeps a log of ``write_header`` calls.

    Usage::

        w = RecordingWriter()
        await adapt(handler)(w, request)
        assert w.header_writes == [404]
    """

    __slots__ = ("header_writes",)

    def __init__(self) -> None:
        super().__init__()
        self.header_writes: list[int] = []

    def write_header(self, status: int) -> None:
        self.header_writes.append(status)
        super().write_header(status)
