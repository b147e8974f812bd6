"""Immutable response snapshot.

A ``Response`` is what a ``ResponseWriter`` has accumulated by the time
the request finishes. The sender turns it into ASGI messages and the
test client hands it back to tests.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Response:
    """A finished HTTP response: status, header pairs, and body bytes."""

    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value for header *name* (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def text(self) -> str:
        """Body as string."""
        return self.body.decode("utf-8")
