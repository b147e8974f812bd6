"""ASGI response sending: turns a finished Response into ASGI messages."""

from wren._internal.asgi import Send
from wren.http.response import Response


def body_allowed(status: int, method: str = "GET") -> bool:
    """Whether a response to *method* with *status* may carry a body."""
    # RFC 9110: 1xx, 204 and 304 responses and HEAD replies have no body.
    if method == "HEAD":
        return False
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Translate a wren Response into ASGI ``send()`` calls."""
    raw_headers: list[tuple[bytes, bytes]] = []
    has_length = False
    for name, value in response.headers:
        lowered = name.lower()
        if lowered == "content-length":
            has_length = True
        raw_headers.append((lowered.encode("latin-1"), value.encode("latin-1")))

    body = response.body if body_allowed(response.status, method) else b""

    if not has_length and not (100 <= response.status < 200 or response.status == 204):
        # A HEAD reply advertises the length the GET body would have had.
        length = len(response.body) if method == "HEAD" and response.status != 304 else len(body)
        raw_headers.append((b"content-length", str(length).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": int(response.status),
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
