"""Async test client for wren applications.

Drives an ASGI callable directly (no sockets) and returns the same
``Response`` snapshot type the server sends.
"""

import json as json_module
from typing import Any
from urllib.parse import quote

from wren._internal.asgi import ASGIApp, Message
from wren.http.response import Response


def build_scope(method: str, target: str, headers: dict[str, str] | None = None) -> dict[str, Any]:
    """Build an ASGI HTTP scope for *method* and *target* (path plus query)."""
    path, _, query = target.partition("?")
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "scheme": "http",
        "path": path,
        "raw_path": quote(path).encode("ascii"),
        "query_string": query.encode("latin-1"),
        "root_path": "",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


def collect_response(messages: list[Message]) -> Response:
    """Assemble the ASGI messages an app sent into one ``Response``."""
    start = next((m for m in messages if m["type"] == "http.response.start"), None)
    if start is None:
        msg = "The app finished without sending http.response.start"
        raise RuntimeError(msg)
    body = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")
    return Response(
        status=start["status"],
        headers=tuple(
            (name.decode("latin-1"), value.decode("latin-1"))
            for name, value in start.get("headers", ())
        ),
        body=body,
    )


class TestClient:
    """Async test client for any ASGI callable, usually ``mux.asgi``.

    Usage::

        async with TestClient(mux.asgi) as client:
            response = await client.get("/users/42")
            assert response.status == 200

            response = await client.post("/users", json={"name": "ada"})
            assert response.status == 201
    """

    __test__ = False  # Tell pytest this is not a test class
    __slots__ = ("app",)

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def request(
        self,
        method: str,
        target: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        json: Any = None,
    ) -> Response:
        """Send one request through the app and return its response.

        *json*, when given, replaces *body* and sets a JSON content type
        unless *headers* already names one.
        """
        headers = dict(headers or {})
        if json is not None:
            body = json_module.dumps(json).encode("utf-8")
            if not any(name.lower() == "content-type" for name in headers):
                headers["content-type"] = "application/json"

        pending = [{"type": "http.request", "body": body, "more_body": False}]
        sent: list[Message] = []

        async def receive() -> Message:
            if pending:
                return pending.pop()
            return {"type": "http.disconnect"}

        async def send(message: Message) -> None:
            sent.append(message)

        await self.app(build_scope(method, target, headers), receive, send)
        return collect_response(sent)

    # -- Verb shortcuts --

    async def get(self, target: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("GET", target, headers=headers)

    async def head(self, target: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("HEAD", target, headers=headers)

    async def options(self, target: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("OPTIONS", target, headers=headers)

    async def delete(self, target: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("DELETE", target, headers=headers)

    async def post(self, target: str, **kwargs: Any) -> Response:
        """Send a POST; accepts ``headers``, ``body`` and ``json`` like ``request``."""
        return await self.request("POST", target, **kwargs)

    async def put(self, target: str, **kwargs: Any) -> Response:
        return await self.request("PUT", target, **kwargs)

    async def patch(self, target: str, **kwargs: Any) -> Response:
        return await self.request("PATCH", target, **kwargs)
