"""Immutable HTTP request.

Frozen metadata with async body access. Path-rewriting wrappers such as
``strip_prefix`` derive a new request with ``with_path`` instead of
mutating the one they were given.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl, quote

from wren._internal.asgi import Receive, Scope
from wren.http.headers import Headers


async def _empty_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata is frozen at creation. The body is read asynchronously via
    ``body()``, ``text()``, ``json()`` or ``stream()`` and cached after the
    first full read, so middleware and the final handler can both read it.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query_string: bytes = b""
    raw_path: bytes = b""
    root_path: str = ""
    path_params: Mapping[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive = field(default=_empty_receive, repr=False, compare=False)

    # Private: shared cache so derived requests don't re-consume the body
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def query(self) -> dict[str, str]:
        """Query parameters, first value wins."""
        params: dict[str, str] = {}
        for key, value in parse_qsl(self.query_string.decode("latin-1"), keep_blank_values=True):
            params.setdefault(key, value)
        return params

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Derivation --

    def with_path(self, path: str, raw_path: bytes | None = None, root_path: str | None = None) -> Request:
        """Return a copy of this request seen at a different path."""
        return replace(
            self,
            path=path,
            raw_path=raw_path if raw_path is not None else quote(path).encode("ascii"),
            root_path=root_path if root_path is not None else self.root_path,
        )

    def with_path_params(self, params: Mapping[str, str]) -> Request:
        """Return a copy carrying the params captured by the matcher."""
        return replace(self, path_params={**self.path_params, **params})

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if "_body" in self._cache:
            yield self._cache["_body"]
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        raw = await self.body()
        return raw.decode("utf-8")

    async def json(self) -> Any:
        raw = await self.body()
        return json_module.loads(raw)

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        path = scope["path"]
        return cls(
            method=scope["method"].upper(),
            path=path,
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            raw_path=scope.get("raw_path") or quote(path).encode("ascii"),
            root_path=scope.get("root_path", ""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
