"""Tests for wren.handlers — handler adaptation and stock handlers."""

from urllib.parse import quote

import pytest

from wren.errors import StatusError, error
from wren.handlers import (
    HandlerFunc,
    as_handler,
    error_handler,
    handler_name,
    redirect,
    redirect_handler,
    strip_prefix,
)
from wren.http.request import Request
from wren.http.writer import ResponseWriter
from wren.mux import Mux
from wren.server.adaptor import adapt
from wren.testing import TestClient


async def _serve(handler, method: str = "GET", path: str = "/") -> tuple[ResponseWriter, object]:
    w = ResponseWriter()
    failure = await handler(w, Request(method=method, path=path, raw_path=quote(path).encode("ascii")))
    return w, failure


class TestAsHandler:
    def test_coroutine_function_unchanged(self) -> None:
        async def show(w: ResponseWriter, request: Request) -> Exception | None:
            return None

        assert as_handler(show) is show

    def test_sync_function_wrapped(self) -> None:
        def show(w: ResponseWriter, request: Request) -> None:
            return None

        handler = as_handler(show)
        assert isinstance(handler, HandlerFunc)
        assert handler.fn is show

    def test_async_callable_object_unchanged(self) -> None:
        class Health:
            async def __call__(self, w: ResponseWriter, request: Request) -> Exception | None:
                return None

        health = Health()
        assert as_handler(health) is health

    def test_mux_is_a_handler(self) -> None:
        mux = Mux()
        assert as_handler(mux) is mux

    def test_not_callable(self) -> None:
        with pytest.raises(TypeError, match="not callable"):
            as_handler("nope")  # type: ignore[arg-type]

    def test_handler_name_unwraps_handler_func(self) -> None:
        def list_users(w: ResponseWriter, request: Request) -> None:
            return None

        assert handler_name(as_handler(list_users)) == "list_users"


class TestHandlerFunc:
    @pytest.mark.anyio
    async def test_sync_success(self) -> None:
        def hello(w: ResponseWriter, request: Request) -> None:
            w.write("hello")

        w, failure = await _serve(HandlerFunc(hello))
        assert failure is None
        assert w.snapshot().body == b"hello"

    @pytest.mark.anyio
    async def test_sync_failure_returned(self) -> None:
        def refuse(w: ResponseWriter, request: Request) -> Exception | None:
            return error(401, "login required")

        _, failure = await _serve(HandlerFunc(refuse))
        assert isinstance(failure, StatusError)
        assert failure.status == 401

    @pytest.mark.anyio
    async def test_async_function(self) -> None:
        async def hello(w: ResponseWriter, request: Request) -> None:
            w.write("async hello")

        w, _ = await _serve(HandlerFunc(hello))
        assert w.snapshot().body == b"async hello"


class TestRedirect:
    @pytest.mark.anyio
    async def test_absolute_path(self) -> None:
        w, failure = await _serve(redirect_handler("/login"), path="/account")
        response = w.snapshot()
        assert failure is None
        assert response.status == 302
        assert response.header("Location") == "/login"
        assert response.content_type == "text/html; charset=utf-8"
        assert response.text == '<a href="/login">Found</a>.\n'

    @pytest.mark.anyio
    async def test_custom_code(self) -> None:
        w, _ = await _serve(redirect_handler("/new", 301), path="/old")
        assert w.snapshot().status == 301
        assert "Moved Permanently" in w.snapshot().text

    @pytest.mark.anyio
    async def test_full_url_unchanged(self) -> None:
        w, _ = await _serve(redirect_handler("https://example.com/x?y=1"), path="/a")
        assert w.snapshot().header("Location") == "https://example.com/x?y=1"

    @pytest.mark.anyio
    async def test_relative_to_request_path(self) -> None:
        w, _ = await _serve(redirect_handler("other"), path="/a/b")
        assert w.snapshot().header("Location") == "/a/other"

    @pytest.mark.anyio
    async def test_dot_segments_cleaned(self) -> None:
        w, _ = await _serve(redirect_handler("../up"), path="/a/b/c")
        assert w.snapshot().header("Location") == "/a/up"

    @pytest.mark.anyio
    async def test_trailing_slash_kept(self) -> None:
        w, _ = await _serve(redirect_handler("sub/"), path="/a/b")
        assert w.snapshot().header("Location") == "/a/sub/"

    @pytest.mark.anyio
    async def test_query_kept(self) -> None:
        w, _ = await _serve(redirect_handler("/search?q=a/b"), path="/")
        assert w.snapshot().header("Location") == "/search?q=a/b"

    @pytest.mark.anyio
    async def test_post_has_no_body(self) -> None:
        w, _ = await _serve(redirect_handler("/done", 303), method="POST", path="/form")
        response = w.snapshot()
        assert response.status == 303
        assert response.body == b""
        assert response.content_type is None

    def test_helper_keeps_existing_content_type(self) -> None:
        w = ResponseWriter()
        w.headers.set("Content-Type", "text/plain")
        redirect(w, Request(method="GET", path="/"), "/x", 307)
        assert w.snapshot().content_type == "text/plain"


class TestStripPrefix:
    @pytest.mark.anyio
    async def test_inner_sees_stripped_path(self) -> None:
        seen: list[Request] = []

        async def inner(w: ResponseWriter, request: Request) -> Exception | None:
            seen.append(request)
            return None

        await _serve(strip_prefix("/api", inner), path="/api/users")
        assert seen[0].path == "/users"
        assert seen[0].raw_path == b"/users"
        assert seen[0].root_path == "/api"

    @pytest.mark.anyio
    async def test_non_matching_path_is_404(self) -> None:
        called = False

        async def inner(w: ResponseWriter, request: Request) -> Exception | None:
            nonlocal called
            called = True
            return None

        w, failure = await _serve(strip_prefix("/api", inner), path="/other")
        assert called is False
        assert failure is None
        assert w.snapshot().status == 404
        assert w.snapshot().body == b"404 page not found"

    @pytest.mark.anyio
    async def test_inner_failure_returned(self) -> None:
        boom = error(409, "conflict")

        async def inner(w: ResponseWriter, request: Request) -> Exception | None:
            return boom

        _, failure = await _serve(strip_prefix("/api", inner), path="/api/x")
        assert failure is boom

    def test_empty_prefix_is_identity(self) -> None:
        async def inner(w: ResponseWriter, request: Request) -> Exception | None:
            return None

        assert strip_prefix("", inner) is inner

    @pytest.mark.anyio
    async def test_non_ascii_prefix(self) -> None:
        seen: list[Request] = []

        async def inner(w: ResponseWriter, request: Request) -> Exception | None:
            seen.append(request)
            return None

        w, failure = await _serve(strip_prefix("/日本", inner), path="/日本/x")
        assert failure is None
        assert w.committed is False
        assert seen[0].path == "/x"
        assert seen[0].raw_path == b"/x"
        assert seen[0].root_path == "/日本"

    @pytest.mark.anyio
    async def test_non_ascii_mount(self) -> None:
        sub = Mux()
        sub.get("/{name}", lambda w, request: w.write_header(204))
        mux = Mux()
        mux.mount("/日本", sub)
        async with TestClient(mux.asgi) as client:
            response = await client.get("/日本/x")
        assert response.status == 204


class TestErrorHandler:
    @pytest.mark.anyio
    async def test_returns_status_failure(self) -> None:
        w, failure = await _serve(error_handler(403, "members only"))
        assert isinstance(failure, StatusError)
        assert failure.status == 403
        assert str(failure) == "members only"
        assert w.committed is False

    @pytest.mark.anyio
    async def test_through_adaptor(self) -> None:
        w = ResponseWriter()
        await adapt(error_handler(410, "gone for good"))(w, Request(method="GET", path="/"))
        assert w.snapshot().status == 410
        assert w.snapshot().body == b"gone for good"
