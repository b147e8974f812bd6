"""Tests for wren.middleware.chain — immutable middleware chains."""

import pytest

from wren.handlers import Handler
from wren.http.request import Request
from wren.http.writer import ResponseWriter
from wren.middleware.chain import Chain, Middleware


def _tagging(tag: str, calls: list[str]) -> Middleware:
    def middleware(next: Handler) -> Handler:
        async def tagged(w: ResponseWriter, request: Request) -> Exception | None:
            calls.append(tag)
            return await next(w, request)

        return tagged

    return middleware


def _final(calls: list[str]) -> Handler:
    async def handler(w: ResponseWriter, request: Request) -> Exception | None:
        calls.append("handler")
        return None

    return handler


async def _serve(handler: Handler) -> None:
    await handler(ResponseWriter(), Request(method="GET", path="/"))


class TestThen:
    @pytest.mark.anyio
    async def test_request_order(self) -> None:
        calls: list[str] = []
        chain = Chain(_tagging("m1", calls), _tagging("m2", calls), _tagging("m3", calls))
        await _serve(chain.then(_final(calls)))
        assert calls == ["m1", "m2", "m3", "handler"]

    def test_empty_chain_returns_handler_itself(self) -> None:
        handler = _final([])
        assert Chain().then(handler) is handler

    @pytest.mark.anyio
    async def test_reusable_for_many_handlers(self) -> None:
        calls: list[str] = []
        chain = Chain(_tagging("m", calls))
        first = chain.then(_final(calls))
        second = chain.then(_final(calls))
        await _serve(first)
        await _serve(second)
        assert calls == ["m", "handler", "m", "handler"]

    @pytest.mark.anyio
    async def test_short_circuit(self) -> None:
        calls: list[str] = []

        def stop(next: Handler) -> Handler:
            async def stopped(w: ResponseWriter, request: Request) -> Exception | None:
                w.write_header(401)
                return None

            return stopped

        await _serve(Chain(stop, _tagging("after", calls)).then(_final(calls)))
        assert calls == []

    @pytest.mark.anyio
    async def test_failure_propagates_outward(self) -> None:
        boom = ValueError("boom")

        async def failing(w: ResponseWriter, request: Request) -> Exception | None:
            return boom

        handler = Chain(_tagging("m", [])).then(failing)
        assert await handler(ResponseWriter(), Request(method="GET", path="/")) is boom


class TestDerivation:
    def test_append_does_not_mutate(self) -> None:
        m1, m2, m3 = _tagging("1", []), _tagging("2", []), _tagging("3", [])
        std = Chain(m1, m2)
        ext = std.append(m3)
        assert std.middlewares == (m1, m2)
        assert ext.middlewares == (m1, m2, m3)

    def test_sibling_appends_are_independent(self) -> None:
        m1, m2, m3 = _tagging("1", []), _tagging("2", []), _tagging("3", [])
        base = Chain(m1)
        left = base.append(m2)
        right = base.append(m3)
        assert left.middlewares == (m1, m2)
        assert right.middlewares == (m1, m3)

    def test_extend(self) -> None:
        m1, m2, m3 = _tagging("1", []), _tagging("2", []), _tagging("3", [])
        first = Chain(m1)
        second = Chain(m2, m3)
        combined = first.extend(second)
        assert combined.middlewares == (m1, m2, m3)
        assert first.middlewares == (m1,)
        assert second.middlewares == (m2, m3)

    def test_len(self) -> None:
        assert len(Chain()) == 0
        assert len(Chain(_tagging("a", []), _tagging("b", []))) == 2

    def test_frozen(self) -> None:
        chain = Chain()
        with pytest.raises(AttributeError):
            chain.middlewares = ()  # type: ignore[misc]
