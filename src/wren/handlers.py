"""Handler contract and stock handlers.

A handler is any async callable matching::

    async def handler(w: ResponseWriter, request: Request) -> Exception | None: ...

It writes its response to ``w`` and returns ``None`` on success, or an
exception describing the failure. No base class required; callable
objects work too. Plain ``def`` functions are adapted by ``HandlerFunc``.
"""

import html
import inspect
import mimetypes
import posixpath
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote, urlsplit

import anyio

from wren._internal.invoke import invoke
from wren.errors import error
from wren.http.request import Request
from wren.http.writer import ResponseWriter, write_error


class Handler(Protocol):
    """Protocol for wren handlers.

    Accepts both functions and callable objects::

        # Function handler
        async def show(w: ResponseWriter, request: Request) -> Exception | None:
            w.write("hi")
            return None

        # Class handler
        class Health:
            async def __call__(self, w, request) -> Exception | None:
                ...
    """

    async def __call__(self, w: ResponseWriter, request: Request) -> Exception | None: ...


@dataclass(frozen=True, slots=True)
class HandlerFunc:
    """Adapter that lets an ordinary function act as a Handler.

    The function may be sync or async and may return ``None`` or an
    exception, exactly like any other handler.
    """

    fn: Callable[..., Any]

    async def __call__(self, w: ResponseWriter, request: Request) -> Exception | None:
        return await invoke(self.fn, w, request)


def as_handler(obj: Callable[..., Any]) -> Handler:
    """Return *obj* as a Handler, wrapping it in ``HandlerFunc`` when needed.

    Coroutine functions and objects with an async ``__call__`` are returned
    unchanged.
    """
    if inspect.iscoroutinefunction(obj):
        return obj
    if not callable(obj):
        msg = f"{obj!r} is not callable and cannot be used as a handler"
        raise TypeError(msg)
    if not inspect.isfunction(obj) and inspect.iscoroutinefunction(type(obj).__call__):
        return obj
    return HandlerFunc(obj)


def handler_name(handler: object) -> str:
    """Best-effort readable name for route listings and log lines."""
    if isinstance(handler, HandlerFunc):
        handler = handler.fn
    return getattr(handler, "__name__", type(handler).__name__)


# -- Redirects --


def redirect(w: ResponseWriter, request: Request, url: str, code: int) -> None:
    """Reply with a redirect to *url*, which may be relative to the request path.

    The code should be in the 3xx range, usually 301, 302 or 303.
    """
    parts = urlsplit(url)
    if not parts.scheme and not parts.netloc:
        # Relative to the current path; keep a trailing slash if given.
        if not url.startswith("/"):
            base = request.path.rsplit("/", 1)[0] if "/" in request.path else ""
            url = f"{base}/{url}"
        trailing = url.endswith("/")
        path, sep, query = url.partition("?")
        path = posixpath.normpath(path)
        if path.startswith("//"):
            path = "/" + path.lstrip("/")
        if trailing and not path.endswith("/"):
            path += "/"
        url = path + sep + query

    if request.method in ("GET", "HEAD") and "Content-Type" not in w.headers:
        w.headers.set("Content-Type", "text/html; charset=utf-8")
    w.headers.set("Location", url)
    w.write_header(code)

    if request.method == "GET":
        phrase = _status_phrase(code)
        w.write(f'<a href="{html.escape(url)}">{phrase}</a>.\n')


def redirect_handler(url: str, code: int = 302) -> Handler:
    """Return a handler that redirects every request to *url* with *code*."""

    async def redirecting(w: ResponseWriter, request: Request) -> Exception | None:
        redirect(w, request, url, code)
        return None

    return redirecting


# -- Path rewriting --


def strip_prefix(prefix: str, handler: Handler) -> Handler:
    """Return a handler that serves requests with *prefix* removed from the path.

    Requests whose path does not begin with *prefix* get a 404 without
    reaching *handler*. Whatever failure *handler* reports is returned
    unchanged.
    """
    if not prefix:
        return handler

    async def stripping(w: ResponseWriter, request: Request) -> Exception | None:
        if not request.path.startswith(prefix):
            write_error(w, "404 page not found", 404)
            return None
        raw_prefix = quote(prefix).encode("ascii")
        raw_path = request.raw_path
        stripped_raw = raw_path[len(raw_prefix) :] if raw_path.startswith(raw_prefix) else None
        inner = request.with_path(
            request.path[len(prefix) :],
            raw_path=stripped_raw,
            root_path=request.root_path + prefix,
        )
        return await handler(w, inner)

    return stripping


# -- Constant failures --


def error_handler(code: int, message: str) -> Handler:
    """Return a handler that always fails with status *code* and *message*."""

    async def rejecting(w: ResponseWriter, request: Request) -> Exception | None:  # noqa: ARG001
        return error(code, message)

    return rejecting


# -- Static files --


def file_server(root: str | Path, *, index: str = "index.html") -> Handler:
    """Return a handler that serves files from the directory *root*.

    Files are looked up by ``request.path``; combine with ``strip_prefix``
    (or ``Mux.mount``) to serve a directory under a URL prefix. Directories
    are served through their index file, or as a plain HTML listing.
    Requests for ``.../index.html`` redirect to the directory itself.

    Filesystem errors are answered here (404/403/500) and never reported
    as handler failures.
    """
    root_path = Path(root).resolve()

    async def serving(w: ResponseWriter, request: Request) -> Exception | None:
        path = request.path if request.path.startswith("/") else "/" + request.path

        if path.endswith("/" + index):
            _local_redirect(w, "./")
            return None

        relative = posixpath.normpath(path).lstrip("/")
        target = anyio.Path(root_path / relative) if relative not in ("", ".") else anyio.Path(root_path)
        try:
            resolved = await target.resolve()
            if not Path(resolved).is_relative_to(root_path):
                write_error(w, "403 Forbidden", 403)
                return None

            if await resolved.is_dir():
                if not path.endswith("/"):
                    _local_redirect(w, posixpath.basename(path) + "/")
                    return None
                index_path = resolved / index
                if await index_path.is_file():
                    await _serve_file(w, request, index_path)
                else:
                    await _serve_listing(w, request, resolved)
                return None

            if not await resolved.is_file():
                write_error(w, "404 page not found", 404)
                return None

            await _serve_file(w, request, resolved)
        except FileNotFoundError:
            write_error(w, "404 page not found", 404)
        except PermissionError:
            write_error(w, "403 Forbidden", 403)
        except OSError:
            write_error(w, "500 Internal Server Error", 500)
        return None

    return serving


def _local_redirect(w: ResponseWriter, location: str) -> None:
    # Relative location: the client resolves it against the unstripped URL.
    w.headers.set("Location", location)
    w.write_header(301)


async def _serve_file(w: ResponseWriter, request: Request, file_path: anyio.Path) -> None:
    content_type, _ = mimetypes.guess_type(file_path.name)
    body = await file_path.read_bytes()
    w.headers.set("Content-Type", content_type or "application/octet-stream")
    w.headers.set("Content-Length", str(len(body)))
    w.write_header(200)
    if request.method != "HEAD":
        w.write(body)


async def _serve_listing(w: ResponseWriter, request: Request, directory: anyio.Path) -> None:
    names: list[str] = []
    async for entry in directory.iterdir():
        name = entry.name
        if await entry.is_dir():
            name += "/"
        names.append(name)

    lines = ["<!doctype html>", '<meta name="viewport" content="width=device-width">', "<pre>"]
    lines.extend(f'<a href="{quote(name)}">{html.escape(name)}</a>' for name in sorted(names))
    lines.append("</pre>")

    w.headers.set("Content-Type", "text/html; charset=utf-8")
    w.write_header(200)
    if request.method != "HEAD":
        w.write("\n".join(lines) + "\n")


def _status_phrase(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Redirect"
