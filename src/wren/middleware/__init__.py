"""Middleware: handler-to-handler transforms, composed by ``Chain``.

A middleware is any callable matching::

    def mw(next: Handler) -> Handler

Built-in middleware:
    log_requests -- One access-log line per request (``wren.access`` logger)
    set_header -- Set a fixed response header
    CORSMiddleware -- Cross-Origin Resource Sharing
"""

from wren.middleware.builtin import CORSConfig, CORSMiddleware, log_requests, set_header
from wren.middleware.chain import Chain, Middleware

__all__ = [
    "CORSConfig",
    "CORSMiddleware",
    "Chain",
    "Middleware",
    "log_requests",
    "set_header",
]
