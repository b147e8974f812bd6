"""Server runner.

Starts a pounce ASGI server around a live ``Mux``. Debug configs run a
single worker with auto-reload.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren._internal.asgi import ASGIApp
    from wren.config import MuxConfig


def run_server(
    app: ASGIApp,
    config: MuxConfig,
    *,
    host: str | None = None,
    port: int | None = None,
    app_path: str | None = None,
) -> None:
    """Serve *app* with pounce until interrupted.

    Pounce's ``run()`` takes an import string, but here we already hold the
    ASGI callable, so ``pounce.Server`` is used directly.

    Args:
        app: ASGI callable (usually ``mux.asgi``).
        config: Server settings; ``host``/``port`` override its values.
        app_path: Optional ``"module:attribute"`` import string so pounce
            can re-import the app on reload.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    server_config = ServerConfig(
        host=host or config.host,
        port=port or config.port,
        workers=1 if config.debug else config.workers,
        reload=config.debug,
        reload_dirs=config.reload_dirs,
        log_level=config.log_level,
    )
    server = Server(server_config, app, app_path=app_path)
    server.run()
