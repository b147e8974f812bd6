"""Mux configuration.

MuxConfig is a frozen dataclass, immutable after creation, shared by a
root ``Mux`` and every instance derived from it.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MuxConfig:
    """Server settings. All fields have sensible defaults::

        config = MuxConfig(debug=True, port=3000)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    workers: int = 1

    # Development: single worker + auto-reload
    debug: bool = False
    reload_dirs: tuple[str, ...] = ()  # Extra directories to watch alongside cwd

    # Level name for the wren.* loggers when started from the CLI
    log_level: str = "info"
