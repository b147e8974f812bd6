"""``wren run``: resolve a Mux and serve it with pounce."""

import argparse
import sys

from wren.cli._resolve import resolve_mux


def run_server(args: argparse.Namespace) -> None:
    """Start the server for ``args.app``.

    ``--host``/``--port`` override the Mux's config. The import string is
    forwarded so pounce can re-import the app when reloading.
    """
    try:
        mux = resolve_mux(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from wren.server.dev import run_server as serve

    serve(mux.asgi, mux.config, host=args.host, port=args.port, app_path=args.app)
