"""``wren routes``: print the routes registered on a Mux."""

import argparse
import sys

from wren.cli._resolve import resolve_mux
from wren.routing.route import ANY_METHOD, Route


def format_routes(routes: list[Route]) -> list[str]:
    """Render *routes* as METHOD / PATH / HANDLER table lines."""
    rows: list[tuple[str, str, str]] = []
    for route in routes:
        methods = "ANY" if ANY_METHOD in route.methods else ", ".join(sorted(route.methods))
        name = route.name or getattr(route.handler, "__name__", repr(route.handler))
        rows.append((methods, route.path, name))

    width_methods = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    width_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{width_methods}}}  {{:<{width_path}}}  {{}}"
    lines = [fmt.format("METHOD", "PATH", "HANDLER")]
    sep_len = width_methods + width_path + 4 + max(len(r[2]) for r in rows)
    lines.append("-" * min(sep_len, 80))
    lines.extend(fmt.format(*row) for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """List the routes of ``args.app``, sorted by path."""
    try:
        mux = resolve_mux(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = sorted(mux.routes, key=lambda r: (r.path, sorted(r.methods)))
    if not routes:
        print("No routes registered.")
        return

    for line in format_routes(routes):
        print(line)
