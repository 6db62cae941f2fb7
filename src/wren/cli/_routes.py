"""``wren routes`` — print the compiled route table."""

import argparse
import sys

from wren.cli._resolve import resolve_app
from wren.errors import ConfigurationError


def _unit_name(unit: object) -> str:
    return getattr(unit, "__qualname__", None) or type(unit).__name__


def run_routes(args: argparse.Namespace) -> None:
    """Print METHOD, PATH and the guard/handler chain of every route."""
    try:
        app = resolve_app(args.app)
        routes = app.routes
    except (ModuleNotFoundError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str]] = []
    for route in routes:
        chain = " -> ".join(_unit_name(u) for u in (*route.guards, route.handler))
        rows.append((", ".join(sorted(route.methods)), route.path, chain))

    width_method = max(6, *(len(r[0]) for r in rows))
    width_path = max(4, *(len(r[1]) for r in rows))
    fmt = f"{{:<{width_method}}}  {{:<{width_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "CHAIN"))
    print("-" * min(80, width_method + width_path + 4 + max(len(r[2]) for r in rows)))
    for row in rows:
        print(fmt.format(*row))
