"""``wren run`` — serve an app with pounce."""

import argparse
import logging
import sys

from wren.cli._resolve import resolve_app
from wren.security.audit import logging_sink, set_security_event_sink


def configure_logging(level: str) -> None:
    """Send ``wren.*`` log records to stderr at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and start serving it."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(args.log_level or app.config.log_level)
    set_security_event_sink(logging_sink)

    from wren.server.dev import run_server as serve

    serve(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=app.config.debug,
        workers=args.workers,
    )
