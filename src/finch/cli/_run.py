"""``finch run`` — start an app on the pounce server."""

import argparse
import sys

from finch.cli._resolve import resolve_app


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it; CLI flags override app config."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from finch.server.dev import configure_logging, run_dev_server

    configure_logging(args.log_level or app.config.log_level)
    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=args.reload,
        app_path=args.app if args.reload else None,
    )
