"""Finch CLI — serve an app and inspect its dispatch table.

Entry point registered as ``finch`` in ``pyproject.toml``::

    [project.scripts]
    finch = "finch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``finch`` command."""
    parser = argparse.ArgumentParser(
        prog="finch",
        description="Finch — contract-checked JSON services on ASGI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- finch run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the server")
    run_parser.add_argument("app", help="Import string (e.g. bookstore.app:create_app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes",
    )
    run_parser.add_argument("--log-level", default=None, help="Logging level (default: app config)")

    # -- finch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the composed routes")
    routes_parser.add_argument("app", help="Import string (e.g. bookstore.app:create_app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from finch.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from finch.cli._routes import run_routes

        run_routes(args)
