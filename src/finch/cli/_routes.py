"""``finch routes`` — compose an app and print its dispatch table."""

import argparse
import sys

import anyio

from finch.cli._resolve import resolve_app
from finch.errors import ConfigurationError
from finch.routing.route import RouteDefinition

_HEADERS = ("METHOD", "PATH", "GROUP", "HANDLER")


def run_routes(args: argparse.Namespace) -> None:
    """Start ``args.app`` and print METHOD, PATH, GROUP and HANDLER rows.

    Composition errors (conflicts, failed groups) exit with status 1.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    async def _compose() -> list[RouteDefinition]:
        await app.startup()
        try:
            return app.routes
        finally:
            await app.shutdown()

    try:
        routes = anyio.run(_compose)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    rows = [
        (
            route.method,
            route.path,
            route.group or "-",
            getattr(route.handler, "__name__", str(route.handler)),
        )
        for route in routes
    ]
    widths = [
        max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(_HEADERS)
    ]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths)
    print(fmt.format(*_HEADERS).rstrip())
    print("-" * min(sum(widths) + 2 * (len(widths) - 1), 80))
    for row in rows:
        print(fmt.format(*row).rstrip())
