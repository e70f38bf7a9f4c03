"""Development server and logging setup.

Starts a pounce ASGI server with the live finch App object. Pounce is an
optional dependency (``pip install finch[server]``) imported on use.
"""

import logging
import sys

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "info") -> None:
    """Send finch and application logs to stderr at *level*.

    Called by the CLI and ``App.run()``; importing finch never configures
    logging.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        msg = f"Unknown log level {level!r}"
        raise ValueError(msg)
    logging.basicConfig(level=numeric, format=_LOG_FORMAT, stream=sys.stderr)


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    app_path: str | None = None,
) -> None:
    """Start a pounce server with the given finch App.

    Pounce's ``run()`` takes an import string (e.g., ``"bookstore.app:app"``),
    but finch has a live ``App`` object. We use ``pounce.Server``
    directly with the ASGI callable.

    Args:
        app: ASGI callable (finch App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes.
        app_path: Optional ``"module:attribute"`` import string. When
            provided, pounce reimports the app on each reload cycle.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = "Serving requires 'pounce'. Install it with: pip install finch[server]"
        raise RuntimeError(msg) from None

    config = ServerConfig(host=host, port=port, workers=1, reload=reload)
    server = Server(config, app, app_path=app_path)
    server.run()
