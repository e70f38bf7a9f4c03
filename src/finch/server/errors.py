"""Error translation for finch requests.

Maps every failure, raised or returned as ``Err``, to a structured
JSON ``Response``. Nothing raw ever reaches the client as a payload.

Body shape::

    {"status": 400, "error": "Bad Request", "message": "...",
     "part": "query", "violations": [...]}      # part/violations: 400 only
"""

import logging
from http import HTTPStatus
from typing import Any

from finch.data.errors import ConnectionError, DataAccessError
from finch.errors import ContractBreachError, HTTPError, ValidationError
from finch.http.response import Response

logger = logging.getLogger("finch.server")


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def error_body(status: int, message: str, **extra: Any) -> dict[str, Any]:
    """Build the structured error payload."""
    return {"status": status, "error": _reason(status), "message": message, **extra}


def _validation_message(exc: ValidationError) -> str:
    messages = "; ".join(v.message for v in exc.violations)
    return f"{exc.part} {messages}" if messages else exc.detail or "Invalid request"


def error_response(exc: BaseException, method: str, path: str, *, debug: bool = False) -> Response:
    """Translate *exc* into a structured error Response.

    - ``ValidationError``      -> 400 with part + violations (client fault)
    - ``ContractBreachError``  -> 500, logged; violations only in debug
    - ``HTTPError``            -> its own status and headers
    - ``ConnectionError``      -> 503 (store unreachable)
    - ``DataAccessError``      -> 500
    - anything else            -> 500, logged with traceback
    """
    match exc:
        case ValidationError():
            logger.debug("400 %s %s — %s", method, path, _validation_message(exc))
            body = error_body(400, _validation_message(exc), **exc.to_dict())
            return Response(body, status=400)

        case ContractBreachError():
            logger.error(
                "Contract breach: %s returned %d failing its response schema: %s",
                exc.route,
                exc.response_status,
                "; ".join(v.message for v in exc.violations),
            )
            extra: dict[str, Any] = {}
            if debug:
                extra = {
                    "route": exc.route,
                    "violations": [v.to_dict() for v in exc.violations],
                }
            return Response(error_body(500, "Response failed its contract", **extra), status=500)

        case HTTPError():
            logger.debug("%d %s %s — %s", exc.status, method, path, exc.detail)
            resp = Response(error_body(exc.status, exc.detail or _reason(exc.status)), status=exc.status)
            for name, value in exc.headers:
                resp = resp.with_header(name, value)
            return resp

        case ConnectionError():
            logger.error("503 %s %s — data store unavailable: %s", method, path, exc)
            message = f"Data store unavailable: {exc}" if debug else "Data store unavailable"
            return Response(error_body(503, message), status=503)

        case DataAccessError():
            logger.error("500 %s %s — data access failed: %s", method, path, exc)
            message = f"Data access failed: {exc}" if debug else "Data access failed"
            return Response(error_body(500, message), status=500)

        case _:
            logger.error("500 %s %s", method, path, exc_info=exc)
            message = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
            return Response(error_body(500, message), status=500)
