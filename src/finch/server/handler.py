"""ASGI handler — translates ASGI scope/messages to finch types.

The only component that touches raw ASGI directly. Converts the scope to
a typed Request, decodes the JSON body, dispatches through the app, and
sends the Response back through ASGI send().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from finch._internal.asgi import Receive, Scope, Send
from finch.errors import HTTPError
from finch.http.request import Request
from finch.server.errors import error_response
from finch.server.sender import send_response

if TYPE_CHECKING:
    from finch.app import App

_BODYLESS_METHODS = frozenset({"GET", "HEAD", "DELETE", "OPTIONS"})


async def handle_request(app: App, scope: Scope, receive: Receive, send: Send) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    body = None
    if request.method not in _BODYLESS_METHODS or request.content_length:
        try:
            body = await request.json(limit=app.config.max_content_length)
        except HTTPError as exc:
            response = error_response(exc, request.method, request.path, debug=app.config.debug)
            await send_response(response, send)
            return

    response = await app.dispatch(
        request.method,
        request.path,
        query=request.query,
        body=body,
        request=request,
    )
    await send_response(response, send)
