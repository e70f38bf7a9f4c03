"""Writes a finch Response to the ASGI send channel."""

from finch._internal.asgi import Send
from finch.http.response import Response

_NO_BODY_STATUSES = frozenset({204, 304})


async def send_response(response: Response, send: Send) -> None:
    status = response.status
    body = b"" if status < 200 or status in _NO_BODY_STATUSES else response.body_bytes

    headers = [(name.lower(), value) for name, value in response.headers]
    if body:
        headers.insert(0, ("content-type", response.content_type))
    headers.append(("content-length", str(len(body))))

    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [(k.encode("latin-1"), v.encode("latin-1")) for k, v in headers],
        }
    )
    await send({"type": "http.response.body", "body": body})
