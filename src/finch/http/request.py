"""The inbound request as handlers see it."""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

from finch._internal.asgi import Receive
from finch.errors import HTTPError
from finch.http.query import QueryParams


def _too_large(limit: int) -> HTTPError:
    return HTTPError(status=413, detail=f"Request body exceeds {limit} bytes")


@dataclass(frozen=True, slots=True)
class Request:
    """Read-only view of one HTTP request.

    Header names are lower-cased and the first occurrence of a repeated
    header is kept. The body is pulled from the ASGI channel on first
    access and remembered afterwards.
    """

    method: str
    path: str
    headers: Mapping[str, str]
    query: QueryParams
    path_params: dict[str, str]
    client: tuple[str, int] | None
    _receive: Receive
    _body: list[bytes] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        headers: dict[str, str] = {}
        for raw_name, raw_value in scope.get("headers", ()):
            headers.setdefault(raw_name.decode("latin-1").lower(), raw_value.decode("latin-1"))
        peer = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            client=tuple(peer) if peer else None,
            _receive=receive,
        )

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        declared = self.headers.get("content-length", "")
        return int(declared) if declared.isdigit() else None

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield body chunks as the server delivers them."""
        more = True
        while more:
            message = await self._receive()
            more = bool(message.get("more_body", False))
            if chunk := message.get("body", b""):
                yield chunk

    async def body(self, *, limit: int | None = None) -> bytes:
        """Return the whole body.

        With *limit*, a declared or actual size above it raises a 413
        ``HTTPError``.
        """
        if self._body:
            return self._body[0]
        if limit is not None and (self.content_length or 0) > limit:
            raise _too_large(limit)
        buf = bytearray()
        async for chunk in self.stream():
            buf += chunk
            if limit is not None and len(buf) > limit:
                raise _too_large(limit)
        self._body.append(bytes(buf))
        return self._body[0]

    async def json(self, *, limit: int | None = None) -> Any:
        """Decode the body as JSON; a blank body decodes to ``None``.

        Undecodable input raises a 400 ``HTTPError``.
        """
        raw = await self.body(limit=limit)
        if not raw.strip():
            return None
        try:
            return json_module.loads(raw)
        except (UnicodeDecodeError, json_module.JSONDecodeError) as exc:
            raise HTTPError(status=400, detail=f"Body is not valid JSON: {exc}") from exc
