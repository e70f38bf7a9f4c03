"""Outbound JSON response.

The payload stays decoded until the response is sent, so the dispatcher
can still check it against the route's response contract.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """Status, headers and a JSON-ready payload.

    Never mutated; the ``with_*`` helpers hand back a modified copy::

        Response({"id": 7}).with_status(201).with_header("Location", "/books/7")
    """

    data: Any = None
    status: int = 200
    content_type: str = JSON_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return self.with_headers({name: value})

    def with_headers(self, extra: Mapping[str, str]) -> Response:
        return replace(self, headers=self.headers + tuple(extra.items()))

    @property
    def json(self) -> Any:
        return self.data

    @property
    def body_bytes(self) -> bytes:
        """Serialized payload; ``None`` sends nothing and bytes pass through."""
        match self.data:
            case None:
                return b""
            case bytes() as raw:
                return raw
            case payload:
                return json_module.dumps(payload, default=str).encode("utf-8")

    @property
    def text(self) -> str:
        return self.body_bytes.decode("utf-8")
