"""Handler results — success payload XOR structured error.

Handlers may return plain values; the dispatcher normalizes every return
into ``Ok`` or ``Err`` before anything reaches the client::

    return {"books": rows}            # Ok({"books": rows}, 200)
    return {"id": 7}, 201             # Ok({"id": 7}, 201)
    return Ok({"id": 7}, status=201)
    return Err(QueryError("locked"))  # translated to a structured 500

An exception object that is *returned* rather than raised is an ``Err``
too, so it can never leak out as a success payload.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from finch.http.response import Response


@dataclass(frozen=True, slots=True)
class Ok:
    """A successful handler outcome, validated against the response contract."""

    value: Any
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class Err:
    """A failed handler outcome. The dispatcher owns its translation."""

    error: BaseException


HandlerResult: TypeAlias = Ok | Err


def to_result(value: Any) -> HandlerResult:
    """Normalize a handler's return value.

    Dispatch order:

    1. ``Ok`` / ``Err``              -> pass through
    2. ``Response``                  -> Ok(data, status, headers)
    3. ``Exception`` instance        -> Err
    4. ``(value, int)``              -> Ok(value, status)
    5. ``(value, int, Mapping)``     -> Ok(value, status, headers)
    6. anything else                 -> Ok(value, 200)
    """
    match value:
        case Ok() | Err():
            return value
        case Response():
            return Ok(value.data, value.status, value.headers)
        case BaseException():
            return Err(value)
        case (payload, int() as status) if isinstance(value, tuple):
            return Ok(payload, status)
        case (payload, int() as status, Mapping() as headers) if isinstance(value, tuple):
            return Ok(payload, status, tuple(headers.items()))
        case _:
            return Ok(value)
