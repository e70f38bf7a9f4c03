"""sqlite3 behind an async interface.

Every blocking call runs in an anyio worker thread. A statement is
executed and its rows read inside the same hop, so cursors never
leave the thread that produced them. The connection is opened with
``check_same_thread=False`` and in autocommit mode; ``Database``
switches autocommit off for the length of a transaction.
"""

import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import Any

import anyio.to_thread


@dataclass(frozen=True, slots=True)
class StatementResult:
    rowcount: int
    rows: list[dict[str, Any]] = field(default_factory=list)


def _execute(
    conn: sqlite3.Connection,
    sql: str,
    params: tuple[Any, ...],
    limit: int | None,
    fetch: bool,
) -> StatementResult:
    cursor = conn.execute(sql, params)
    if not fetch or cursor.description is None:
        return StatementResult(cursor.rowcount)
    names = [col[0] for col in cursor.description]
    raw = cursor.fetchall() if limit is None else cursor.fetchmany(limit)
    return StatementResult(cursor.rowcount, [dict(zip(names, r, strict=True)) for r in raw])


class AsyncConnection:
    """One ``sqlite3.Connection``, awaited through worker threads."""

    __slots__ = ("_raw",)

    def __init__(self, raw: sqlite3.Connection) -> None:
        self._raw = raw

    async def _call(self, fn: Any, *args: Any) -> Any:
        return await anyio.to_thread.run_sync(partial(fn, *args))

    @property
    def autocommit(self) -> bool:
        return bool(self._raw.autocommit)

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self._raw.autocommit = value

    async def run(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        limit: int | None = None,
        fetch: bool = True,
    ) -> StatementResult:
        """Execute *sql*; read up to *limit* rows unless ``fetch`` is false."""
        return await self._call(_execute, self._raw, sql, tuple(params), limit, fetch)

    async def run_many(self, sql: str, params_seq: Sequence[Sequence[Any]]) -> int:
        batch = [tuple(p) for p in params_seq]
        cursor = await self._call(self._raw.executemany, sql, batch)
        return cursor.rowcount

    async def run_script(self, sql: str) -> None:
        # executescript commits anything pending first
        await self._call(self._raw.executescript, sql)

    async def commit(self) -> None:
        await self._call(self._raw.commit)

    async def rollback(self) -> None:
        await self._call(self._raw.rollback)

    async def close(self) -> None:
        await self._call(self._raw.close)


def _open(path: str) -> sqlite3.Connection:
    raw = sqlite3.connect(path, autocommit=True, check_same_thread=False)
    raw.execute("PRAGMA foreign_keys=ON")
    return raw


async def connect(path: str) -> AsyncConnection:
    """Open *path* (or ``:memory:``) and wrap it."""
    return AsyncConnection(await anyio.to_thread.run_sync(_open, path))
