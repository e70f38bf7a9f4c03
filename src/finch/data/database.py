"""Async relational store access.

``Database`` implements the ``DataAccess`` protocol for two drivers:

    sqlite:///books.db            stdlib sqlite3, run in anyio worker threads
    sqlite:///:memory:            throwaway in-process store
    postgresql://user@host/db     asyncpg pool (pip install finch[data-pg])

SQL is written with ``?`` placeholders for both; PostgreSQL statements
are rewritten to ``$1, $2, ...`` before they are sent.

SQLite runs on a single connection guarded by an ``anyio.Lock``.
PostgreSQL borrows a pooled connection per statement. Inside
``transaction()`` every statement of the current task shares one
connection, tracked in a ContextVar.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

import anyio

from finch.data.errors import (
    ConnectionError,
    DataAccessError,
    DriverNotInstalledError,
    QueryError,
)

logger = logging.getLogger("finch.data")

# Connection owned by the enclosing transaction() of this task, if any
_tx_conn: ContextVar[Any] = ContextVar("finch_tx_conn")


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Where to connect and how."""

    url: str
    pool_size: int = 5
    echo: bool = False


class Database:
    """Async access to a relational store.

    Usage::

        db = Database("sqlite:///bookstore.db")

        books = await db.query("SELECT title, author FROM books")
        dune = await db.query_one("SELECT * FROM books WHERE title = ?", ["Dune"])
        total = await db.query_val("SELECT COUNT(*) FROM books")

        await db.execute("INSERT INTO books (title, author) VALUES (?, ?)", ["Dune", "Herbert"])

        async with db.transaction():
            await db.execute("DELETE FROM books WHERE author = ?", ["Anon"])
            await db.execute("INSERT INTO books (title, author) VALUES (?, ?)", [t, a])

    Every failure raises a ``DataAccessError`` subclass.
    """

    __slots__ = ("_config", "_conn", "_driver", "_lifecycle_lock", "_sqlite_lock")

    def __init__(self, url: str, /, *, pool_size: int = 5, echo: bool = False) -> None:
        self._config = DatabaseConfig(url=url, pool_size=pool_size, echo=echo)
        self._driver = _driver_for(url)
        # SQLite: the connection. PostgreSQL: the pool. None until connect().
        self._conn: Any = None
        # anyio locks need a running event loop; made on first use
        self._sqlite_lock: anyio.Lock | None = None
        self._lifecycle_lock: anyio.Lock | None = None

    def __repr__(self) -> str:
        return f"Database(driver={self._driver!r}, connected={self._conn is not None})"

    @property
    def driver(self) -> str:
        return self._driver

    # -- Lifecycle --

    def _lifecycle(self) -> anyio.Lock:
        if self._lifecycle_lock is None:
            self._lifecycle_lock = anyio.Lock()
        return self._lifecycle_lock

    async def connect(self) -> None:
        """Open the SQLite connection or the PostgreSQL pool.

        Happens on first use anyway; call it at startup to fail fast.
        """
        if self._conn is not None:
            return
        async with self._lifecycle():
            if self._conn is None:
                self._conn = await _open(self._driver, self._config)

    async def disconnect(self) -> None:
        """Close the connection or pool. A later call reconnects."""
        if self._conn is None:
            return
        async with self._lifecycle():
            if self._conn is not None:
                conn, self._conn = self._conn, None
                await conn.close()

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.disconnect()

    # -- Connections --

    def _serial(self) -> anyio.Lock:
        if self._sqlite_lock is None:
            self._sqlite_lock = anyio.Lock()
        return self._sqlite_lock

    @asynccontextmanager
    async def _borrow(self) -> AsyncIterator[Any]:
        """Yield a connection for one statement."""
        await self.connect()
        tx = _tx_conn.get(None)
        if tx is not None:
            yield tx
        elif self._driver == "sqlite":
            async with self._serial():
                yield self._conn
        else:
            pooled = await self._acquire()
            try:
                yield pooled
            finally:
                await self._release(pooled)

    async def _acquire(self) -> Any:
        try:
            return await self._conn.acquire()
        except Exception as exc:
            raise ConnectionError(f"Cannot acquire a PostgreSQL connection: {exc}") from exc

    async def _release(self, pooled: Any) -> None:
        try:
            await self._conn.release(pooled)
        except Exception as exc:
            raise ConnectionError(f"Cannot return a PostgreSQL connection: {exc}") from exc

    @asynccontextmanager
    async def _statement(self, sql: str, params: Sequence[Any] = ()) -> AsyncIterator[Any]:
        """Borrow a connection for *sql*; wrap driver errors, echo timing."""
        started = time.perf_counter()
        async with self._borrow() as conn:
            try:
                yield conn
            except DataAccessError:
                raise
            except Exception as exc:
                raise QueryError(str(exc)) from exc
            finally:
                if self._config.echo:
                    elapsed = (time.perf_counter() - started) * 1000
                    shown = f"  params={list(params)!r}" if params else ""
                    logger.info("%6.1fms  %s%s", elapsed, sql.strip(), shown)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed statements atomically.

        Commits on clean exit and rolls back on any exception. A nested
        ``transaction()`` joins the outer one. Failing to begin is a
        ``ConnectionError``; failing to commit or roll back is a
        ``QueryError``.
        """
        await self.connect()
        if _tx_conn.get(None) is not None:
            yield
            return

        if self._driver == "sqlite":
            async with self._serial():
                conn = self._conn
                token = _tx_conn.set(conn)
                conn.autocommit = False
                try:
                    yield
                except BaseException:
                    await _finish(conn.rollback, "roll back")
                    raise
                else:
                    await _finish(conn.commit, "commit")
                finally:
                    conn.autocommit = True
                    _tx_conn.reset(token)
            return

        pooled = await self._acquire()
        token = _tx_conn.set(pooled)
        try:
            tx = pooled.transaction()
            try:
                await tx.start()
            except Exception as exc:
                raise ConnectionError(f"Cannot begin transaction: {exc}") from exc
            try:
                yield
            except BaseException:
                await _finish(tx.rollback, "roll back")
                raise
            else:
                await _finish(tx.commit, "commit")
        finally:
            _tx_conn.reset(token)
            await self._release(pooled)

    # -- Reads --

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a read and return every row as a dict, in store order."""
        async with self._statement(sql, params) as conn:
            if self._driver == "sqlite":
                return (await conn.run(sql, params)).rows
            return [dict(record) for record in await conn.fetch(_numbered(sql), *params)]

    async def query_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Run a read and return its first row, or ``None``."""
        async with self._statement(sql, params) as conn:
            if self._driver == "sqlite":
                rows = (await conn.run(sql, params, limit=1)).rows
                return rows[0] if rows else None
            record = await conn.fetchrow(_numbered(sql), *params)
            return dict(record) if record is not None else None

    async def query_val(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """First column of the first row (COUNT, MAX, ...), or ``None``."""
        row = await self.query_one(sql, params)
        return next(iter(row.values())) if row else None

    # -- Writes --

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write (INSERT/UPDATE/DELETE) and return rows affected."""
        async with self._statement(sql, params) as conn:
            if self._driver == "sqlite":
                return (await conn.run(sql, params, fetch=False)).rowcount
            return _affected(await conn.execute(_numbered(sql), *params))

    async def execute_many(self, sql: str, params_seq: Sequence[Sequence[Any]]) -> int:
        """Run a write once per parameter set; return total rows affected."""
        async with self._statement(sql) as conn:
            if self._driver == "sqlite":
                return await conn.run_many(sql, params_seq)
            # asyncpg's executemany reports nothing back
            await conn.executemany(_numbered(sql), [tuple(p) for p in params_seq])
            return len(params_seq)

    async def execute_script(self, sql: str) -> None:
        """Run several ``;``-separated statements, e.g. schema setup."""
        async with self._statement(sql) as conn:
            if self._driver == "sqlite":
                await conn.run_script(sql)
            else:
                await conn.execute(sql)


# -- Driver helpers --


def _driver_for(url: str) -> str:
    scheme = url.partition(":")[0].lower()
    match scheme:
        case "sqlite":
            return "sqlite"
        case "postgresql" | "postgres":
            return "postgresql"
    msg = (
        f"Unsupported database URL scheme {scheme!r} in {url!r}. "
        "Use sqlite:///path or postgresql://user@host/db."
    )
    raise DataAccessError(msg)


def _sqlite_path(url: str) -> str:
    # sqlite:///books.db -> books.db, sqlite:////tmp/x.db -> /tmp/x.db
    rest = url.partition(":")[2]
    if not rest.startswith("//"):
        msg = f"Invalid SQLite URL: {url!r}"
        raise DataAccessError(msg)
    return rest[3:] if rest.startswith("///") else rest[2:]


def _numbered(sql: str) -> str:
    """Rewrite ``?`` placeholders to ``$n``, leaving quoted text alone."""
    out: list[str] = []
    n = 0
    quote: str | None = None
    for ch in sql:
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "?":
            n += 1
            out.append(f"${n}")
            continue
        out.append(ch)
    return "".join(out)


async def _finish(step: Any, action: str) -> None:
    try:
        await step()
    except Exception as exc:
        raise QueryError(f"Cannot {action} transaction: {exc}") from exc


def _affected(status: str) -> int:
    # asyncpg reports e.g. "INSERT 0 1" or "DELETE 3"
    last = status.rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


async def _open(driver: str, config: DatabaseConfig) -> Any:
    if driver == "sqlite":
        from finch.data._sqlite import connect as open_sqlite

        try:
            return await open_sqlite(_sqlite_path(config.url))
        except DataAccessError:
            raise
        except Exception as exc:
            raise ConnectionError(f"Cannot open SQLite database: {exc}") from exc

    try:
        import asyncpg
    except ImportError:
        msg = (
            "PostgreSQL URLs need the 'asyncpg' driver. "
            "Install it with: pip install finch[data-pg]"
        )
        raise DriverNotInstalledError(msg) from None

    try:
        return await asyncpg.create_pool(config.url, min_size=1, max_size=config.pool_size)
    except Exception as exc:
        raise ConnectionError(f"Cannot connect to PostgreSQL: {exc}") from exc
