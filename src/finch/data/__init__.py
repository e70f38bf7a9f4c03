"""Async data access for finch handlers.

SQL in, rows as dicts out. Not an ORM.

Basic usage::

    from finch.data import Database

    db = Database("sqlite:///bookstore.db")
    books = await db.query("SELECT * FROM books")
    await db.execute("INSERT INTO books (title, author) VALUES (?, ?)", [title, author])

Handlers depend on the ``DataAccess`` protocol, so any object with async
``query`` and ``execute`` can stand in for ``Database``.

SQLite needs nothing extra; PostgreSQL needs ``asyncpg``::

    pip install finch[data-pg]
"""

from finch.data.database import Database
from finch.data.errors import (
    ConnectionError,
    DataAccessError,
    DriverNotInstalledError,
    QueryError,
)
from finch.data.protocol import DataAccess

__all__ = [
    "ConnectionError",
    "DataAccess",
    "DataAccessError",
    "Database",
    "DriverNotInstalledError",
    "QueryError",
]
