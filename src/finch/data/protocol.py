"""The data access capability handlers consume.

Handlers depend on this protocol, not on ``Database``, so tests and
alternative stores can inject anything with these two coroutines.
"""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DataAccess(Protocol):
    """Reads and writes against a relational store.

    Both operations raise ``DataAccessError`` on connection, driver, or
    constraint failure. Retry policy, if any, belongs to the implementation.
    """

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a read and return its rows in the order the store produced them."""
        ...

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write and return the number of affected rows."""
        ...
