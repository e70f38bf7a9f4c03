"""Data access error hierarchy.

Every failure of the storage collaborator surfaces as a
``DataAccessError``; the server boundary maps it to a structured
5xx response.
"""

from finch.errors import FinchError


class DataAccessError(FinchError):
    """Base for all finch.data errors."""


class DriverNotInstalledError(DataAccessError):
    """Raised when the required database driver is not installed."""


class ConnectionError(DataAccessError):  # noqa: A001 — intentional shadow of builtin
    """Raised when a database connection cannot be established."""


class QueryError(DataAccessError):
    """Raised when a SQL statement fails (syntax, constraint, driver)."""
