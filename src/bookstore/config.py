"""Bookstore settings, read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from finch.errors import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///bookstore.db"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class BookstoreConfig:
    """Service settings. Immutable after creation.

    ``create_schema`` creates the ``books`` table at startup if missing.
    """

    database_url: str = DEFAULT_DATABASE_URL
    create_schema: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BookstoreConfig:
        """Build settings from ``BOOKSTORE_*`` environment variables.

        - ``BOOKSTORE_DATABASE_URL``: connection URL (default SQLite file)
        - ``BOOKSTORE_CREATE_SCHEMA``: ``1``/``0``, ``true``/``false``, ...
        """
        env = os.environ if environ is None else environ
        return cls(
            database_url=env.get("BOOKSTORE_DATABASE_URL", DEFAULT_DATABASE_URL),
            create_schema=_parse_flag(
                "BOOKSTORE_CREATE_SCHEMA", env.get("BOOKSTORE_CREATE_SCHEMA", "1")
            ),
        )


def _parse_flag(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = f"{name} must be a boolean flag (1/0, true/false), got {value!r}"
    raise ConfigurationError(msg)
