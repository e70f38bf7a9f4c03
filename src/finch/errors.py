"""Finch exception hierarchy.

Shared across Router, App, dispatcher, and the ASGI handler so every
module raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from finch.routing.route import RouteDefinition
    from finch.schema.types import FieldViolation


class FinchError(Exception):
    """Base for all finch-specific errors."""


class ConfigurationError(FinchError):
    """Raised when app configuration or composition is invalid.

    Typically raised from ``App.startup()`` before any request is served.
    """


class RouteConflictError(ConfigurationError):
    """Two definitions claim the same (method, path pattern)."""

    def __init__(self, first: RouteDefinition, second: RouteDefinition) -> None:
        self.first = first
        self.second = second
        msg = (
            f"Route conflict: {second.describe()} collides with {first.describe()}. "
            "Each (method, path) pair must be unique across mounted groups."
        )
        super().__init__(msg)


class RegistrationError(ConfigurationError):
    """A route group failed or never finished registering."""

    def __init__(self, group: str, reason: str) -> None:
        self.group = group
        self.reason = reason
        super().__init__(f"Route group {group!r} did not register: {reason}")


# Exceptions stay mutable: raising through a context manager assigns __traceback__.
@dataclass(eq=False, slots=True)
class HTTPError(FinchError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, dispatcher, or handlers. The ASGI handler
    turns these into structured JSON error bodies.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request method and path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


@dataclass(eq=False, slots=True)
class ValidationError(HTTPError):
    """400 — an inbound request part failed its schema.

    ``part`` is one of ``"params"``, ``"query"``, ``"body"``.
    The handler is never invoked when this is raised.
    """

    status: int = 400
    part: str = ""
    violations: tuple[FieldViolation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "part": self.part,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass(eq=False, slots=True)
class ContractBreachError(HTTPError):
    """500 — a handler's response failed its own declared schema.

    This is a server-side defect, never the client's fault.
    """

    status: int = 500
    route: str = ""
    response_status: int = 200
    violations: tuple[FieldViolation, ...] = ()
