"""Route records shared by groups, the router and the dispatcher."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from finch.schema.types import EMPTY_CONTRACT, SchemaContract


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One ``/``-separated piece of a pattern: ``books`` or ``:id``."""

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """Everything the router knows about one endpoint.

    ``path`` already carries the mount prefix. ``group`` is ``None`` for
    routes declared on the app itself.
    """

    method: str
    path: str
    handler: Callable[..., Any]
    contract: SchemaContract = EMPTY_CONTRACT
    name: str | None = None
    group: str | None = None

    def describe(self) -> str:
        """``GET /books/ (group 'books', handler list_books)``"""
        handler_name = getattr(self.handler, "__qualname__", repr(self.handler))
        owner = f"group {self.group!r}" if self.group else "app"
        return f"{self.method} {self.path} ({owner}, handler {handler_name})"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: RouteDefinition
    path_params: dict[str, str]
