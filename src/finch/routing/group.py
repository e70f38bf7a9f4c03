"""Route groups — independently defined bundles of routes.

A group declares its routes without knowing where it will be mounted.
The app hands it a registration context bound to the mount prefix and
awaits ``group.register(prefix)``; the awaited call *is* the completion
signal. It returns the group's definitions, or raises
``RegistrationError`` and hands out nothing.

Usage::

    books = RouteGroup("books")

    @books.route("/", contract=BOOKS_CONTRACT)
    async def list_books(db):
        return {"books": await db.query("SELECT * FROM books")}

    @books.setup
    async def optional_search(ctx: RegistrationContext) -> None:
        if await search_index_available():
            ctx.define("GET", "/search", SEARCH_CONTRACT, search)

    app.mount(books, "/books")
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from finch._internal.invoke import invoke
from finch._internal.types import Handler
from finch.errors import RegistrationError
from finch.routing.route import RouteDefinition
from finch.routing.router import parse_path
from finch.schema.types import EMPTY_CONTRACT, SchemaContract


class RegistrationState(StrEnum):
    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


def join_path(prefix: str, subpath: str) -> str:
    """Concatenate a mount prefix and a group subpath.

    Concatenation, not merging: ``("/books", "/")`` is ``"/books/"``.
    """
    if subpath and not subpath.startswith("/"):
        subpath = f"/{subpath}"
    return f"{prefix}{subpath}" or "/"


class RegistrationContext:
    """Collects one group's definitions under its mount prefix.

    Pending until ``complete()``; a failed context refuses further
    definitions and never exposes the ones it collected.
    """

    __slots__ = ("_definitions", "_state", "group", "prefix")

    def __init__(self, group: str, prefix: str) -> None:
        self.group = group
        self.prefix = prefix
        self._definitions: list[RouteDefinition] = []
        self._state = RegistrationState.PENDING

    @property
    def state(self) -> RegistrationState:
        return self._state

    @property
    def definitions(self) -> tuple[RouteDefinition, ...]:
        """The registered definitions. Only readable once complete."""
        if self._state is not RegistrationState.COMPLETE:
            msg = f"Route group {self.group!r} is {self._state}; definitions are not available."
            raise RuntimeError(msg)
        return tuple(self._definitions)

    def define(
        self,
        method: str,
        subpath: str,
        contract: SchemaContract | None,
        handler: Handler,
        *,
        name: str | None = None,
    ) -> RouteDefinition:
        """Declare one route relative to the group's prefix."""
        if self._state is not RegistrationState.PENDING:
            msg = f"Cannot define routes on route group {self.group!r}: registration is {self._state}."
            raise RuntimeError(msg)

        path = join_path(self.prefix, subpath)
        # Parse now so a malformed path fails this group's registration
        parse_path(path)
        definition = RouteDefinition(
            method=method.upper(),
            path=path,
            handler=handler,
            contract=contract or EMPTY_CONTRACT,
            name=name,
            group=self.group,
        )
        self._definitions.append(definition)
        return definition

    def complete(self) -> tuple[RouteDefinition, ...]:
        """Mark registration finished and return the definitions."""
        if self._state is RegistrationState.FAILED:
            msg = f"Route group {self.group!r} already failed to register."
            raise RuntimeError(msg)
        self._state = RegistrationState.COMPLETE
        return tuple(self._definitions)

    def fail(self) -> None:
        """Mark registration failed and drop everything collected so far."""
        self._state = RegistrationState.FAILED
        self._definitions.clear()


@dataclass(frozen=True, slots=True)
class _PendingRoute:
    """A decorator-declared route waiting for registration."""

    path: str
    handler: Handler
    methods: tuple[str, ...]
    contract: SchemaContract | None
    name: str | None


class RouteGroup:
    """An ordered set of routes registered as one unit under a prefix.

    Routes come from two places, in this order:

    1. ``@group.route(...)`` decorators, in declaration order.
    2. ``@group.setup`` functions, which receive the
       ``RegistrationContext`` and may await before defining routes.

    A group may be mounted more than once under different prefixes.
    """

    __slots__ = ("_pending", "_setups", "name")

    def __init__(self, name: str) -> None:
        self.name = name
        self._pending: list[_PendingRoute] = []
        self._setups: list[Callable[[RegistrationContext], Any]] = []

    def __repr__(self) -> str:
        return f"RouteGroup({self.name!r}, routes={len(self._pending)}, setups={len(self._setups)})"

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        contract: SchemaContract | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Declare a route via decorator.

        Args:
            path: Path relative to the mount prefix. Use ``:param`` segments.
            methods: HTTP methods. Defaults to ``["GET"]``.
            contract: Schemas for params, query, body, and responses.
            name: Optional route name for introspection.
        """

        def decorator(func: Handler) -> Handler:
            self._pending.append(
                _PendingRoute(
                    path=path,
                    handler=func,
                    methods=tuple(m.upper() for m in (methods or ["GET"])),
                    contract=contract,
                    name=name,
                )
            )
            return func

        return decorator

    def setup(
        self, func: Callable[[RegistrationContext], Any]
    ) -> Callable[[RegistrationContext], Any]:
        """Register a sync or async setup function via decorator."""
        self._setups.append(func)
        return func

    async def register(self, prefix: str = "") -> tuple[RouteDefinition, ...]:
        """Register every route under *prefix* and signal completion.

        Returns the definitions once all setup functions have finished.
        Raises ``RegistrationError`` if anything fails; in that case no
        definition of this group is returned.
        """
        ctx = RegistrationContext(self.name, prefix)
        try:
            for pending in self._pending:
                for method in pending.methods:
                    ctx.define(
                        method,
                        pending.path,
                        pending.contract,
                        pending.handler,
                        name=pending.name,
                    )
            for setup in self._setups:
                await invoke(setup, ctx)
        except Exception as exc:
            ctx.fail()
            raise RegistrationError(self.name, f"{type(exc).__name__}: {exc}") from exc
        return ctx.complete()
