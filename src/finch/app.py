"""Finch application class.

Mutable during setup (routes, mounts, providers, hooks). Becomes ready
on ``startup()``: every mounted group registers, the router compiles,
and from then on the dispatch table is read-only.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

import anyio

from finch._internal.asgi import Receive, Scope, Send
from finch._internal.invoke import invoke
from finch._internal.types import Handler, Hook
from finch.config import AppConfig
from finch.data.protocol import DataAccess
from finch.errors import ConfigurationError, RegistrationError
from finch.http.query import QueryParams
from finch.http.request import Request
from finch.http.response import Response
from finch.routing.group import RouteGroup
from finch.routing.route import RouteDefinition
from finch.routing.router import Router
from finch.schema.types import SchemaContract
from finch.server.dispatch import dispatch_request
from finch.server.handler import handle_request

logger = logging.getLogger("finch.app")


@dataclass(frozen=True, slots=True)
class _Mount:
    """A group mounted under a prefix, waiting for startup."""

    group: RouteGroup
    prefix: str


class App:
    """The finch application.

    Usage::

        app = App(AppConfig(debug=True), db="sqlite:///bookstore.db")

        @app.route("/")
        def index():
            return {"message": "Hello World!"}

        app.mount(books, "/books")

        response = await app.dispatch("GET", "/books/")

    Concurrency:
        ``startup()`` is serialized by an ``anyio.Lock`` with a
        double-check, so concurrent first requests compose the app once.
        After that the router is only read.
    """

    __slots__ = (
        "_app_group",
        "_db",
        "_mounts",
        "_providers",
        "_ready",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_startup_lock",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: DataAccess | str | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._app_group = RouteGroup("app")
        self._mounts: list[_Mount] = []
        self._providers: dict[type, Callable[..., Any]] = {}
        self._startup_hooks: list[Hook] = []
        self._shutdown_hooks: list[Hook] = []

        # Database — accepts any DataAccess or a connection URL string
        if isinstance(db, str):
            from finch.data.database import Database

            self._db: DataAccess | None = Database(db)
        else:
            self._db = db

        # Created lazily: needs a running event loop
        self._startup_lock: anyio.Lock | None = None
        self._router: Router | None = None
        self._ready = False

    def __repr__(self) -> str:
        return f"App(mounts={len(self._mounts)}, ready={self._ready})"

    # -- Setup --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        contract: SchemaContract | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register an app-level route handler via decorator.

        Args:
            path: URL path pattern. Use ``:param`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            contract: Schemas for params, query, body, and responses.
            name: Optional route name for introspection.
        """
        self._check_not_ready()
        return self._app_group.route(path, methods=methods, contract=contract, name=name)

    def mount(self, group: RouteGroup, prefix: str = "") -> None:
        """Mount a route group under *prefix*. It registers at startup."""
        self._check_not_ready()
        if prefix and not prefix.startswith("/"):
            msg = f"Mount prefix {prefix!r} for route group {group.name!r} must start with '/'."
            raise ConfigurationError(msg)
        self._mounts.append(_Mount(group, prefix.rstrip("/")))

    def provide(self, annotation: type, factory: Callable[..., Any]) -> None:
        """Register a provider factory for dependency injection.

        When a handler parameter's type annotation matches *annotation*,
        finch calls *factory* (with no arguments) and injects the result.
        """
        self._check_not_ready()
        self._providers[annotation] = factory

    def on_startup(self, func: Hook) -> Hook:
        """Register a sync or async startup hook via decorator.

        Hooks run in registration order once the routes are composed and
        the database is connected.
        """
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register a sync or async shutdown hook via decorator."""
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def db(self) -> DataAccess:
        """The configured data access object.

        Raises ``ConfigurationError`` if the app was built without one.
        """
        if self._db is None:
            msg = "No database configured. Pass db= to App()."
            raise ConfigurationError(msg)
        return self._db

    @property
    def routes(self) -> list[RouteDefinition]:
        """The compiled dispatch table, empty until ready."""
        if self._router is None:
            return []
        return self._router.routes

    # -- Lifecycle --

    async def startup(self) -> None:
        """Compose the dispatch table and make the app ready.

        Raises ``RegistrationError`` when a group fails or does not finish
        within ``config.registration_timeout``, and ``RouteConflictError``
        when two definitions claim the same method and path. In both cases
        the app stays not ready.
        """
        if self._ready:
            return
        if self._startup_lock is None:
            self._startup_lock = anyio.Lock()
        async with self._startup_lock:
            if self._ready:
                return
            router = await self._compose()

            connect = getattr(self._db, "connect", None)
            if connect is not None:
                await connect()

            try:
                for hook in self._startup_hooks:
                    await invoke(hook)
            except Exception:
                logger.error("Startup hook failed; releasing the database")
                disconnect = getattr(self._db, "disconnect", None)
                if disconnect is not None:
                    await disconnect()
                raise

            self._router = router
            self._ready = True
            logger.info("App ready with %d routes", len(router.routes))

    async def shutdown(self) -> None:
        """Run shutdown hooks and release the database."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

        disconnect = getattr(self._db, "disconnect", None)
        if disconnect is not None:
            await disconnect()

        self._ready = False
        self._router = None

    async def _compose(self) -> Router:
        """Register every group concurrently and build the router."""
        definitions = [
            replace(d, group=None) for d in await self._app_group.register("")
        ]

        results: dict[int, tuple[RouteDefinition, ...]] = {}
        failures: list[RegistrationError] = []
        timeout = self.config.registration_timeout

        async def _register(index: int, mount: _Mount) -> None:
            try:
                results[index] = await mount.group.register(mount.prefix)
            except RegistrationError as exc:
                failures.append(exc)
                tg.cancel_scope.cancel()

        try:
            with anyio.fail_after(timeout):
                async with anyio.create_task_group() as tg:
                    for index, mount in enumerate(self._mounts):
                        tg.start_soon(_register, index, mount)
        except TimeoutError:
            pending = [m.group.name for i, m in enumerate(self._mounts) if i not in results]
            logger.error("Route groups %s did not register within %.1fs", pending, timeout)
            raise RegistrationError(
                ", ".join(pending), f"registration did not complete within {timeout}s"
            ) from None

        if failures:
            logger.error("%s", failures[0])
            raise failures[0]

        for index in range(len(self._mounts)):
            definitions.extend(results[index])

        router = Router()
        for definition in definitions:
            router.add(definition)
        router.compile()
        return router

    # -- Dispatch --

    async def dispatch(
        self,
        method: str,
        path: str,
        *,
        query: QueryParams | dict[str, Any] | None = None,
        body: Any = None,
        request: Request | None = None,
    ) -> Response:
        """Dispatch one request and return its Response.

        Starts the app first if it is not ready yet. Request-level
        failures (not found, validation, handler and data errors) come
        back as structured error responses; composition errors raise.
        """
        if not self._ready:
            await self.startup()
        assert self._router is not None

        return await dispatch_request(
            self._router,
            method,
            path,
            query=query,
            body=body,
            db=self._db,
            request=request,
            providers=self._providers or None,
            debug=self.config.debug,
        )

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app on pounce (``pip install finch[server]``)."""
        from finch.server.dev import configure_logging, run_dev_server

        configure_logging(self.config.log_level)
        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=False,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(self, scope, receive, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                try:
                    await self.shutdown()
                except Exception as exc:
                    logger.exception("Shutdown failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _check_not_ready(self) -> None:
        if self._ready:
            msg = (
                "Cannot modify the app after it has started. "
                "Register routes, mounts, and providers before startup()."
            )
            raise RuntimeError(msg)
