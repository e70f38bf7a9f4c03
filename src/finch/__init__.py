"""Finch — contract-checked JSON services on ASGI.

Routes are declared with schemas for their path params, query, body and
responses. Inbound parts are validated before the handler runs; outbound
payloads are checked against the declared response schema.

Basic usage::

    from finch import App, RouteGroup, SchemaContract
    from finch.schema import obj, string

    app = App()

    @app.route("/", contract=SchemaContract(responses={200: obj({"message": string()})}))
    def index():
        return {"message": "Hello World!"}

    app.run()

Data access (SQLite built in, PostgreSQL with ``pip install finch[data-pg]``)::

    app = App(db="sqlite:///bookstore.db")

    @app.route("/books/")
    async def books(db):
        return {"books": await db.query("SELECT * FROM books")}
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "ContractBreachError",
    "Err",
    "FinchError",
    "HTTPError",
    "NotFound",
    "Ok",
    "RegistrationError",
    "Request",
    "Response",
    "RouteConflictError",
    "RouteGroup",
    "SchemaContract",
    "ValidationError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import finch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from finch.app import App

        return App

    if name == "AppConfig":
        from finch.config import AppConfig

        return AppConfig

    if name == "Request":
        from finch.http.request import Request

        return Request

    if name == "Response":
        from finch.http.response import Response

        return Response

    if name in ("Ok", "Err"):
        from finch import result as _result

        return getattr(_result, name)

    if name == "RouteGroup":
        from finch.routing.group import RouteGroup

        return RouteGroup

    if name == "SchemaContract":
        from finch.schema.types import SchemaContract

        return SchemaContract

    if name in (
        "ConfigurationError",
        "ContractBreachError",
        "FinchError",
        "HTTPError",
        "NotFound",
        "RegistrationError",
        "RouteConflictError",
        "ValidationError",
    ):
        from finch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
