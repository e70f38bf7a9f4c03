"""Bookstore application factory.

Each call builds a fresh App, so tests and workers never share route
tables or connections.
"""

from typing import Any

from finch.app import App
from finch.config import AppConfig
from finch.data import DataAccess

from bookstore.books import CREATE_BOOKS_TABLE, books
from bookstore.config import BookstoreConfig
from bookstore.greetings import greetings
from bookstore.schemas import HELLO, MESSAGE


def create_app(
    settings: BookstoreConfig | None = None,
    *,
    config: AppConfig | None = None,
    db: DataAccess | None = None,
) -> App:
    """Build the bookstore App.

    Args:
        settings: Service settings. Read from the environment when omitted.
        config: finch app config. Defaults to port 3002.
        db: Data access override (tests inject fakes here). Otherwise a
            ``Database`` is opened on ``settings.database_url``.
    """
    settings = settings or BookstoreConfig.from_env()
    app = App(
        config or AppConfig(port=3002),
        db=db if db is not None else settings.database_url,
    )

    @app.route("/", contract=MESSAGE)
    def index() -> dict[str, Any]:
        return {"message": "Hello World!"}

    @app.route("/hello/:name", contract=HELLO)
    def hello(name: str, query: dict[str, Any]) -> dict[str, Any]:
        return {"message": f"Hello {name}, {query['lastname']}"}

    app.mount(greetings, "/greetings")
    app.mount(books, "/books")

    if settings.create_schema:

        @app.on_startup
        async def create_books_table() -> None:
            await app.db.execute(CREATE_BOOKS_TABLE)

    return app
