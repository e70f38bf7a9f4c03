"""Tests for the bookstore service — routes, contracts, and storage calls."""

from typing import Any

import pytest

from bookstore import BookstoreConfig, create_app
from bookstore.books import CREATE_BOOKS_TABLE
from finch.data.errors import ConnectionError, QueryError
from finch.testing import TestClient

NO_SCHEMA = BookstoreConfig(create_schema=False)


class RecordingDB:
    """DataAccess stand-in that records calls and returns canned rows."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, error: Exception | None = None):
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, str, list[Any]]] = []

    async def query(self, sql, params=()):
        self.calls.append(("query", sql, list(params)))
        if self.error is not None:
            raise self.error
        return self.rows

    async def execute(self, sql, params=()):
        self.calls.append(("execute", sql, list(params)))
        if self.error is not None:
            raise self.error
        return 1


@pytest.fixture
def db() -> RecordingDB:
    return RecordingDB()


@pytest.fixture
def app(db):
    return create_app(NO_SCHEMA, db=db)


class TestGreetings:
    async def test_index(self, app) -> None:
        resp = await app.dispatch("GET", "/")
        assert resp.data == {"message": "Hello World!"}

    async def test_work(self, app) -> None:
        resp = await app.dispatch("GET", "/greetings/work")
        assert resp.data == {"message": "Hello World from greetings controller!"}

    async def test_group_hello(self, app) -> None:
        resp = await app.dispatch("GET", "/greetings/hello/Ada")
        assert resp.status == 200
        assert resp.data == {"message": "Hello Ada from greetings controller!"}

    async def test_hello_with_lastname(self, app) -> None:
        resp = await app.dispatch("GET", "/hello/Ada", query={"lastname": "Lovelace"})
        assert resp.data == {"message": "Hello Ada, Lovelace"}

    async def test_hello_without_lastname_is_400(self, app) -> None:
        resp = await app.dispatch("GET", "/hello/Ada")
        assert resp.status == 400
        assert resp.data["part"] == "query"
        assert resp.data["violations"] == [
            {
                "path": "lastname",
                "kind": "required",
                "expected": "string",
                "actual": "missing",
                "message": "lastname is required",
            }
        ]


class TestBooks:
    async def test_list_returns_rows_in_store_order(self, db, app) -> None:
        db.rows = [
            {"title": "Ubik", "author": "Dick"},
            {"title": "Dune", "author": "Herbert"},
        ]
        resp = await app.dispatch("GET", "/books/")
        assert resp.status == 200
        assert resp.data == {"books": db.rows}
        assert db.calls == [("query", "SELECT * FROM books", [])]

    async def test_list_without_trailing_slash(self, app) -> None:
        assert (await app.dispatch("GET", "/books")).status == 200

    async def test_add_book_executes_once_with_values_in_order(self, db, app) -> None:
        resp = await app.dispatch("POST", "/books/", body={"book": {"title": "T", "author": "A"}})
        assert resp.status == 200
        assert resp.data == {"status": 200}
        assert db.calls == [
            ("execute", "INSERT INTO books (title, author) VALUES (?, ?)", ["T", "A"])
        ]

    async def test_missing_book_rejected_before_storage(self, db, app) -> None:
        resp = await app.dispatch("POST", "/books/", body={})
        assert resp.status == 400
        assert resp.data["part"] == "body"
        assert resp.data["violations"][0]["path"] == "book"
        assert db.calls == []

    @pytest.mark.parametrize(
        "body",
        [
            None,
            {"book": "Dune"},
            {"book": {"title": "Dune"}},
            {"book": {"title": "Dune", "author": 7}},
        ],
    )
    async def test_malformed_book_rejected(self, db, app, body) -> None:
        resp = await app.dispatch("POST", "/books/", body=body)
        assert resp.status == 400
        assert db.calls == []

    async def test_query_failure_is_structured_500(self, app, db) -> None:
        db.error = QueryError("no such table: books")
        resp = await app.dispatch("GET", "/books/")
        assert resp.status == 500
        assert set(resp.data) == {"status", "error", "message"}

    async def test_unreachable_store_is_503(self, app, db) -> None:
        db.error = ConnectionError("connection refused")
        resp = await app.dispatch("POST", "/books/", body={"book": {"title": "T", "author": "A"}})
        assert resp.status == 503

    async def test_unknown_route(self, app) -> None:
        assert (await app.dispatch("DELETE", "/books/")).status == 404


class TestFactory:
    async def test_each_call_builds_an_independent_app(self) -> None:
        first = create_app(NO_SCHEMA, db=RecordingDB())
        second = create_app(NO_SCHEMA, db=RecordingDB())
        await first.startup()
        assert first.ready
        assert not second.ready

    async def test_schema_created_at_startup(self, db) -> None:
        app = create_app(BookstoreConfig(create_schema=True), db=db)
        await app.startup()
        assert db.calls == [("execute", CREATE_BOOKS_TABLE, [])]

    async def test_routes(self, app) -> None:
        await app.startup()
        assert [(r.method, r.path) for r in app.routes] == [
            ("GET", "/"),
            ("GET", "/hello/:name"),
            ("GET", "/greetings/work"),
            ("GET", "/greetings/hello/:name"),
            ("GET", "/books/"),
            ("POST", "/books/"),
        ]

    def test_default_port(self, app) -> None:
        assert app.config.port == 3002


class TestOverASGI:
    """End to end through the ASGI interface with a real SQLite file."""

    @pytest.fixture
    def sqlite_app(self, tmp_path):
        return create_app(BookstoreConfig(database_url=f"sqlite:///{tmp_path / 'books.db'}"))

    async def test_add_then_list(self, sqlite_app) -> None:
        async with TestClient(sqlite_app) as client:
            created = await client.post("/books/", json={"book": {"title": "Dune", "author": "Herbert"}})
            assert created.status == 200
            assert created.data == {"status": 200}

            listed = await client.get("/books/")
            assert listed.status == 200
            assert listed.data == {"books": [{"title": "Dune", "author": "Herbert"}]}
            assert listed.content_type.startswith("application/json")

    async def test_query_string(self, sqlite_app) -> None:
        async with TestClient(sqlite_app) as client:
            resp = await client.get("/hello/Ada", query={"lastname": "Lovelace"})
            assert resp.data == {"message": "Hello Ada, Lovelace"}
            inline = await client.get("/hello/Ada?lastname=Byron")
            assert inline.data == {"message": "Hello Ada, Byron"}

    async def test_missing_query_is_400(self, sqlite_app) -> None:
        async with TestClient(sqlite_app) as client:
            resp = await client.get("/hello/Ada")
            assert resp.status == 400
            assert resp.data["error"] == "Bad Request"

    async def test_malformed_json_is_400(self, sqlite_app) -> None:
        async with TestClient(sqlite_app) as client:
            resp = await client.post(
                "/books/",
                body=b"{not json",
                headers={"content-type": "application/json"},
            )
            assert resp.status == 400
            assert "not valid JSON" in resp.data["message"]

    async def test_oversized_body_is_413(self, tmp_path) -> None:
        from finch.config import AppConfig

        app = create_app(
            BookstoreConfig(database_url=f"sqlite:///{tmp_path / 'books.db'}"),
            config=AppConfig(max_content_length=16),
        )
        async with TestClient(app) as client:
            resp = await client.post("/books/", json={"book": {"title": "x" * 64, "author": "y"}})
            assert resp.status == 413

    async def test_not_found(self, sqlite_app) -> None:
        async with TestClient(sqlite_app) as client:
            resp = await client.get("/authors")
            assert resp.status == 404
            assert resp.data == {
                "status": 404,
                "error": "Not Found",
                "message": "No route matches GET '/authors'",
            }
