"""Books routes, mounted under ``/books``.

Rows are returned as the store produced them; nothing is cached.
"""

from typing import Any

from finch.data import DataAccess
from finch.routing import RouteGroup

from bookstore.schemas import BOOK_POST, BOOKS

CREATE_BOOKS_TABLE = """
CREATE TABLE IF NOT EXISTS books (
    title  TEXT NOT NULL,
    author TEXT NOT NULL
)
"""

books = RouteGroup("books")


@books.route("/", contract=BOOKS)
async def list_books(db: DataAccess) -> dict[str, Any]:
    return {"books": await db.query("SELECT * FROM books")}


@books.route("/", methods=["POST"], contract=BOOK_POST)
async def add_book(body: dict[str, Any], db: DataAccess) -> dict[str, Any]:
    book = body["book"]
    await db.execute(
        "INSERT INTO books (title, author) VALUES (?, ?)",
        [book["title"], book["author"]],
    )
    return {"status": 200}
