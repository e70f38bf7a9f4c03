"""Bookstore — a small JSON service built on finch.

Serves greetings and a books collection backed by a relational store::

    from bookstore import create_app

    app = create_app()
    app.run()
"""

from bookstore.app import create_app
from bookstore.config import BookstoreConfig

__all__ = ["BookstoreConfig", "create_app"]
