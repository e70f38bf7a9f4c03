"""Routing — route groups and the compiled dispatch table.

Groups register under prefixes while the app composes; their definitions
are compiled into an immutable trie once every group has completed.
"""

from finch.routing.group import RegistrationContext, RegistrationState, RouteGroup, join_path
from finch.routing.route import RouteDefinition, RouteMatch
from finch.routing.router import Router, normalize_path, parse_path

__all__ = [
    "RegistrationContext",
    "RegistrationState",
    "RouteDefinition",
    "RouteGroup",
    "RouteMatch",
    "Router",
    "join_path",
    "normalize_path",
    "parse_path",
]
