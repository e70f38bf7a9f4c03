"""Shared type aliases used across finch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler — user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Lifecycle hook — sync or async callable with no arguments
Hook: TypeAlias = Callable[[], Any]
