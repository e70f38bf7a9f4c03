"""Test utilities for finch applications::

    from finch.testing import TestClient
"""

from finch.testing.client import TestClient

__all__ = ["TestClient"]
