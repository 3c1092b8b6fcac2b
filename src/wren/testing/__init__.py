"""Test utilities for wren applications.

    from wren.testing import TestClient
"""

from wren.testing.client import TestClient
from wren.testing.sse import SSEMessage, SSETestResult

__all__ = ["SSEMessage", "SSETestResult", "TestClient"]
