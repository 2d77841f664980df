"""
rudder Testing - in-process test helpers.

Usage:
    from rudder.testing import TestClient

    async def test_index():
        client = TestClient(RudderApp())
        response = await client.get("/")
        assert response.status_code == 200
"""

from .client import TestClient, TestResponse
from .utils import make_test_receive, make_test_scope

__all__ = [
    "TestClient",
    "TestResponse",
    "make_test_scope",
    "make_test_receive",
]
