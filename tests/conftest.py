"""
Shared test fixtures and helpers for the rudder test suite.
"""

import pytest

from rudder import RoutingOptions, RudderApp
from rudder.metadata import get_metadata_args_storage
from rudder.testing import TestClient


@pytest.fixture(autouse=True)
def clean_registry():
    """Each test declares its own controllers on an empty registry."""
    storage = get_metadata_args_storage()
    storage.reset()
    yield storage
    storage.reset()


def make_client(**options) -> TestClient:
    """Build an app from everything registered so far and wrap it in a client."""
    options.setdefault("development", False)
    return TestClient(RudderApp(RoutingOptions(**options)))


@pytest.fixture
def client_factory():
    return make_client
