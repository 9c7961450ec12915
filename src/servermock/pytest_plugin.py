"""
pytest fixtures for servermock.

Enable in a conftest.py with:

    pytest_plugins = ["servermock.pytest_plugin"]
"""

import pytest

from .common import find_free_port
from .mock import MockServer


@pytest.fixture
def free_port() -> int:
    """A TCP port that was free when the fixture ran."""
    return find_free_port()


@pytest.fixture
def mock_server(free_port):
    """Started MockServer on a free port, stopped after the test."""
    server = MockServer(free_port)
    server.start()
    yield server
    server.stop()
