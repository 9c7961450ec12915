"""
servermock - HTTP test double for integration tests

Run a real HTTP listener, register canned responses per (path, method),
and assert on the requests your code sent.
"""

from .mock import (
    MockServer,
    MockServerConfig,
    ServerState,
    create_mock_server,
    EndpointBuilder,
    JsonBody,
    MockRequest,
    MockResponse,
)

__all__ = [
    'MockServer',
    'MockServerConfig',
    'ServerState',
    'create_mock_server',
    'EndpointBuilder',
    'JsonBody',
    'MockRequest',
    'MockResponse',
]

__version__ = '1.0.0'
