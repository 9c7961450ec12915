"""
servermock Mock Server Module

Embeddable HTTP test double.

This module provides:
- FastAPI/uvicorn-based mock server with start/stop/reset lifecycle
- Endpoint registry with first-registration-wins semantics
- Request log of every inbound call
- Fluent endpoint builder
"""

from .server import (
    MockServer,
    MockServerConfig,
    ServerState,
    create_mock_server,
    DEFAULT_PORT,
    HTTP_METHODS,
)
from .builder import EndpointBuilder
from .registry import EndpointRegistry
from .recorder import RequestLog
from .generator import ResponseGenerator
from .models import JsonBody, MockRequest, MockResponse

__all__ = [
    # Server
    'MockServer',
    'MockServerConfig',
    'ServerState',
    'create_mock_server',
    'DEFAULT_PORT',
    'HTTP_METHODS',

    # Configuration
    'EndpointBuilder',
    'EndpointRegistry',

    # Capture
    'RequestLog',

    # Responses
    'ResponseGenerator',
    'JsonBody',
    'MockRequest',
    'MockResponse',
]
