"""
servermock Mock Server

FastAPI-based HTTP test double running on a real port.

Features:
- Endpoints configured per (path, method) through a fluent builder
- Every inbound request captured for later assertions
- Configurable status, headers, JSON body and artificial delay
- Start/stop/reset lifecycle, safe to repeat and to restart on the same port
"""

from __future__ import annotations

import asyncio
import logging
import socket
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.routing import APIRoute
from starlette.requests import ClientDisconnect
from starlette.routing import Match
from starlette.types import Receive, Scope, Send

from ..common import decode_body, last_value_dict
from .builder import EndpointBuilder
from .generator import ResponseGenerator
from .models import MockRequest, MockResponse
from .recorder import RequestLog
from .registry import EndpointRegistry

DEFAULT_PORT = 7900

HTTP_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE"]


class AnyMethodRoute(APIRoute):
    """
    Route that accepts every HTTP method, not only the declared ones.

    Starlette reports a path match with an undeclared method as a partial
    match and answers it with 405; here any method on a matching path is a
    full match and reaches the endpoint.
    """

    def matches(self, scope: Scope) -> Tuple[Match, Scope]:
        match, child_scope = super().matches(scope)
        if match is Match.PARTIAL:
            return Match.FULL, child_scope
        return match, child_scope

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


@dataclass
class MockServerConfig:
    """Configuration for mock server behavior."""

    # Server options
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    log_level: str = "warning"
    access_log: bool = False

    # Lifecycle timeouts in seconds
    startup_timeout: float = 5.0
    shutdown_timeout: float = 5.0


class ServerState(Enum):
    """Lifecycle state of a MockServer."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class MockServer:
    """
    Embeddable HTTP mock server for integration tests.

    Each instance owns its own endpoint registry, request log and listener,
    so several servers can run side by side on different ports.

    Example:
        server = MockServer(7901)
        server.start()

        server.get('/test1').with_response({'Message': 'Response 1'}).provide()
        server.post('/orders').with_status_code(201).with_delay(100).provide()

        # ... exercise the code under test against server.url ...

        requests = server.get_requests('/orders', 'POST')
        assert requests[0].json() == {'sku': 'abc'}

        server.stop()

        # Or as a context manager
        with MockServer(7901) as server:
            server.get('/health').provide()
    """

    def __init__(
        self,
        port: Optional[int] = None,
        config: Optional[MockServerConfig] = None
    ):
        """
        Initialize mock server.

        Args:
            port: Port to listen on (overrides config.port)
            config: Optional MockServerConfig for server behavior
        """
        self.config = replace(config) if config else MockServerConfig()
        if port is not None:
            self.config = replace(self.config, port=port)

        self.registry = EndpointRegistry()
        self.requests = RequestLog()
        self.generator = ResponseGenerator()

        self.logger = logging.getLogger(f"servermock.mock.{self.config.port}")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))

        self._state = ServerState.STOPPED
        self._lifecycle_lock = threading.Lock()
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._socket: Optional[socket.socket] = None

        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with the catch-all mock route."""
        app = FastAPI(
            title="servermock",
            description="HTTP test double serving configured responses",
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        async def mock_request(request: Request, path: str):
            """Capture the request and serve the configured response."""
            return await self._handle_request(request)

        app.router.add_api_route(
            "/{path:path}",
            mock_request,
            methods=HTTP_METHODS,
            route_class_override=AnyMethodRoute
        )

        return app

    async def _handle_request(self, request: Request) -> Response:
        """
        Capture an incoming request and serve its mock response.

        Args:
            request: FastAPI Request object

        Returns:
            Configured response, or the "Not configured" 404
        """
        try:
            body = await request.body()
        except ClientDisconnect:
            self.logger.warning(f"Client disconnected while sending {request.method} {request.scope['path']}")
            return Response(status_code=400)

        mock_request = MockRequest(
            method=request.method,
            path=request.scope["path"],
            payload=decode_body(body),
            headers=last_value_dict(request.headers.items()),
            query_parameters=last_value_dict(request.query_params.multi_items())
        )
        self.requests.append(mock_request)

        mock_response = self.registry.find(mock_request.path, mock_request.method)
        if mock_response is None:
            self.logger.info(f"No endpoint configured for {mock_request.method} {mock_request.path}")
            return self.generator.not_configured()

        self.logger.debug(
            f"Matched {mock_request.method} {mock_request.path} -> {mock_response.status_code}"
        )

        try:
            response = self.generator.render(mock_response)
        except Exception:
            self.logger.exception(
                f"Failed to render response for {mock_request.method} {mock_request.path}"
            )
            return self.generator.failure()

        await self._apply_delay(mock_response.delay_ms)
        return response

    async def _apply_delay(self, delay_ms: int):
        """Hold the response for delay_ms milliseconds (non-positive means none)."""
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

    def _bind_socket(self) -> socket.socket:
        """
        Bind and listen on the configured address.

        Raises:
            OSError: If the port is already in use or otherwise unavailable
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.config.host, self.config.port))
            sock.listen()
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    def start(self):
        """
        Start the mock server in a background thread.

        Returns once the listener accepts connections. Calling start() on a
        server that is already running does nothing.

        Raises:
            OSError: If the port cannot be bound
            RuntimeError: If the server does not come up within startup_timeout
        """
        with self._lifecycle_lock:
            if self._state is not ServerState.STOPPED:
                self.logger.debug(f"Mock server on port {self.config.port} already {self._state.value}")
                return

            self._state = ServerState.STARTING
            try:
                sock = self._bind_socket()
            except OSError:
                self._state = ServerState.STOPPED
                raise

            server = uvicorn.Server(uvicorn.Config(
                self.app,
                host=self.config.host,
                port=self.config.port,
                log_level=self.config.log_level,
                log_config=None,
                access_log=self.config.access_log,
                lifespan="off"
            ))
            thread = threading.Thread(
                target=server.run,
                kwargs={"sockets": [sock]},
                name=f"servermock-{self.config.port}",
                daemon=True
            )
            thread.start()

            deadline = time.monotonic() + self.config.startup_timeout
            while not server.started:
                if not thread.is_alive() or time.monotonic() > deadline:
                    server.should_exit = True
                    thread.join(timeout=self.config.shutdown_timeout)
                    sock.close()
                    self._state = ServerState.STOPPED
                    raise RuntimeError(f"Failed to start mock server on port {self.config.port}")
                time.sleep(0.01)

            self._server = server
            self._thread = thread
            self._socket = sock
            self._state = ServerState.RUNNING

        self.logger.info(f"Mock server listening on {self.url}")

    def stop(self):
        """
        Stop the mock server and release its port.

        In-flight requests are allowed to finish. Configured endpoints and
        recorded requests are discarded, so a later start() begins empty.
        Safe to call repeatedly or before start().
        """
        with self._lifecycle_lock:
            if self._state is ServerState.STOPPED:
                return

            self._server.should_exit = True
            self._thread.join(timeout=self.config.shutdown_timeout)
            if self._thread.is_alive():
                self.logger.warning(f"Mock server on port {self.config.port} did not stop in time, forcing exit")
                self._server.force_exit = True
                self._thread.join(timeout=self.config.shutdown_timeout)
            self._socket.close()

            self._server = None
            self._thread = None
            self._socket = None
            self._state = ServerState.STOPPED
            self.reset()

        self.logger.info(f"Mock server on port {self.config.port} stopped")

    def dispose(self):
        """Alias of stop()."""
        self.stop()

    def reset(self):
        """Forget all configured endpoints and recorded requests."""
        self.registry.clear()
        self.requests.clear()

    def get_requests(
        self,
        path: Optional[str] = None,
        method: Optional[str] = None
    ) -> List[MockRequest]:
        """
        Get requests received so far, in arrival order.

        Args:
            path: Only requests to exactly this path (all paths if None)
            method: Only requests with this HTTP method (all methods if None)

        Returns:
            List of captured MockRequest objects
        """
        return self.requests.query(path=path, method=method)

    def configure_endpoint(self, path: str, method: str, response: MockResponse) -> bool:
        """
        Register a response for (path, method); the first registration wins.

        Returns:
            True if registered, False if the endpoint was already configured
        """
        return self.registry.register(path, method, response)

    def endpoint(self, method: str, path: str) -> EndpointBuilder:
        """
        Begin configuration of an endpoint for any HTTP method, including
        extension methods such as PURGE. The method is upper-cased.
        """
        return EndpointBuilder(self, path, method.upper())

    def configure(self, method: str, path: str, response_body: Any,
                  status_code: int = 200,
                  headers: Optional[Mapping[str, str]] = None) -> bool:
        """
        Register a response in a single call.

        Args:
            method: HTTP method
            path: Request path
            response_body: JSON-serializable body (or a JsonBody, or None)
            status_code: Response status code
            headers: Optional response headers

        Returns:
            True if registered, False if the endpoint was already configured
        """
        builder = self.endpoint(method, path).with_response(response_body).with_status_code(status_code)
        if headers:
            builder.with_headers(headers)
        return builder.provide()

    def configure_get(self, path: str, response_body: Any, status_code: int = 200,
                      headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("GET", path, response_body, status_code, headers)

    def configure_post(self, path: str, response_body: Any, status_code: int = 200,
                       headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("POST", path, response_body, status_code, headers)

    def configure_put(self, path: str, response_body: Any, status_code: int = 200,
                      headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("PUT", path, response_body, status_code, headers)

    def configure_delete(self, path: str, response_body: Any, status_code: int = 200,
                         headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("DELETE", path, response_body, status_code, headers)

    def configure_patch(self, path: str, response_body: Any, status_code: int = 200,
                        headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("PATCH", path, response_body, status_code, headers)

    def configure_head(self, path: str, response_body: Any, status_code: int = 200,
                       headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("HEAD", path, response_body, status_code, headers)

    def configure_options(self, path: str, response_body: Any, status_code: int = 200,
                          headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("OPTIONS", path, response_body, status_code, headers)

    def configure_trace(self, path: str, response_body: Any, status_code: int = 200,
                        headers: Optional[Mapping[str, str]] = None) -> bool:
        return self.configure("TRACE", path, response_body, status_code, headers)

    def get(self, path: str) -> EndpointBuilder:
        """Begin configuration of a GET endpoint."""
        return self.endpoint("GET", path)

    def post(self, path: str) -> EndpointBuilder:
        """Begin configuration of a POST endpoint."""
        return self.endpoint("POST", path)

    def put(self, path: str) -> EndpointBuilder:
        """Begin configuration of a PUT endpoint."""
        return self.endpoint("PUT", path)

    def delete(self, path: str) -> EndpointBuilder:
        """Begin configuration of a DELETE endpoint."""
        return self.endpoint("DELETE", path)

    def patch(self, path: str) -> EndpointBuilder:
        """Begin configuration of a PATCH endpoint."""
        return self.endpoint("PATCH", path)

    def head(self, path: str) -> EndpointBuilder:
        """Begin configuration of a HEAD endpoint."""
        return self.endpoint("HEAD", path)

    def options(self, path: str) -> EndpointBuilder:
        """Begin configuration of an OPTIONS endpoint."""
        return self.endpoint("OPTIONS", path)

    def trace(self, path: str) -> EndpointBuilder:
        """Begin configuration of a TRACE endpoint."""
        return self.endpoint("TRACE", path)

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ServerState.RUNNING

    @property
    def url(self) -> str:
        """Base URL of the server, without a trailing slash."""
        return f"http://{self.config.host}:{self.config.port}"

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app

    def __enter__(self) -> MockServer:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


def create_mock_server(
    port: int = DEFAULT_PORT,
    host: str = "127.0.0.1",
    log_level: str = "warning",
    access_log: bool = False,
    start: bool = False
) -> MockServer:
    """
    Convenience function to create and configure a mock server.

    Args:
        port: Port to bind to
        host: Host to bind to
        log_level: Level for servermock and uvicorn loggers
        access_log: Enable uvicorn access logging
        start: Start the server before returning it

    Returns:
        Configured MockServer instance

    Example:
        server = create_mock_server(port=7901, start=True)
        server.get('/ping').with_response({'pong': True}).provide()
    """
    config = MockServerConfig(
        host=host,
        port=port,
        log_level=log_level,
        access_log=access_log
    )
    server = MockServer(config=config)
    if start:
        server.start()
    return server
