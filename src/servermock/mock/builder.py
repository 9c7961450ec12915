"""
servermock Endpoint Builder

Fluent configuration for a single (path, method) endpoint.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from .models import JsonBody, MockResponse

if TYPE_CHECKING:
    from .server import MockServer


class EndpointBuilder:
    """
    Accumulates a response for one endpoint and registers it on provide().

    Nothing is registered until provide() is called. Values are accepted as
    given: a negative delay is stored and simply means no delay.

    Example:
        server.get('/users/1') \\
            .with_response({'id': 1}) \\
            .with_headers({'X-Trace': 'abc'}) \\
            .with_status_code(200) \\
            .with_delay(50) \\
            .provide()
    """

    def __init__(self, server: MockServer, path: str, method: str):
        self.server = server
        self.path = path
        self.method = method.upper()
        self._body: Optional[JsonBody] = None
        self._headers: Mapping[str, str] = {}
        self._status_code = 200
        self._delay_ms = 0

    def with_response(self, body: Any) -> EndpointBuilder:
        """
        Set the JSON response body.

        Args:
            body: Any JSON-serializable value, or a JsonBody. None means no body.
        """
        if body is None or isinstance(body, JsonBody):
            self._body = body
        else:
            self._body = JsonBody(body)
        return self

    def with_headers(self, headers: Mapping[str, str]) -> EndpointBuilder:
        """Set the response headers, replacing any set earlier."""
        self._headers = dict(headers)
        return self

    def with_status_code(self, status_code: int) -> EndpointBuilder:
        """Set the status code (an int or an http.HTTPStatus member)."""
        self._status_code = int(status_code)
        return self

    def with_delay(self, milliseconds: int) -> EndpointBuilder:
        """Hold the response for this many milliseconds before completing it."""
        self._delay_ms = milliseconds
        return self

    def build(self) -> MockResponse:
        """Produce the immutable response record for the current configuration."""
        return MockResponse(
            body=self._body,
            headers=self._headers,
            status_code=self._status_code,
            delay_ms=self._delay_ms
        )

    def provide(self) -> bool:
        """
        Register the configured response on the server.

        Returns:
            True if registered, False if the endpoint was already configured
        """
        return self.server.configure_endpoint(self.path, self.method, self.build())
