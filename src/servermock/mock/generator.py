"""
servermock Response Generator

Turns configured MockResponse values into HTTP responses.

Features:
- Configured status code and headers
- JSON body with application/json content type
- Fixed "Not configured" fallback for unknown endpoints
- Plain failure response when a configured response cannot be rendered
"""

from fastapi import Response

from ..common import drop_headers
from .models import JSON_MEDIA_TYPE, MockResponse

# Framing is owned by the HTTP server, never by configured headers
HEADERS_TO_SKIP = ('content-length', 'transfer-encoding', 'connection')

NOT_CONFIGURED_STATUS = 404
NOT_CONFIGURED_BODY = 'Not configured'

FAILURE_STATUS = 500
FAILURE_BODY = 'Mock response failed'


class ResponseGenerator:
    """
    Renders mock responses for the dispatch handler.

    Example:
        generator = ResponseGenerator()
        response = generator.render(MockResponse(body=JsonBody({'ok': True})))
        response.status_code  # 200
        response.body         # b'{"ok":true}'
    """

    def render(self, mock_response: MockResponse) -> Response:
        """
        Create a Response from a configured MockResponse.

        Args:
            mock_response: Configured response for the matched endpoint

        Returns:
            Response with the configured status, headers and optional JSON body

        Raises:
            ValueError, TypeError: If the configured body is not JSON-serializable
        """
        headers = drop_headers(mock_response.headers, HEADERS_TO_SKIP)

        if not mock_response.has_body:
            return Response(status_code=mock_response.status_code, headers=headers)

        content = mock_response.body.encode()
        headers = drop_headers(headers, ['content-type'])
        return Response(
            content=content,
            status_code=mock_response.status_code,
            headers=headers,
            media_type=JSON_MEDIA_TYPE
        )

    def not_configured(self) -> Response:
        """Response for a request that matched no endpoint."""
        return Response(content=NOT_CONFIGURED_BODY, status_code=NOT_CONFIGURED_STATUS)

    def failure(self) -> Response:
        """Response for a request whose configured response could not be rendered."""
        return Response(content=FAILURE_BODY, status_code=FAILURE_STATUS)
