"""
servermock Request Recorder

Append-only log of every request the mock server received.
"""

import logging
import threading
from typing import List, Optional

from .models import MockRequest

logger = logging.getLogger("servermock.mock.recorder")


class RequestLog:
    """
    Thread-safe, append-only collection of captured requests.

    Entries are published whole: a reader either sees a MockRequest or does
    not see it yet. query() returns a copy, so appends that happen while the
    caller iterates are not visible in that result.

    Example:
        log = RequestLog()
        log.append(MockRequest(method='GET', path='/users'))
        log.query(path='/users')          # [MockRequest(...)]
        log.query(method='POST')          # []
    """

    def __init__(self):
        self._requests: List[MockRequest] = []
        self._lock = threading.Lock()

    def append(self, request: MockRequest):
        """Record a request."""
        with self._lock:
            self._requests.append(request)
        logger.debug(f"Recorded request: {request.method} {request.path}")

    def query(
        self,
        path: Optional[str] = None,
        method: Optional[str] = None
    ) -> List[MockRequest]:
        """
        Get recorded requests in arrival order, optionally filtered.

        Args:
            path: Only requests with exactly this path (all paths if None)
            method: Only requests with this HTTP method (all methods if None)

        Returns:
            Point-in-time list of matching requests
        """
        with self._lock:
            snapshot = list(self._requests)

        if method is not None:
            method = method.upper()

        return [
            r for r in snapshot
            if (path is None or r.path == path)
            and (method is None or r.method == method)
        ]

    def clear(self):
        """Forget every recorded request."""
        with self._lock:
            self._requests.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)
