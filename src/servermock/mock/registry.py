"""
servermock Endpoint Registry

Maps (path, method) pairs to the canned MockResponse served for them.

The first registration of a pair is authoritative: registering the same
pair again is silently ignored, so setup helpers can be called repeatedly.
Paths match exactly (case-sensitive, no patterns); methods are
case-insensitive.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from .models import MockResponse

logger = logging.getLogger("servermock.mock.registry")


class EndpointRegistry:
    """
    Thread-safe registry of configured endpoints.

    Example:
        registry = EndpointRegistry()
        registry.register('/users', 'GET', MockResponse(status_code=204))
        registry.find('/users', 'get')  # MockResponse(status_code=204, ...)
        registry.find('/users', 'POST')  # None
    """

    def __init__(self):
        self._endpoints: Dict[str, Dict[str, MockResponse]] = {}
        self._lock = threading.Lock()

    def register(self, path: str, method: str, response: MockResponse) -> bool:
        """
        Register a response for (path, method) unless one already exists.

        Args:
            path: Request path, without query string
            method: HTTP method
            response: Response to serve

        Returns:
            True if the response was stored, False if the pair was already taken
        """
        method = method.upper()
        with self._lock:
            by_method = self._endpoints.setdefault(path, {})
            if method in by_method:
                logger.debug(f"Endpoint {method} {path} already configured, ignoring")
                return False
            by_method[method] = response

        logger.debug(f"Configured endpoint {method} {path} -> {response.status_code}")
        return True

    def find(self, path: str, method: str) -> Optional[MockResponse]:
        """Look up the response for (path, method), or None."""
        with self._lock:
            by_method = self._endpoints.get(path)
            if by_method is None:
                return None
            return by_method.get(method.upper())

    def endpoints(self) -> List[Tuple[str, str]]:
        """Snapshot of registered (path, method) pairs in registration order."""
        with self._lock:
            return [
                (path, method)
                for path, by_method in self._endpoints.items()
                for method in by_method
            ]

    def clear(self):
        """Remove every registered endpoint."""
        with self._lock:
            self._endpoints.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(by_method) for by_method in self._endpoints.values())
