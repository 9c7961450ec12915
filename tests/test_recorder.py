"""
Tests for servermock Request Recorder

Tests appending, filtered queries, snapshots and concurrent writers.
"""

import threading

import pytest

from servermock.mock.models import MockRequest
from servermock.mock.recorder import RequestLog


@pytest.fixture
def request_log():
    """Log with a few requests of different paths and methods."""
    log = RequestLog()
    log.append(MockRequest(method='GET', path='/users'))
    log.append(MockRequest(method='POST', path='/users', payload='{"name": "Jane"}'))
    log.append(MockRequest(method='GET', path='/products'))
    return log


class TestRequestLog:
    """Test RequestLog class."""

    def test_query_all(self, request_log):
        """Test that no filter returns everything in arrival order."""
        requests = request_log.query()

        assert [(r.method, r.path) for r in requests] == [
            ('GET', '/users'),
            ('POST', '/users'),
            ('GET', '/products'),
        ]

    def test_filter_by_path(self, request_log):
        """Test path filtering."""
        requests = request_log.query(path='/users')

        assert len(requests) == 2
        assert all(r.path == '/users' for r in requests)

    def test_filter_by_method(self, request_log):
        """Test method filtering, case-insensitively."""
        assert len(request_log.query(method='GET')) == 2
        assert len(request_log.query(method='post')) == 1

    def test_filter_by_path_and_method(self, request_log):
        """Test combined filtering."""
        requests = request_log.query(path='/users', method='POST')

        assert len(requests) == 1
        assert requests[0].payload == '{"name": "Jane"}'

    def test_filter_without_matches(self, request_log):
        """Test filters that match nothing."""
        assert request_log.query(path='/test1', method='POST') == []
        assert request_log.query(path='/test1') == []
        assert request_log.query(method='DELETE') == []

    def test_query_returns_snapshot(self, request_log):
        """Test that later appends don't change an earlier result."""
        snapshot = request_log.query()
        request_log.append(MockRequest(method='DELETE', path='/users/1'))

        assert len(snapshot) == 3
        assert len(request_log.query()) == 4

    def test_clear(self, request_log):
        """Test clearing the log."""
        request_log.clear()

        assert len(request_log) == 0
        assert request_log.query() == []

    def test_concurrent_appends_are_not_lost(self):
        """Test many writers appending at once."""
        log = RequestLog()
        writers = 8
        per_writer = 250

        def write(worker):
            for i in range(per_writer):
                log.append(MockRequest(method='POST', path=f'/w{worker}', payload=str(i)))

        threads = [threading.Thread(target=write, args=(w,)) for w in range(writers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(log) == writers * per_writer
        for worker in range(writers):
            payloads = [r.payload for r in log.query(path=f'/w{worker}')]
            # Each writer's own appends keep their order
            assert payloads == [str(i) for i in range(per_writer)]
