"""
Pytest configuration and shared fixtures
"""

from urllib.parse import urlsplit

import pytest
import requests
from unittest.mock import patch

from mrcount.coordinator.registry import WorkerRegistry
from mrcount.worker.server import create_mapper_app, create_reducer_app


SAMPLE_TEXT = "the quick brown fox the lazy dog the fox"


class RoutedResponse:
    """Minimal stand-in for requests.Response built from a Flask test response"""

    def __init__(self, url, flask_response):
        self.url = url
        self.status_code = flask_response.status_code
        self._body = flask_response.get_json(silent=True)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for {self.url}", response=self)

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class WorkerNetwork:
    """Routes requests.post calls to in-process worker apps by base address.

    Addresses listed in ``down`` raise ConnectionError, those in ``slow``
    raise Timeout, mimicking a dead or stuck worker.
    """

    def __init__(self):
        self.apps = {}
        self.down = set()
        self.slow = set()
        self.calls = []

    def add_mapper(self, address):
        self.apps[address] = create_mapper_app(address)
        return address

    def add_reducer(self, address):
        self.apps[address] = create_reducer_app(address)
        return address

    def post(self, url, json=None, timeout=None):
        parts = urlsplit(url)
        base = f"{parts.scheme}://{parts.netloc}"
        self.calls.append((base, parts.path, json))
        if base in self.down or base not in self.apps:
            raise requests.ConnectionError(f"Connection refused: {url}")
        if base in self.slow:
            raise requests.Timeout(f"Read timed out: {url}")
        return RoutedResponse(url, self.apps[base].test_client().post(parts.path, json=json))

    def calls_to(self, base):
        return [c for c in self.calls if c[0] == base]


@pytest.fixture
def sample_text():
    """Sample text for testing: 9 words, 6 distinct"""
    return SAMPLE_TEXT


@pytest.fixture
def registry():
    """Empty registry with the default 2/2 minimums"""
    return WorkerRegistry(min_mappers=2, min_reducers=2)


@pytest.fixture
def worker_network():
    """Patch outbound worker calls so they hit in-process Flask workers"""
    network = WorkerNetwork()
    with patch('mrcount.common.http_client.requests.post', side_effect=network.post):
        yield network


@pytest.fixture
def ready_registry(registry, worker_network):
    """Registry with two mappers and two reducers backed by worker_network"""
    for port in (3001, 3002):
        registry.register('mapper', worker_network.add_mapper(f"http://localhost:{port}"))
    for port in (4001, 4002):
        registry.register('reducer', worker_network.add_reducer(f"http://localhost:{port}"))
    return registry
