"""Shared pytest fixtures for Faulty tests.

This module provides common fixtures for testing the Faulty application and
its fault injection middleware. All fixtures that are used across multiple
test files should be defined here.
"""

import threading
from unittest.mock import MagicMock

import pytest
from prometheus_client import REGISTRY

from faulty.app import create_app
from faulty.services import MicroserviceClient, MicroserviceResult


def _clear_prometheus_registry():
    """Clear all Prometheus collectors to avoid duplicates between tests.

    Prometheus uses a global registry, so collectors registered in one test
    persist to the next. This helper ensures test isolation.
    """
    collectors = list(REGISTRY._collector_to_names.keys())
    for collector in collectors:
        try:
            REGISTRY.unregister(collector)
        except (KeyError, ValueError):
            # Collector was already unregistered
            pass


@pytest.fixture(autouse=True)
def clean_prometheus():
    """Automatically clean Prometheus registry before and after each test.

    This fixture runs automatically for every test to ensure clean state.
    """
    _clear_prometheus_registry()
    yield
    _clear_prometheus_registry()


class RecordingApp:
    """WSGI app that counts how often it is called.

    Stands in for the wrapped handler so tests can prove it was (or was not)
    reached.
    """

    def __init__(self, body=b"handler output", status="200 OK"):
        self.body = body
        self.status = status
        self._calls = 0
        self._lock = threading.Lock()

    @property
    def calls(self):
        return self._calls

    def __call__(self, environ, start_response):
        with self._lock:
            self._calls += 1
        start_response(
            self.status,
            [("Content-Type", "text/plain"), ("X-Handler", "recording")],
        )
        return [self.body]


@pytest.fixture
def recording_app():
    """Return a fresh RecordingApp."""
    return RecordingApp()


@pytest.fixture
def microservice_client():
    """Mock backend client that always succeeds."""
    client = MagicMock(spec=MicroserviceClient)
    client.call.return_value = MicroserviceResult(ok=True, status_code=200, status="200 OK")
    return client


def _make_app(config_override, microservice_client):
    test_app = create_app(config_override, microservice_client=microservice_client)
    test_app.config["TESTING"] = True
    return test_app


@pytest.fixture
def app(microservice_client):
    """Create Flask application for testing with faults disabled."""
    return _make_app({"FAULTS_ENABLED": False}, microservice_client)


@pytest.fixture
def client(app):
    """Create test client with faults disabled."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def app_with_errors(microservice_client):
    """Create Flask application where every eligible request fails with 500."""
    return _make_app(
        {"FAULTS_ENABLED": True, "FAULT_PERCENT": 1.0, "FAULT_TYPE": "error"},
        microservice_client,
    )


@pytest.fixture
def client_with_errors(app_with_errors):
    """Create test client with 100% error faults."""
    with app_with_errors.test_client() as test_client:
        yield test_client


@pytest.fixture
def app_with_slowness(microservice_client):
    """Create Flask application where every eligible request is delayed 50ms."""
    return _make_app(
        {
            "FAULTS_ENABLED": True,
            "FAULT_PERCENT": 1.0,
            "FAULT_TYPE": "slowness",
            "FAULT_LATENCY_MS": 50,
        },
        microservice_client,
    )


@pytest.fixture
def client_with_slowness(app_with_slowness):
    """Create test client with 100% slowness faults."""
    with app_with_slowness.test_client() as test_client:
        yield test_client
