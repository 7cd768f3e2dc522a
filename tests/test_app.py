"""Core application tests for Faulty.

Tests for the host endpoints and the fault middleware installed on the
Flask app. Common fixtures (client, client_with_errors, client_with_slowness)
are provided by conftest.py.
"""

import json
import time

import pytest
from prometheus_client import REGISTRY

from faulty.app import create_app
from faulty.errors import InvalidConfig
from faulty.middleware import FaultMiddleware
from faulty.services import MicroserviceResult


def _decision_count(decision, status=""):
    return REGISTRY.get_sample_value(
        "faulty_fault_decisions_total", {"decision": decision, "status": status}
    )


# ---- Host Endpoints ----

def test_app_info(client):
    """Test the root endpoint returns application info and fault settings."""
    response = client.get('/')
    assert response.status_code == 200

    data = json.loads(response.data)
    assert data['message'] == 'Faulty - Fault Injection Service'
    assert data['service'] == 'faulty'
    assert 'timestamp' in data
    assert 'version' in data
    assert 'environment' in data
    assert data['faults']['enabled'] is False
    assert data['faults']['type'] == 'error'

def test_health_check(client):
    """Test the health check endpoint."""
    response = client.get('/health')
    assert response.status_code == 200

    data = json.loads(response.data)
    assert data['status'] == 'healthy'
    assert 'timestamp' in data

def test_ping(client):
    """Test the ping endpoint."""
    response = client.get('/ping')
    assert response.status_code == 200
    assert response.data == b'pong'

def test_authz(client):
    """Test the authz endpoint returns its fixed body."""
    response = client.get('/authz')
    assert response.status_code == 200
    assert response.data == b'Security!'

def test_microservice(client, microservice_client):
    """Test the microservice endpoint calls the backend."""
    response = client.get('/microservice')
    assert response.status_code == 200
    assert response.data == b'External service!'
    microservice_client.call.assert_called_once()

def test_microservice_backend_down(client, microservice_client):
    """Test the microservice endpoint reports an unreachable backend."""
    microservice_client.call.return_value = MicroserviceResult(ok=False, error='timeout')

    response = client.get('/microservice')
    assert response.status_code == 502

    data = json.loads(response.data)
    assert data['error'] == 'Bad Gateway'
    assert 'timeout' in data['message']

def test_metrics_endpoint(client):
    """Test the metrics endpoint returns Prometheus format."""
    client.get('/authz')
    response = client.get('/metrics')
    assert response.status_code == 200

    assert response.content_type.startswith('text/plain')
    data = response.data.decode('utf-8')
    assert 'faulty_fault_decisions_total' in data

def test_invalid_endpoint(client):
    """Test that invalid endpoints return 404."""
    response = client.get('/nonexistent')
    assert response.status_code == 404

def test_app_creation(app):
    """Test that the app can be created with the middleware installed."""
    assert app.config['TESTING'] is True
    assert isinstance(app.extensions['faulty'], FaultMiddleware)

def test_apidocs_spec_available(client):
    """Test the OpenAPI spec lists the faultable endpoints."""
    response = client.get('/apispec.json')
    assert response.status_code == 200

    data = json.loads(response.data)
    assert '/authz' in data['paths']
    assert '/microservice' in data['paths']


# ---- Error Faults ----

def test_faults_disabled_by_default(client):
    """Test no faults when FAULTS_ENABLED is not set."""
    for _ in range(5):
        response = client.get('/authz')
        assert response.status_code == 200
    assert _decision_count('disabled') == 5

def test_error_fault_returns_500(client_with_errors):
    """Test that FAULT_PERCENT=1.0 fails every eligible request."""
    response = client_with_errors.get('/authz')
    assert response.status_code == 500
    assert response.data == b''

def test_error_fault_skips_handler(client_with_errors, microservice_client):
    """Test that a faulted request never reaches the route handler."""
    response = client_with_errors.get('/microservice')
    assert response.status_code == 500
    microservice_client.call.assert_not_called()

def test_error_fault_applies_to_unknown_paths(client_with_errors):
    """Test that unknown paths are faulted like any other eligible path."""
    response = client_with_errors.get('/data')
    assert response.status_code == 500

@pytest.mark.parametrize('path', ['/health', '/ping', '/metrics'])
def test_error_fault_never_affects_liveness_endpoints(client_with_errors, path):
    """Test liveness endpoints never fail even with FAULT_PERCENT=1.0."""
    response = client_with_errors.get(path)
    assert response.status_code == 200

def test_error_fault_never_affects_apidocs(client_with_errors):
    """Test API docs stay reachable while faults are active."""
    response = client_with_errors.get('/apispec.json')
    assert response.status_code == 200

def test_error_fault_decisions_are_counted(client_with_errors):
    """Test fault decisions are exported to Prometheus."""
    client_with_errors.get('/authz')
    client_with_errors.get('/authz')
    client_with_errors.get('/health')

    assert _decision_count('faulted', '500') == 2
    assert _decision_count('blocked') == 1

def test_error_fault_status_exported_on_metrics(client_with_errors):
    """Test injected 500s appear on /metrics even though Flask never sees them."""
    for _ in range(3):
        assert client_with_errors.get('/authz').status_code == 500

    data = client_with_errors.get('/metrics').data.decode('utf-8')
    assert any(
        line.startswith('faulty_fault_decisions_total{')
        and 'decision="faulted"' in line
        and 'status="500"' in line
        and line.endswith(' 3.0')
        for line in data.splitlines()
    )

def test_custom_status_code(microservice_client):
    """Test FAULT_STATUS_CODE controls the injected status."""
    app = create_app(
        {'FAULTS_ENABLED': True, 'FAULT_PERCENT': 1.0, 'FAULT_STATUS_CODE': 503},
        microservice_client=microservice_client,
    )
    with app.test_client() as client:
        assert client.get('/authz').status_code == 503
    assert _decision_count('faulted', '503') == 1

def test_custom_blocked_paths(microservice_client):
    """Test FAULT_BLOCKED_PATHS adds to the default blocklist."""
    app = create_app(
        {'FAULTS_ENABLED': True, 'FAULT_PERCENT': 1.0, 'FAULT_BLOCKED_PATHS': '/authz'},
        microservice_client=microservice_client,
    )
    with app.test_client() as client:
        assert client.get('/authz').status_code == 200
        assert client.get('/health').status_code == 200
        assert client.get('/microservice').status_code == 500


# ---- Slowness Faults ----

def test_slowness_fault_delays_response(client_with_slowness):
    """Test slowness faults delay but do not change the response."""
    start = time.monotonic()
    response = client_with_slowness.get('/authz')
    elapsed = time.monotonic() - start

    assert response.status_code == 200
    assert response.data == b'Security!'
    assert elapsed >= 0.045

def test_slowness_fault_never_delays_health(client_with_slowness):
    """Test blocked paths bypass the slowness injector."""
    response = client_with_slowness.get('/health')
    assert response.status_code == 200
    assert _decision_count('blocked') == 1
    assert _decision_count('faulted') == 0


# ---- Startup Validation ----

@pytest.mark.parametrize('override', [
    {'FAULTS_ENABLED': True, 'FAULT_PERCENT': 1.5},
    {'FAULTS_ENABLED': True, 'FAULT_PERCENT': -0.1},
    {'FAULT_TYPE': 'slowness', 'FAULT_LATENCY_MS': -10},
    {'FAULT_STATUS_CODE': 42},
])
def test_invalid_fault_config_halts_startup(override):
    """Test the app refuses to start with a broken fault configuration."""
    with pytest.raises(InvalidConfig):
        create_app(override)
