"""Application constants for Faulty.

Centralizes defaults and limits so the config layer and middleware agree.
"""

# =============================================================================
# Service
# =============================================================================
SERVICE_NAME = "faulty"
DEFAULT_PORT = 8080
DEFAULT_MICROSERVICE_URL = "http://www.google.com"

# =============================================================================
# Fault Injection
# =============================================================================
FAULT_KIND_ERROR = "error"
FAULT_KIND_SLOWNESS = "slowness"
FAULT_KINDS = (FAULT_KIND_ERROR, FAULT_KIND_SLOWNESS)

DEFAULT_FAULT_KIND = FAULT_KIND_ERROR
DEFAULT_FAULT_STATUS_CODE = 500
DEFAULT_FAULT_LATENCY_MS = 1

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 599

# Liveness checks and scrapes must always answer, whatever the fault settings
DEFAULT_BLOCKED_PATHS = ("/ping", "/health", "/metrics")

# API docs stay usable while faults are active
DEFAULT_BLOCKED_PREFIXES = ("/apidocs", "/flasgger_static/", "/apispec.json")

# =============================================================================
# WSGI environ keys for request cancellation
# =============================================================================
CANCEL_EVENT_ENVIRON_KEY = "faulty.cancel_event"
DEADLINE_ENVIRON_KEY = "faulty.deadline"

# =============================================================================
# HTTP/API Settings
# =============================================================================
MICROSERVICE_REQUEST_TIMEOUT = 10  # seconds

# =============================================================================
# Metrics
# =============================================================================
DECISIONS_METRIC_NAME = "faulty_fault_decisions_total"
