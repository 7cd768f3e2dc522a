# src/faulty/openapi_specs.py
"""
OpenAPI/Swagger specifications for Faulty API endpoints.

Each spec is a dictionary that can be used with flasgger's swag_from decorator.
"""

# ---- Health Endpoints ----

APP_INFO_SPEC = {
    "tags": ["Health"],
    "summary": "Application Info",
    "description": "Returns Faulty application info and the active fault settings.",
    "responses": {
        200: {
            "description": "Application info",
            "schema": {
                "type": "object",
                "properties": {
                    "message": {
                        "type": "string",
                        "example": "Faulty - Fault Injection Service",
                    },
                    "service": {"type": "string", "example": "faulty"},
                    "timestamp": {"type": "string", "format": "date-time"},
                    "version": {"type": "string", "example": "dev"},
                    "environment": {"type": "string", "example": "local"},
                    "faults": {
                        "type": "object",
                        "properties": {
                            "enabled": {"type": "boolean", "example": True},
                            "participation": {"type": "number", "example": 0.25},
                            "type": {"type": "string", "example": "error"},
                            "status_code": {"type": "integer", "example": 500},
                            "latency_ms": {"type": "number", "example": 1},
                            "blocked_paths": {
                                "type": "array",
                                "items": {"type": "string"},
                                "example": ["/ping", "/health"],
                            },
                        },
                    },
                },
            },
        },
    },
}

HEALTH_CHECK_SPEC = {
    "tags": ["Health"],
    "summary": "Health Check",
    "description": "Returns health status for Kubernetes liveness checks. "
    "Never faulted.",
    "responses": {
        200: {
            "description": "Service is healthy",
            "schema": {
                "type": "object",
                "properties": {
                    "status": {"type": "string", "example": "healthy"},
                    "timestamp": {"type": "string", "format": "date-time"},
                },
            },
        },
    },
}

PING_SPEC = {
    "tags": ["Health"],
    "summary": "Ping",
    "description": "Plain-text liveness check. Never faulted.",
    "produces": ["text/plain"],
    "responses": {
        200: {"description": "pong"},
    },
}

# ---- Faultable Endpoints ----

AUTHZ_SPEC = {
    "tags": ["Faultable"],
    "summary": "Authorization Stub",
    "description": "Returns a fixed plain-text body. Subject to fault injection.",
    "produces": ["text/plain"],
    "responses": {
        200: {"description": "Security!"},
        500: {"description": "Injected error fault (status is configurable)"},
    },
}

MICROSERVICE_SPEC = {
    "tags": ["Faultable"],
    "summary": "Call Backend Microservice",
    "description": "Calls the configured MICROSERVICE_URL and reports success. "
    "Subject to fault injection.",
    "produces": ["text/plain", "application/json"],
    "responses": {
        200: {"description": "External service!"},
        500: {"description": "Injected error fault (status is configurable)"},
        502: {
            "description": "Backend unreachable",
            "schema": {
                "type": "object",
                "properties": {
                    "error": {"type": "string", "example": "Bad Gateway"},
                    "message": {"type": "string"},
                },
            },
        },
    },
}
