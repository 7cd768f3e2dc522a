"""Swagger/OpenAPI configuration for Faulty API."""

import os

from flasgger import Swagger

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs",
}

SWAGGER_TEMPLATE = {
    "info": {
        "title": "Faulty API",
        "description": "Request-level fault injection service. A configurable "
        "fraction of requests fails with an error status or is delayed, to test "
        "the resilience of downstream callers.",
        "version": os.getenv("APP_VERSION", "dev"),
        "contact": {
            "name": "Platform Engineering",
        },
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "tags": [
        {
            "name": "Health",
            "description": "Health and status endpoints (never faulted)",
        },
        {
            "name": "Faultable",
            "description": "Endpoints subject to fault injection",
        },
    ],
}


def init_swagger(app):
    """Initialize Swagger documentation for the app.

    Args:
        app: Flask application instance

    Returns:
        Swagger instance
    """
    app.config["SWAGGER"] = SWAGGER_CONFIG
    return Swagger(app, template=SWAGGER_TEMPLATE)
