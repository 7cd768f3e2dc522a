"""Application factory for Faulty.

This module bootstraps the Flask application by wiring together:
- Swagger/OpenAPI documentation
- Prometheus metrics (HTTP metrics plus fault decision counts)
- Route handlers
- Fault injection middleware (outermost WSGI layer)
"""

import logging
import os

from flask import Flask
from prometheus_flask_exporter import PrometheusMetrics
from werkzeug.middleware.proxy_fix import ProxyFix

from faulty.config import FaultSettings
from faulty.constants import DEFAULT_PORT
from faulty.faulty_service import FaultyService
from faulty.middleware import init_fault
from faulty.services import DecisionRecorder
from faulty.swagger_config import init_swagger


def create_app(config_override: dict | None = None, microservice_client=None):
    """Application factory for creating the Flask app.

    Args:
        config_override: Optional config dict for testing. Supports the
            environment variable names read by ``FaultSettings.from_env``
            (FAULTS_ENABLED, FAULT_PERCENT, FAULT_TYPE, ...).
        microservice_client: Optional backend client (for testing)

    Returns:
        Flask application instance

    Raises:
        InvalidConfig: Fault settings are malformed
    """
    # Fail before building anything if the fault setup is invalid
    settings = FaultSettings.from_env(config_override)

    app = Flask(__name__)

    # ProxyFix: Trust X-Forwarded-* headers from reverse proxy
    # x_for=1: Trust 1 hop for X-Forwarded-For (client IP)
    # x_proto=1: Trust 1 hop for X-Forwarded-Proto (HTTPS detection)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    # Base config from environment
    app.config.from_mapping(
        ENVIRONMENT=os.getenv("ENVIRONMENT", "local"),
        APP_VERSION=os.getenv("APP_VERSION", "dev"),
        FAULT_SETTINGS=settings,
    )

    # Apply config overrides (for testing)
    if config_override:
        app.config.update(config_override)

    # Setup logging
    logging.basicConfig(level=logging.INFO)
    app.logger.setLevel(logging.INFO)

    # Initialize Swagger/OpenAPI documentation
    init_swagger(app)

    # Initialize Prometheus metrics
    metrics = PrometheusMetrics(app)
    decisions = DecisionRecorder()

    # Register service (wires all routes)
    FaultyService(
        app=app,
        settings=settings,
        metrics=metrics,
        microservice_client=microservice_client,
    )

    # Fault injection wraps everything above, including ProxyFix
    init_fault(app, settings, on_decision=decisions.record)

    app.logger.info("Faulty is starting...")
    return app


# For local dev: `python -m faulty.app`
if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("PORT", DEFAULT_PORT))
    app.run(host="0.0.0.0", port=port, debug=True)
