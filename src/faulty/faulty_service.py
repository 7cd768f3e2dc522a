"""Faulty service providing the endpoints that fault injection wraps.

This module contains the FaultyService class which registers all API routes.
The routes are deliberately simple: the interesting behaviour lives in the
fault middleware in front of them.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from flasgger import swag_from
from flask import jsonify, request

from faulty.config import FaultSettings
from faulty.constants import SERVICE_NAME
from faulty.openapi_specs import (
    APP_INFO_SPEC,
    AUTHZ_SPEC,
    HEALTH_CHECK_SPEC,
    MICROSERVICE_SPEC,
    PING_SPEC,
)
from faulty.services.microservice import MicroserviceClient


class FaultyService:
    """
    Encapsulates the Faulty endpoints.
    """

    def __init__(
        self,
        app,
        settings: FaultSettings,
        metrics=None,
        microservice_client: Optional[MicroserviceClient] = None,
    ):
        """
        Initialize FaultyService with Flask app and optional dependencies.

        Args:
            app: Flask application instance
            settings: Parsed fault settings (reported by the info endpoint)
            metrics: PrometheusMetrics instance (optional)
            microservice_client: Backend client. If not provided, one is
                        created for ``settings.microservice_url``.
        """
        self.app = app
        self.settings = settings
        self.metrics = metrics
        self.logger = logging.getLogger(self.__class__.__name__)
        self.microservice_client = microservice_client or MicroserviceClient(
            url=settings.microservice_url, logger=self.logger
        )

        self._register_routes()

    def _register_routes(self):
        """Wire endpoints to Flask routes."""
        self.app.add_url_rule("/", "app_info", self.app_info, methods=["GET"])
        self.app.add_url_rule("/health", "health_check", self.health_check, methods=["GET"])
        self.app.add_url_rule("/ping", "ping", self.ping, methods=["GET"])
        self.app.add_url_rule("/authz", "authz", self.authz, methods=["GET"])
        self.app.add_url_rule("/microservice", "microservice", self.microservice, methods=["GET"])

    # ---- Endpoints ----

    @swag_from(APP_INFO_SPEC)
    def app_info(self):
        return jsonify({
            "message": "Faulty - Fault Injection Service",
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": os.getenv("APP_VERSION", "dev"),
            "environment": os.getenv("ENVIRONMENT", "local"),
            "faults": self.settings.as_dict(),
        })

    @swag_from(HEALTH_CHECK_SPEC)
    def health_check(self):
        return jsonify({
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 200

    @swag_from(PING_SPEC)
    def ping(self):
        """Liveness check; never faulted by default."""
        return "pong", 200, {"Content-Type": "text/plain; charset=utf-8"}

    @swag_from(AUTHZ_SPEC)
    def authz(self):
        self.logger.info("%s %s %s", request.remote_addr, request.method, request.url)
        return "Security!", 200, {"Content-Type": "text/plain; charset=utf-8"}

    @swag_from(MICROSERVICE_SPEC)
    def microservice(self):
        """Call the backend and report whether it answered."""
        result = self.microservice_client.call()
        if not result.ok:
            return jsonify({
                "error": "Bad Gateway",
                "message": f"External service unavailable: {result.error}",
            }), 502
        return "External service!", 200, {"Content-Type": "text/plain; charset=utf-8"}
