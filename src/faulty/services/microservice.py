"""Client for the backend microservice that Faulty proxies to.

Provides a thin wrapper around ``requests`` with error handling and logging,
so the route handler only deals with a result object.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from faulty.constants import DEFAULT_MICROSERVICE_URL, MICROSERVICE_REQUEST_TIMEOUT


@dataclass
class MicroserviceResult:
    """Outcome of a backend call.

    ``status`` is the backend's status line (e.g. ``"200 OK"``) or None when
    the call failed before a response arrived.
    """

    ok: bool
    status_code: Optional[int] = None
    status: Optional[str] = None
    error: Optional[str] = None


class MicroserviceClient:
    """Client for the external backend service.

    Attributes:
        url: Backend endpoint
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: int = MICROSERVICE_REQUEST_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.url = url or DEFAULT_MICROSERVICE_URL
        self.timeout = timeout
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def call(self) -> MicroserviceResult:
        """GET the backend endpoint.

        Returns:
            MicroserviceResult; never raises for network errors.
        """
        try:
            response = requests.get(self.url, timeout=self.timeout)
            status = f"{response.status_code} {response.reason or ''}".strip()
            self._logger.info(
                "External service address: %s with response: %s", self.url, status
            )
            return MicroserviceResult(
                ok=True, status_code=response.status_code, status=status
            )
        except requests.exceptions.Timeout:
            self._logger.warning("External service timed out: %s", self.url)
            return MicroserviceResult(ok=False, error="timeout")
        except requests.exceptions.ConnectionError:
            self._logger.warning("Could not connect to external service at %s", self.url)
            return MicroserviceResult(ok=False, error="connection error")
        except requests.exceptions.RequestException as e:
            self._logger.warning("External service request failed: %s", e)
            return MicroserviceResult(ok=False, error=str(e))
