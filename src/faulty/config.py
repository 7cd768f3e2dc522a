"""Runtime configuration for Faulty.

Values come from environment variables, with an optional override dict for
tests. Parsing happens once at startup; anything malformed raises
``InvalidConfig`` so the process never serves with a broken fault setup.
"""

import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from faulty.constants import (
    DEFAULT_BLOCKED_PATHS,
    DEFAULT_BLOCKED_PREFIXES,
    DEFAULT_FAULT_KIND,
    DEFAULT_FAULT_LATENCY_MS,
    DEFAULT_FAULT_STATUS_CODE,
    DEFAULT_MICROSERVICE_URL,
    FAULT_KIND_ERROR,
    FAULT_KIND_SLOWNESS,
    FAULT_KINDS,
)
from faulty.errors import InvalidConfig

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_FALSE_VALUES = frozenset(["0", "false", "no", "off", ""])


def _lookup(name: str, config_override: Optional[Dict[str, Any]], default=None):
    """Read a setting from the override dict first, then the environment."""
    if config_override is not None and name in config_override:
        return config_override[name]
    return os.getenv(name, default)


def _parse_bool(name: str, value) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidConfig(f"{name} must be a boolean, got {value!r}")


def _parse_float(name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidConfig(f"{name} must be a number, got {value!r}") from None


def _parse_int(name: str, value) -> int:
    if isinstance(value, bool):
        raise InvalidConfig(f"{name} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidConfig(f"{name} must be an integer, got {value!r}") from None


def _parse_paths(value) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return tuple(item.strip() for item in items if item and item.strip())


@dataclass(frozen=True)
class FaultSettings:
    """Parsed fault and service settings.

    Attributes:
        enabled: FAULTS_ENABLED
        participation: FAULT_PERCENT, a fraction in [0, 1]
        kind: FAULT_TYPE, ``error`` or ``slowness``
        status_code: FAULT_STATUS_CODE, used by the error kind
        latency_ms: FAULT_LATENCY_MS, used by the slowness kind
        blocked_paths: FAULT_BLOCKED_PATHS plus the defaults
        blocked_prefixes: Prefixes kept free of faults (API docs)
        request_timeout: FAULT_REQUEST_TIMEOUT in seconds, optional
        microservice_url: MICROSERVICE_URL for the /microservice route
    """

    enabled: bool = False
    participation: float = 0.0
    kind: str = DEFAULT_FAULT_KIND
    status_code: int = DEFAULT_FAULT_STATUS_CODE
    latency_ms: float = DEFAULT_FAULT_LATENCY_MS
    blocked_paths: Tuple[str, ...] = DEFAULT_BLOCKED_PATHS
    blocked_prefixes: Tuple[str, ...] = DEFAULT_BLOCKED_PREFIXES
    request_timeout: Optional[float] = None
    microservice_url: str = field(default=DEFAULT_MICROSERVICE_URL)

    @classmethod
    def from_env(cls, config_override: Optional[Dict[str, Any]] = None) -> "FaultSettings":
        """Load settings from the environment or an override dict.

        Raises:
            InvalidConfig: A value cannot be parsed or the fault type is unknown
        """
        enabled = _parse_bool("FAULTS_ENABLED", _lookup("FAULTS_ENABLED", config_override, "false"))
        participation = _parse_float("FAULT_PERCENT", _lookup("FAULT_PERCENT", config_override, "0.0"))

        kind = str(_lookup("FAULT_TYPE", config_override, DEFAULT_FAULT_KIND)).strip()
        if kind not in FAULT_KINDS:
            raise InvalidConfig(f"FAULT_TYPE must be one of {', '.join(FAULT_KINDS)}, got {kind!r}")

        status_code = _parse_int(
            "FAULT_STATUS_CODE",
            _lookup("FAULT_STATUS_CODE", config_override, DEFAULT_FAULT_STATUS_CODE),
        )
        latency_ms = _parse_float(
            "FAULT_LATENCY_MS",
            _lookup("FAULT_LATENCY_MS", config_override, DEFAULT_FAULT_LATENCY_MS),
        )

        # Defaults are always blocked; configured paths add to them
        extra_paths = _parse_paths(_lookup("FAULT_BLOCKED_PATHS", config_override))
        blocked_paths = tuple(dict.fromkeys(DEFAULT_BLOCKED_PATHS + extra_paths))

        raw_timeout = _lookup("FAULT_REQUEST_TIMEOUT", config_override)
        request_timeout = None
        if raw_timeout not in (None, ""):
            request_timeout = _parse_float("FAULT_REQUEST_TIMEOUT", raw_timeout)

        microservice_url = _lookup("MICROSERVICE_URL", config_override) or DEFAULT_MICROSERVICE_URL

        settings = cls(
            enabled=enabled,
            participation=participation,
            kind=kind,
            status_code=status_code,
            latency_ms=latency_ms,
            blocked_paths=blocked_paths,
            request_timeout=request_timeout,
            microservice_url=microservice_url,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Check ranges the parsers cannot, so startup fails early.

        Raises:
            InvalidConfig: Participation outside [0, 1], bad timeout, or an
                injector that cannot be built
        """
        if math.isnan(self.participation) or not 0.0 <= self.participation <= 1.0:
            raise InvalidConfig(
                f"FAULT_PERCENT must be between 0.0 and 1.0, got {self.participation}"
            )
        if self.request_timeout is not None and not self.request_timeout > 0:
            raise InvalidConfig(
                f"FAULT_REQUEST_TIMEOUT must be positive, got {self.request_timeout}"
            )
        self.build_injector()

    def build_injector(self):
        """Create the injector selected by ``kind``."""
        from faulty.middleware.injectors import new_injector

        if self.kind == FAULT_KIND_SLOWNESS:
            return new_injector(FAULT_KIND_SLOWNESS, latency_ms=self.latency_ms)
        return new_injector(FAULT_KIND_ERROR, status_code=self.status_code)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "participation": self.participation,
            "type": self.kind,
            "status_code": self.status_code,
            "latency_ms": self.latency_ms,
            "blocked_paths": list(self.blocked_paths),
        }
