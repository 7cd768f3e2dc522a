"""Fault injector strategies.

An injector is asked once per faulted request what to do with it. It either
terminates the response with an error status or waits and lets the request
continue to the wrapped app.
"""

import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from numbers import Real
from typing import Union

from faulty.constants import (
    DEFAULT_FAULT_STATUS_CODE,
    FAULT_KIND_ERROR,
    FAULT_KIND_SLOWNESS,
    FAULT_KINDS,
    MAX_STATUS_CODE,
    MIN_STATUS_CODE,
)
from faulty.errors import InvalidConfig
from faulty.middleware.cancellation import RequestScope


@dataclass(frozen=True)
class Terminate:
    """Stop the request and respond with ``status_code`` and an empty body."""

    status_code: int


@dataclass(frozen=True)
class Continue:
    """Hand the request to the wrapped app."""


CONTINUE = Continue()

InjectorOutcome = Union[Terminate, Continue]


class Injector(ABC):
    """Base class for fault strategies."""

    kind: str = ""

    @abstractmethod
    def inject(self, scope: RequestScope) -> InjectorOutcome:
        """Apply the fault to one request."""

    def describe(self) -> dict:
        return {"type": self.kind}


class ErrorInjector(Injector):
    """Fail the request with a fixed HTTP status."""

    kind = FAULT_KIND_ERROR

    def __init__(self, status_code: int = DEFAULT_FAULT_STATUS_CODE):
        if isinstance(status_code, bool) or not isinstance(status_code, int):
            raise InvalidConfig(f"status code must be an integer, got {status_code!r}")
        if not MIN_STATUS_CODE <= status_code <= MAX_STATUS_CODE:
            raise InvalidConfig(
                f"status code must be between {MIN_STATUS_CODE} and "
                f"{MAX_STATUS_CODE}, got {status_code}"
            )
        self.status_code = status_code

    def inject(self, scope: RequestScope) -> InjectorOutcome:
        return Terminate(self.status_code)

    def describe(self) -> dict:
        return {"type": self.kind, "status_code": self.status_code}

    def __repr__(self):
        return f"ErrorInjector(status_code={self.status_code})"


class SlowInjector(Injector):
    """Delay the request, then let it through.

    The wait is cut short when the request is cancelled or its deadline
    passes, in which case the scope raises and the wrapped app is never
    reached.
    """

    kind = FAULT_KIND_SLOWNESS

    def __init__(self, delay: Union[float, timedelta]):
        if isinstance(delay, timedelta):
            delay = delay.total_seconds()
        if isinstance(delay, bool) or not isinstance(delay, Real):
            raise InvalidConfig(f"delay must be a number of seconds, got {delay!r}")
        delay = float(delay)
        if not math.isfinite(delay) or delay < 0:
            raise InvalidConfig(f"delay must be a finite, non-negative number, got {delay}")
        if delay > threading.TIMEOUT_MAX:
            raise InvalidConfig(
                f"delay must be at most {threading.TIMEOUT_MAX} seconds, got {delay}"
            )
        self.delay = delay

    def inject(self, scope: RequestScope) -> InjectorOutcome:
        scope.wait(self.delay)
        return CONTINUE

    def describe(self) -> dict:
        return {"type": self.kind, "delay_seconds": self.delay}

    def __repr__(self):
        return f"SlowInjector(delay={self.delay})"


def new_injector(kind: str, **params) -> Injector:
    """Build an injector by name.

    Args:
        kind: ``"error"`` or ``"slowness"`` (trailing whitespace is ignored)
        **params: ``status_code`` for errors; ``delay`` (seconds) or
            ``latency_ms`` for slowness

    Raises:
        InvalidConfig: Unknown kind or invalid parameters
    """
    normalized = (kind or "").rstrip()

    if normalized == FAULT_KIND_ERROR:
        return ErrorInjector(params.get("status_code", DEFAULT_FAULT_STATUS_CODE))

    if normalized == FAULT_KIND_SLOWNESS:
        if "delay" in params:
            return SlowInjector(params["delay"])
        if "latency_ms" in params:
            latency_ms = params["latency_ms"]
            if isinstance(latency_ms, bool) or not isinstance(latency_ms, Real):
                raise InvalidConfig(f"latency_ms must be a number, got {latency_ms!r}")
            return SlowInjector(latency_ms / 1000.0)
        raise InvalidConfig("slowness injector requires 'delay' or 'latency_ms'")

    raise InvalidConfig(f"unknown fault type {kind!r}, expected one of {', '.join(FAULT_KINDS)}")
