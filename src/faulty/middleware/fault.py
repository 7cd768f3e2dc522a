"""Fault injection middleware for testing downstream resilience.

The middleware wraps any WSGI app. For each request it picks one of four
decisions (disabled, blocked, passthrough, faulted) and, when faulted, lets
the configured injector either fail the response or delay it.
"""

import enum
import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Callable, Iterable, Optional

from werkzeug.wrappers import Response

from faulty.config import FaultSettings
from faulty.errors import InvalidConfig, RequestCancelled
from faulty.middleware.cancellation import RequestScope
from faulty.middleware.injectors import CONTINUE, Injector, InjectorOutcome, Terminate
from faulty.middleware.path_filter import PathFilter
from faulty.middleware.sampler import ParticipationSampler


class FaultDecision(str, enum.Enum):
    """What the middleware did with a request."""

    DISABLED = "disabled"
    BLOCKED = "blocked"
    PASSTHROUGH = "passthrough"
    FAULTED = "faulted"


# Called as hook(decision, path, status_code); status_code is the injected
# status for terminated requests and None otherwise
DecisionHook = Callable[[FaultDecision, str, Optional[int]], None]


def _validate_participation(participation) -> float:
    if isinstance(participation, bool) or not isinstance(participation, Real):
        raise InvalidConfig(f"participation must be a number, got {participation!r}")
    participation = float(participation)
    if math.isnan(participation) or not 0.0 <= participation <= 1.0:
        raise InvalidConfig(f"participation must be between 0.0 and 1.0, got {participation}")
    return participation


@dataclass(frozen=True)
class FaultConfig:
    """Immutable fault settings, validated on construction.

    Attributes:
        enabled: Master switch
        participation: Probability that an eligible request is faulted
        blocked_paths: Exact paths that are never faulted
        injector: Strategy applied to faulted requests
        blocked_prefixes: Path prefixes that are never faulted
    """

    enabled: bool
    participation: float
    blocked_paths: frozenset
    injector: Injector
    blocked_prefixes: tuple = ()

    def __post_init__(self):
        if not isinstance(self.injector, Injector):
            raise InvalidConfig(f"injector must be an Injector, got {self.injector!r}")
        for name in ("blocked_paths", "blocked_prefixes"):
            if isinstance(getattr(self, name), (str, bytes)):
                raise InvalidConfig(f"{name} must be a collection of paths, not a single string")
        object.__setattr__(self, "participation", _validate_participation(self.participation))
        object.__setattr__(self, "enabled", bool(self.enabled))
        object.__setattr__(self, "blocked_paths", frozenset(self.blocked_paths))
        object.__setattr__(self, "blocked_prefixes", tuple(self.blocked_prefixes))

    def describe(self) -> dict:
        return {
            "enabled": self.enabled,
            "participation": self.participation,
            "blocked_paths": sorted(self.blocked_paths),
            "injector": self.injector.describe(),
        }


class FaultMiddleware:
    """Wraps WSGI apps with request-level fault injection.

    Once constructed it never fails a request because of its own logic: any
    unexpected error while deciding is logged and the request passes
    through. Cancellation of an injected delay is the exception and
    propagates to the caller without reaching the wrapped app.
    """

    def __init__(
        self,
        config: FaultConfig,
        sampler: Optional[ParticipationSampler] = None,
        request_timeout: Optional[float] = None,
        on_decision: Optional[DecisionHook] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if request_timeout is not None and (
            isinstance(request_timeout, bool)
            or not isinstance(request_timeout, Real)
            or not request_timeout > 0
        ):
            raise InvalidConfig(f"request timeout must be a positive number, got {request_timeout!r}")

        self.config = config
        self.sampler = sampler or ParticipationSampler()
        self.path_filter = PathFilter(config.blocked_paths, config.blocked_prefixes)
        self.request_timeout = request_timeout
        self.on_decision = on_decision
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def wrap(self, app):
        """Return a WSGI app that applies faults before calling ``app``."""

        def fault_app(environ, start_response):
            return self._handle(app, environ, start_response)

        return fault_app

    def _handle(self, app, environ, start_response):
        try:
            outcome = self._evaluate(environ)
        except RequestCancelled:
            raise
        except Exception:
            self._logger.exception(
                "Fault middleware error, passing request through: path=%s",
                environ.get("PATH_INFO", ""),
            )
            outcome = CONTINUE

        if isinstance(outcome, Terminate):
            return Response(b"", status=outcome.status_code)(environ, start_response)
        return app(environ, start_response)

    def _evaluate(self, environ) -> InjectorOutcome:
        config = self.config
        path = environ.get("PATH_INFO", "")

        if not config.enabled:
            self._record(FaultDecision.DISABLED, path)
            return CONTINUE

        if self.path_filter.is_blocked(path):
            self._record(FaultDecision.BLOCKED, path)
            return CONTINUE

        if not self.sampler.should_fault(config.participation):
            self._record(FaultDecision.PASSTHROUGH, path)
            return CONTINUE

        self._logger.warning(
            "Fault injection triggered: path=%s injector=%r participation=%s",
            path,
            config.injector,
            config.participation,
        )
        scope = RequestScope.from_environ(environ, self.request_timeout)
        try:
            outcome = config.injector.inject(scope)
        except RequestCancelled as cancelled:
            self._logger.info("Injected fault interrupted: path=%s reason=%s", path, cancelled)
            try:
                self._record(FaultDecision.FAULTED, path)
            except Exception:
                self._logger.exception("Fault decision hook failed: path=%s", path)
            raise cancelled

        status_code = outcome.status_code if isinstance(outcome, Terminate) else None
        self._record(FaultDecision.FAULTED, path, status_code)
        return outcome

    def _record(self, decision: FaultDecision, path: str, status_code: Optional[int] = None):
        if decision is not FaultDecision.FAULTED:
            self._logger.debug("Fault injection skipped: path=%s decision=%s", path, decision.value)

        if self.on_decision is not None:
            self.on_decision(decision, path, status_code)


def new_fault(
    injector: Injector,
    enabled: bool,
    participation: float,
    blocked_paths: Iterable[str] = (),
    *,
    blocked_prefixes: Iterable[str] = (),
    sampler: Optional[ParticipationSampler] = None,
    request_timeout: Optional[float] = None,
    on_decision: Optional[DecisionHook] = None,
) -> FaultMiddleware:
    """Validate settings and build a ``FaultMiddleware``.

    Raises:
        InvalidConfig: Participation outside [0, 1], a non-injector, a bare
            string where a path collection is expected, or a bad request timeout
    """
    config = FaultConfig(
        enabled=enabled,
        participation=participation,
        blocked_paths=blocked_paths or (),
        injector=injector,
        blocked_prefixes=blocked_prefixes or (),
    )
    return FaultMiddleware(
        config,
        sampler=sampler,
        request_timeout=request_timeout,
        on_decision=on_decision,
    )


def init_fault(
    app,
    settings: FaultSettings,
    on_decision: Optional[DecisionHook] = None,
) -> FaultMiddleware:
    """Install fault injection on a Flask app.

    The middleware wraps ``app.wsgi_app`` so it sits in front of Flask's
    routing, and is kept on ``app.extensions["faulty"]``.

    Args:
        app: Flask application instance
        settings: Parsed settings, see ``FaultSettings.from_env``
        on_decision: Optional callback invoked once per request

    Raises:
        InvalidConfig: Settings are malformed; the app must not start
    """
    middleware = new_fault(
        settings.build_injector(),
        enabled=settings.enabled,
        participation=settings.participation,
        blocked_paths=settings.blocked_paths,
        blocked_prefixes=settings.blocked_prefixes,
        request_timeout=settings.request_timeout,
        on_decision=on_decision,
    )

    app.wsgi_app = middleware.wrap(app.wsgi_app)
    app.extensions["faulty"] = middleware

    if middleware.config.enabled:
        app.logger.warning(
            "Fault injection enabled: type=%s participation=%s blocked=%s",
            settings.kind,
            settings.participation,
            sorted(middleware.config.blocked_paths),
        )
    else:
        app.logger.info("Fault injection disabled (FAULTS_ENABLED=false)")

    return middleware
