"""Middleware package for Faulty."""

from .fault import FaultConfig, FaultDecision, FaultMiddleware, init_fault, new_fault
from .injectors import (
    CONTINUE,
    Continue,
    ErrorInjector,
    Injector,
    SlowInjector,
    Terminate,
    new_injector,
)
from .path_filter import PathFilter
from .sampler import ParticipationSampler

__all__ = [
    "CONTINUE",
    "Continue",
    "ErrorInjector",
    "FaultConfig",
    "FaultDecision",
    "FaultMiddleware",
    "Injector",
    "ParticipationSampler",
    "PathFilter",
    "SlowInjector",
    "Terminate",
    "init_fault",
    "new_fault",
    "new_injector",
]
