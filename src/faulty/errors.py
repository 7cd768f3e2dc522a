"""Exception types for Faulty.

Configuration problems are raised once, at startup. The cancellation errors
are the only ones that can surface while a request is being served.
"""


class FaultyError(Exception):
    """Base class for all Faulty errors."""


class InvalidConfig(FaultyError, ValueError):
    """Fault configuration is malformed (bad probability, status or delay)."""


class RequestCancelled(FaultyError):
    """An injected delay was interrupted because the request was cancelled."""


class DeadlineExceeded(RequestCancelled):
    """An injected delay was interrupted because the request deadline passed."""
