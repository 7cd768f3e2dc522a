"""Per-request cancellation for injected delays.

WSGI has no native cancellation signal, so an outer layer (or the server)
can place a ``threading.Event`` and/or a monotonic deadline into the environ.
The fault middleware turns those into a ``RequestScope`` that slowness
injectors wait on.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from faulty.constants import CANCEL_EVENT_ENVIRON_KEY, DEADLINE_ENVIRON_KEY
from faulty.errors import DeadlineExceeded, RequestCancelled


@dataclass(frozen=True)
class RequestScope:
    """Cancellation view of a single request.

    Attributes:
        cancel_event: Set when the request is cancelled
        deadline: Absolute ``time.monotonic()`` deadline, or None for no deadline
    """

    cancel_event: threading.Event = field(default_factory=threading.Event)
    deadline: Optional[float] = None

    @classmethod
    def from_environ(cls, environ, request_timeout: Optional[float] = None) -> "RequestScope":
        """Build a scope from WSGI environ keys.

        An explicit deadline in the environ wins over ``request_timeout``.
        """
        cancel_event = environ.get(CANCEL_EVENT_ENVIRON_KEY)
        if cancel_event is None:
            cancel_event = threading.Event()

        deadline = environ.get(DEADLINE_ENVIRON_KEY)
        if deadline is None and request_timeout is not None:
            deadline = time.monotonic() + request_timeout

        return cls(cancel_event=cancel_event, deadline=deadline)

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None if there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def wait(self, delay: float) -> None:
        """Block for ``delay`` seconds unless the request ends first.

        Raises:
            RequestCancelled: The cancel event fired during the wait
            DeadlineExceeded: The deadline came before the delay ran out
        """
        if self.cancel_event.is_set():
            raise RequestCancelled("request cancelled before injected delay")

        remaining = self.remaining()
        if remaining is not None and remaining < delay:
            if self.cancel_event.wait(remaining):
                raise RequestCancelled("request cancelled during injected delay")
            raise DeadlineExceeded(
                f"request deadline reached {remaining:.3f}s into a {delay:.3f}s injected delay"
            )

        if delay > 0 and self.cancel_event.wait(delay):
            raise RequestCancelled("request cancelled during injected delay")
