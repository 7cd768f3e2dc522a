"""Per-request participation sampling."""

import random
import threading
from typing import Callable, Optional


class ParticipationSampler:
    """Decides whether a request takes part in fault injection.

    Each thread draws from its own ``random.Random``, so concurrent requests
    never contend on a lock or share generator state.

    Args:
        rng_factory: Builds the generator for each thread. Defaults to
            ``random.Random``, which seeds itself from the OS. Pass a seeded
            factory for deterministic tests.
    """

    def __init__(self, rng_factory: Optional[Callable[[], random.Random]] = None):
        self._rng_factory = rng_factory or random.Random
        self._local = threading.local()

    def _rng(self) -> random.Random:
        rng = getattr(self._local, "rng", None)
        if rng is None:
            rng = self._rng_factory()
            self._local.rng = rng
        return rng

    def should_fault(self, participation: float) -> bool:
        # Boundaries never touch the generator
        if participation <= 0.0:
            return False
        if participation >= 1.0:
            return True
        return self._rng().random() < participation
