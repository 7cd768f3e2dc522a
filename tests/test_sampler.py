"""Tests for participation sampling."""

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from faulty.middleware import ParticipationSampler


class TestBoundaries:
    """participation 0 and 1 never depend on the random draw."""

    def test_zero_never_faults(self):
        sampler = ParticipationSampler()
        assert not any(sampler.should_fault(0.0) for _ in range(1000))

    def test_one_always_faults(self):
        sampler = ParticipationSampler()
        assert all(sampler.should_fault(1.0) for _ in range(1000))

    def test_boundaries_do_not_draw(self):
        rng = MagicMock(spec=random.Random)
        sampler = ParticipationSampler(rng_factory=lambda: rng)

        sampler.should_fault(0.0)
        sampler.should_fault(1.0)

        rng.random.assert_not_called()

    def test_draw_compared_strictly(self):
        rng = MagicMock(spec=random.Random)
        rng.random.return_value = 0.5
        sampler = ParticipationSampler(rng_factory=lambda: rng)

        assert not sampler.should_fault(0.5)
        assert sampler.should_fault(0.5000001)


class TestStatistics:
    """Observed fault rate tracks participation."""

    @pytest.mark.parametrize("participation", [0.05, 0.3, 0.5, 0.9])
    def test_rate_within_tolerance(self, participation):
        sampler = ParticipationSampler(rng_factory=lambda: random.Random(42))
        n = 100_000

        faults = sum(sampler.should_fault(participation) for _ in range(n))

        assert abs(faults / n - participation) < 0.02

    def test_unseeded_rate_within_tolerance(self):
        sampler = ParticipationSampler()
        n = 100_000

        faults = sum(sampler.should_fault(0.25) for _ in range(n))

        assert abs(faults / n - 0.25) < 0.02


class TestConcurrency:
    """Each thread gets its own generator."""

    def test_threads_use_separate_generators(self):
        created = []
        lock = threading.Lock()

        def factory():
            rng = random.Random()
            with lock:
                created.append(rng)
            return rng

        sampler = ParticipationSampler(rng_factory=factory)
        barrier = threading.Barrier(4)

        def draw():
            barrier.wait()
            return [sampler.should_fault(0.5) for _ in range(100)]

        threads = [threading.Thread(target=draw) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(created) == 4
        assert len({id(rng) for rng in created}) == 4

    def test_same_thread_reuses_generator(self):
        calls = []

        def factory():
            calls.append(1)
            return random.Random(7)

        sampler = ParticipationSampler(rng_factory=factory)
        for _ in range(50):
            sampler.should_fault(0.5)

        assert len(calls) == 1

    def test_concurrent_rate_within_tolerance(self):
        sampler = ParticipationSampler()
        per_worker = 25_000

        def run(_):
            return sum(sampler.should_fault(0.4) for _ in range(per_worker))

        with ThreadPoolExecutor(max_workers=4) as pool:
            total = sum(pool.map(run, range(4)))

        assert abs(total / (4 * per_worker) - 0.4) < 0.02
