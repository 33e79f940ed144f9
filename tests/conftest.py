"""Shared fixtures: a controllable nanosecond clock."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterable

import pytest


class FakeClock:
    """Clock that only moves when a workload advances it."""

    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now

    def advance(self, ns: int) -> None:
        self.now += ns


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cycling_workload(fake_clock: FakeClock) -> Callable[..., Callable]:
    """Build workloads whose calls take the given durations, in a cycle."""

    def make(durations: Iterable[int], bytes_per_iter: int = 0) -> Callable:
        cycle = itertools.cycle(durations)

        def workload(bencher) -> None:
            fake_clock.advance(next(cycle))
            if bytes_per_iter:
                bencher.bytes = bytes_per_iter

        return workload

    return make
