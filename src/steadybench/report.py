"""Benchmark results with throughput accounting."""

from __future__ import annotations

from dataclasses import dataclass

from steadybench.bencher import (
    BenchConfig,
    Bencher,
    Clock,
    ProgressCallback,
    Workload,
)
from steadybench.stats import Summary


@dataclass(frozen=True)
class BenchSamples:
    """Final result of one benchmarked workload.

    Attributes:
        ns_iter_summary: Summary of nanoseconds per iteration.
        mb_s: Throughput in MB/s, or None if the workload reported no bytes.
        rounds: Measurement rounds the adaptive loop needed.
        converged: Whether the loop stopped on a stable estimate rather than
            on its time budget.
    """

    ns_iter_summary: Summary
    mb_s: float | None = None
    rounds: int = 0
    converged: bool = False

    @property
    def median_ns(self) -> float:
        return self.ns_iter_summary.median

    @property
    def spread_ns(self) -> float:
        return self.ns_iter_summary.max - self.ns_iter_summary.min


def compute_throughput(median_ns: float, bytes_per_iter: int) -> float | None:
    """Convert a per-iteration time and byte count to MB/s.

    Args:
        median_ns: Nanoseconds per iteration.
        bytes_per_iter: Bytes processed by one iteration.

    Returns:
        Throughput in MB/s (1 MB = 1e6 bytes), or None for a 0-byte workload.
    """
    if bytes_per_iter == 0:
        return None
    iter_s = 1e9 / max(median_ns, 1)
    return bytes_per_iter * iter_s / 1e6


def benchmark(
    func: Workload,
    config: BenchConfig | None = None,
    clock: Clock | None = None,
    progress_callback: ProgressCallback | None = None,
) -> BenchSamples:
    """Benchmark a workload with a fresh Bencher.

    Args:
        func: Workload to measure.
        config: Loop tunables.
        clock: Nanosecond clock override (tests).
        progress_callback: Called after every measurement round.

    Returns:
        BenchSamples with timing summary and throughput.
    """
    bencher = Bencher(config) if clock is None else Bencher(config, clock)
    summary = bencher.auto_bench(func, progress_callback)
    return BenchSamples(
        ns_iter_summary=summary,
        mb_s=compute_throughput(summary.median, bencher.bytes),
        rounds=bencher.rounds,
        converged=bencher.converged,
    )


def format_bench_samples(bs: BenchSamples) -> str:
    """Format a result for display.

    Returns:
        Formatted string like "     1234 ns/iter (+/- 56) = 789 MB/s".
    """
    line = f"{int(bs.median_ns):>9} ns/iter (+/- {int(bs.spread_ns)})"
    if bs.mb_s:
        line += f" = {int(bs.mb_s)} MB/s"
    return line
