"""Adaptive batch timing.

The Bencher runs a workload in batches, growing the batch size until two
summaries taken at different batch lengths agree, or until the time budget
runs out. Every per-iteration sample is winsorized before summarizing.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from steadybench.stats import Summary, summarize, winsorize

logger = logging.getLogger(__name__)

# Batch size used when the first call is too fast for the clock to see.
ZERO_TIME_BATCH = 1_000_000

# Type for the unit of work being measured
Workload = Callable[["Bencher"], object]

Clock = Callable[[], int]


@dataclass(frozen=True)
class BenchConfig:
    """Tunables of the adaptive timing loop.

    Attributes:
        samples: Per-iteration samples collected per summary.
        winsorize_pct: Tail percentile clamped before summarizing.
        target_batch_ns: Duration the initial batch size aims for.
        long_batch_factor: Multiplier of the second, longer batch size.
        min_round_ns: A round must last longer than this to be accepted.
        max_total_ns: Budget after which the last result is accepted anyway.
        max_mad_pct: Largest MAD percentage considered stable.
        absolute_deviations: Use the textbook MAD (median of absolute
            deviations) instead of signed deviations.
    """

    samples: int = 50
    winsorize_pct: float = 5.0
    target_batch_ns: int = 1_000_000
    long_batch_factor: int = 5
    min_round_ns: int = 100_000_000
    max_total_ns: int = 3_000_000_000
    max_mad_pct: float = 1.0
    absolute_deviations: bool = False

    def __post_init__(self) -> None:
        if self.samples < 1:
            raise ValueError(f"samples must be >= 1, got {self.samples}")
        if not 0.0 <= self.winsorize_pct <= 50.0:
            raise ValueError(
                f"winsorize_pct must be within [0, 50], got {self.winsorize_pct}"
            )
        if self.target_batch_ns < 1:
            raise ValueError(
                f"target_batch_ns must be >= 1, got {self.target_batch_ns}"
            )
        if self.long_batch_factor < 1:
            raise ValueError(
                f"long_batch_factor must be >= 1, got {self.long_batch_factor}"
            )
        if self.min_round_ns < 0 or self.max_total_ns < 0:
            raise ValueError("time budgets must not be negative")


@dataclass(frozen=True)
class BatchTiming:
    """Counters of one completed batch.

    Attributes:
        iterations: Number of workload calls in the batch.
        duration_ns: Wall-clock time of the whole batch.
        bytes: Bytes-per-iteration hint left by the workload (0 if unset).
    """

    iterations: int
    duration_ns: int
    bytes: int

    @property
    def ns_per_iter(self) -> float:
        if self.iterations == 0:
            return 0.0
        return self.duration_ns / self.iterations


@dataclass(frozen=True)
class RoundProgress:
    """Progress information for one measurement round.

    Attributes:
        round: 1-based round number.
        batch_size: Short batch size n (the long one is n * factor).
        round_ns: Wall-clock duration of this round.
        total_ns: Accumulated duration of unaccepted rounds, this one included.
        summary: Summary at batch size n.
        summary_long: Summary at the long batch size.
    """

    round: int
    batch_size: int
    round_ns: int
    total_ns: int
    summary: Summary
    summary_long: Summary


# Type for progress callbacks
ProgressCallback = Callable[[RoundProgress], None]


def estimate_batch_size(ns_per_iter: float, target_batch_ns: int) -> int:
    """Estimate how many iterations fill `target_batch_ns`.

    Args:
        ns_per_iter: Measured time of a single iteration.
        target_batch_ns: Desired batch duration.

    Returns:
        Batch size, at least 1. ZERO_TIME_BATCH if nothing was measured.
    """
    if ns_per_iter == 0:
        return ZERO_TIME_BATCH
    n = int(target_batch_ns / max(ns_per_iter, 1))
    return max(n, 1)


class Bencher:
    """Per-run timing counters and the adaptive loop driving them.

    The Bencher is also the handle passed to the workload: a workload may
    set `bencher.bytes` to the number of bytes one iteration processes.
    Counters are reset at the start of every batch.

    Args:
        config: Loop tunables (defaults match BenchConfig()).
        clock: Monotonic nanosecond clock.
    """

    def __init__(
        self,
        config: BenchConfig | None = None,
        clock: Clock = time.perf_counter_ns,
    ) -> None:
        self.config = config or BenchConfig()
        self._clock = clock
        self.iterations = 0
        self.duration_ns = 0
        self.bytes = 0
        self.rounds = 0
        self.converged = False

    def ns_per_iter(self) -> float:
        """Per-iteration time of the last batch (0 if it was empty)."""
        if self.iterations == 0:
            return 0.0
        return self.duration_ns / self.iterations

    def bench_n(self, iterations: int, func: Workload) -> BatchTiming:
        """Run `func` `iterations` times and time the whole batch.

        Args:
            iterations: Batch size (>= 1).
            func: Workload, called with this Bencher.

        Returns:
            Snapshot of the batch counters.
        """
        if iterations < 1:
            raise ValueError(f"batch size must be >= 1, got {iterations}")

        self.iterations = iterations
        self.duration_ns = 0
        self.bytes = 0
        start = self._clock()
        for _ in range(iterations):
            func(self)
        self.duration_ns = self._clock() - start
        return BatchTiming(
            iterations=self.iterations,
            duration_ns=self.duration_ns,
            bytes=self.bytes,
        )

    def _summarize_batches(self, n: int, func: Workload) -> Summary:
        samples = [
            self.bench_n(n, func).ns_per_iter for _ in range(self.config.samples)
        ]
        winsorize(samples, self.config.winsorize_pct)
        return summarize(samples, self.config.absolute_deviations)

    def _is_stable(self, round_ns: int, summ: Summary, summ_long: Summary) -> bool:
        return (
            round_ns > self.config.min_round_ns
            and summ.median_abs_dev_pct < self.config.max_mad_pct
            and abs(summ.median - summ_long.median) < summ_long.median_abs_dev
        )

    def auto_bench(
        self,
        func: Workload,
        progress_callback: ProgressCallback | None = None,
    ) -> Summary:
        """Measure `func` until the estimate is stable or the budget is spent.

        Each round summarizes batches of n and n * long_batch_factor
        iterations. The round is accepted when it lasted long enough, the
        short summary is tight, and both medians agree within the long
        summary's MAD. Otherwise n doubles. Non-convergence is not an error:
        once the budget is exceeded the last long summary is returned and
        `converged` stays False.

        Args:
            func: Workload to measure.
            progress_callback: Called after every round.

        Returns:
            Summary of nanoseconds per iteration at the long batch size.
        """
        config = self.config
        self.rounds = 0
        self.converged = False

        # Ballpark figure from a single call
        first = self.bench_n(1, func)
        n = estimate_batch_size(first.ns_per_iter, config.target_batch_ns)
        logger.debug(
            "Initial estimate %.1f ns/iter, batch size %d", first.ns_per_iter, n
        )

        total_ns = 0
        while True:
            round_start = self._clock()
            summ = self._summarize_batches(n, func)
            summ_long = self._summarize_batches(n * config.long_batch_factor, func)
            round_ns = self._clock() - round_start

            self.rounds += 1
            stable = self._is_stable(round_ns, summ, summ_long)
            if not stable:
                total_ns += round_ns

            logger.debug(
                "Round %d: n=%d took %.1f ms, median %.1f ns (MAD %.2f%%), "
                "long median %.1f ns (MAD %.1f ns)",
                self.rounds,
                n,
                round_ns / 1e6,
                summ.median,
                summ.median_abs_dev_pct,
                summ_long.median,
                summ_long.median_abs_dev,
            )
            if progress_callback:
                progress_callback(
                    RoundProgress(
                        round=self.rounds,
                        batch_size=n,
                        round_ns=round_ns,
                        total_ns=total_ns,
                        summary=summ,
                        summary_long=summ_long,
                    )
                )

            if stable:
                self.converged = True
                return summ_long

            if total_ns > config.max_total_ns:
                logger.warning(
                    "No stable estimate after %d rounds (%.2f s), "
                    "keeping the last one",
                    self.rounds,
                    total_ns / 1e9,
                )
                return summ_long

            n *= 2
