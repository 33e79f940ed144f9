"""Integration tests for the adaptive loop on the real clock.

Budgets are reduced so the suite stays fast; the deadline logic itself is
covered deterministically by the unit tests.
"""

from __future__ import annotations

import re
import time
from pathlib import Path

from steadybench.bencher import BenchConfig, Bencher
from steadybench.report import benchmark, format_bench_samples
from steadybench.runner import BenchmarkRunner, load_suite_config
from steadybench.workloads import checksum_bench, factorial, simple_bench

SHORT = BenchConfig(max_total_ns=300_000_000)

SUITE_PATH = Path(__file__).parent.parent.parent / "benchmarks" / "suite.yaml"


class TestAdaptiveTiming:
    """Tests for auto_bench against real workloads."""

    def test_terminates_within_budget(self) -> None:
        """Test that a run ends shortly after its budget is spent."""
        start = time.perf_counter()
        bs = benchmark(simple_bench, SHORT)
        elapsed = time.perf_counter() - start

        assert elapsed < 3.5
        assert bs.rounds >= 1
        assert bs.median_ns > 0

    def test_summary_invariants(self) -> None:
        """Test ordering of the summary fields."""
        summary = Bencher(SHORT).auto_bench(simple_bench)

        assert summary.min <= summary.median <= summary.max
        assert summary.max - summary.min >= 0

    def test_repeatable_median(self) -> None:
        """Test that two runs of a pure workload give similar medians."""
        first = benchmark(simple_bench, SHORT).median_ns
        second = benchmark(simple_bench, SHORT).median_ns

        assert 0.5 < first / second < 2.0

    def test_absolute_deviation_mode(self) -> None:
        """Test a run using the textbook MAD."""
        config = BenchConfig(max_total_ns=300_000_000, absolute_deviations=True)
        bs = benchmark(simple_bench, config)

        assert bs.ns_iter_summary.median_abs_dev >= 0


class TestThroughput:
    """Tests for throughput reporting with real workloads."""

    def test_checksum_reports_throughput(self) -> None:
        """Test that a byte-processing workload gets MB/s."""
        bs = benchmark(checksum_bench, SHORT)

        assert bs.mb_s is not None
        assert bs.mb_s > 0
        line = format_bench_samples(bs)
        assert re.fullmatch(r" *\d+ ns/iter \(\+/- \d+\) = \d+ MB/s", line)

    def test_factorial_has_no_throughput(self) -> None:
        """Test that a 0-byte workload reports no MB/s."""
        bs = benchmark(simple_bench, SHORT)

        assert bs.mb_s is None
        assert "MB/s" not in format_bench_samples(bs)


class TestExampleSuite:
    """Tests for the bundled example suite."""

    def test_load_and_run(self) -> None:
        """Test loading benchmarks/suite.yaml and running it quickly."""
        suite = load_suite_config(SUITE_PATH)
        suite.config = SHORT

        results = BenchmarkRunner(suite).run_all()

        assert [r.workload for r in results] == ["factorial", "checksum"]
        assert all(r.error is None for r in results)


def test_factorial() -> None:
    """Test the demonstration computation itself."""
    assert factorial(0) == 1
    assert factorial(5) == 120
    assert factorial(20) == 2432902008176640000
