"""Adaptive micro-benchmarking with robust statistics.

This package measures the steady-state cost of a unit of work with:
- Batch sizes that grow until two summaries agree
- Winsorized samples and median absolute deviation
- Optional throughput from a bytes-per-iteration hint
"""

from __future__ import annotations

from steadybench.bencher import (
    BatchTiming,
    BenchConfig,
    Bencher,
    RoundProgress,
    Workload,
)
from steadybench.report import (
    BenchSamples,
    benchmark,
    compute_throughput,
    format_bench_samples,
)
from steadybench.stats import Summary, percentile_of_sorted, summarize, winsorize

__all__ = [
    "BatchTiming",
    "BenchConfig",
    "BenchSamples",
    "Bencher",
    "RoundProgress",
    "Summary",
    "Workload",
    "benchmark",
    "compute_throughput",
    "format_bench_samples",
    "percentile_of_sorted",
    "summarize",
    "winsorize",
]
