"""Benchmark suite orchestration.

Provides the suite runner that coordinates:
- Loading suite configurations from YAML
- Resolving workloads from `module:function` targets
- Running each workload through the adaptive Bencher
- Formatting results as a table
"""

from __future__ import annotations

import dataclasses
import importlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from steadybench.bencher import BenchConfig, RoundProgress, Workload
from steadybench.report import BenchSamples, benchmark
from steadybench.workloads import BUILTIN_WORKLOADS

logger = logging.getLogger(__name__)


@dataclass
class WorkloadConfig:
    """Configuration for a single workload.

    Attributes:
        name: Workload identifier.
        target: Where the callable lives ("package.module:function", or the
            name of a builtin workload).
        func: Resolved callable, None for disabled workloads.
        enabled: Whether the workload is run.
    """

    name: str
    target: str
    func: Workload | None = None
    enabled: bool = True


@dataclass
class BenchmarkSuite:
    """Collection of workloads sharing one loop configuration.

    Attributes:
        name: Suite name.
        workloads: Workload configurations, in run order.
        config: Adaptive loop tunables.
    """

    name: str
    workloads: list[WorkloadConfig]
    config: BenchConfig = field(default_factory=BenchConfig)


@dataclass
class BenchmarkRunResult:
    """Result of running a single workload.

    Attributes:
        workload: Workload name.
        samples: Timing and throughput, None if the workload failed.
        elapsed: Wall-clock seconds spent benchmarking it.
        error: Error message if failed.
    """

    workload: str
    samples: BenchSamples | None
    elapsed: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class WorkloadProgress:
    """Progress callback information.

    Attributes:
        workload: Current workload name.
        progress: Round that just completed.
    """

    workload: str
    progress: RoundProgress


# Type for progress callbacks
SuiteProgressCallback = Callable[[WorkloadProgress], None]


def resolve_workload(target: str) -> Workload:
    """Import the callable named by `target`.

    Args:
        target: "package.module:function" or a builtin workload name.

    Returns:
        The workload callable.

    Raises:
        ValueError: If the target cannot be imported or is not callable.
    """
    if ":" not in target:
        if target in BUILTIN_WORKLOADS:
            return BUILTIN_WORKLOADS[target]
        raise ValueError(
            f"Unknown workload {target!r}; use 'module:function' "
            f"or one of: {', '.join(sorted(BUILTIN_WORKLOADS))}"
        )

    module_name, _, attr = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import {module_name!r}: {e}") from e

    func = getattr(module, attr, None)
    if not callable(func):
        raise ValueError(f"{target!r} is not a callable")
    return func


def parse_bench_config(
    data: dict | None, base: BenchConfig | None = None
) -> BenchConfig:
    """Build a BenchConfig from a mapping of field overrides.

    Args:
        data: Field name to value mapping (None means no overrides).
        base: Config to override (defaults to BenchConfig()).

    Returns:
        The resulting configuration.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    base = base or BenchConfig()
    if not data:
        return base
    if not isinstance(data, dict):
        raise ValueError("'config' must be a mapping")

    known = {f.name for f in dataclasses.fields(BenchConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    try:
        return dataclasses.replace(base, **data)
    except TypeError as e:
        raise ValueError(f"Invalid config value: {e}") from e


def load_suite_config(config_path: Path) -> BenchmarkSuite:
    """Load a benchmark suite from YAML.

    Args:
        config_path: Path to the suite file.

    Returns:
        BenchmarkSuite with enabled workloads resolved.
    """
    config_path = Path(config_path)
    with config_path.open() as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a mapping at top level")

    entries = data.get("workloads") or []
    if not isinstance(entries, list):
        raise ValueError(f"{config_path}: 'workloads' must be a list")

    workloads = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(
                f"{config_path}: workload entry {entry!r} is not a mapping"
            )
        name = entry.get("name")
        target = entry.get("target")
        if not name or not target:
            continue

        enabled = entry.get("enabled", True)
        workloads.append(
            WorkloadConfig(
                name=name,
                target=target,
                func=resolve_workload(target) if enabled else None,
                enabled=enabled,
            )
        )

    return BenchmarkSuite(
        name=data.get("name", config_path.stem),
        workloads=workloads,
        config=parse_bench_config(data.get("config")),
    )


def builtin_suite(config: BenchConfig | None = None) -> BenchmarkSuite:
    """Suite made of every builtin workload."""
    return BenchmarkSuite(
        name="builtin",
        workloads=[
            WorkloadConfig(name=name, target=name, func=func)
            for name, func in BUILTIN_WORKLOADS.items()
        ],
        config=config or BenchConfig(),
    )


@dataclass
class BenchmarkRunner:
    """Runs every workload of a suite, one after the other.

    Each workload gets its own Bencher, so counters never leak between
    workloads.

    Attributes:
        suite: Suite to run.
        progress_callback: Optional callback for per-round progress.
    """

    suite: BenchmarkSuite
    progress_callback: SuiteProgressCallback | None = None

    def run_workload(self, workload: WorkloadConfig) -> BenchmarkRunResult:
        """Benchmark a single workload.

        Exceptions raised by the workload are recorded in the result.
        """
        callback = None
        if self.progress_callback:
            user_callback = self.progress_callback

            def callback(progress: RoundProgress) -> None:
                user_callback(WorkloadProgress(workload.name, progress))

        func = workload.func or resolve_workload(workload.target)
        start = time.perf_counter()
        try:
            samples = benchmark(func, self.suite.config, progress_callback=callback)
        except Exception as e:
            logger.error("Workload %s failed: %s", workload.name, e)
            return BenchmarkRunResult(
                workload=workload.name,
                samples=None,
                elapsed=time.perf_counter() - start,
                error=str(e),
            )

        elapsed = time.perf_counter() - start
        logger.debug(
            "Workload %s: %d rounds in %.2f s", workload.name, samples.rounds, elapsed
        )
        return BenchmarkRunResult(
            workload=workload.name, samples=samples, elapsed=elapsed
        )

    def run_all(self, workload_filter: str | None = None) -> list[BenchmarkRunResult]:
        """Run all enabled workloads in the suite.

        Args:
            workload_filter: If provided, only run this workload.

        Returns:
            One result per workload run.
        """
        results: list[BenchmarkRunResult] = []
        for workload in self.suite.workloads:
            if not workload.enabled:
                continue
            if workload_filter and workload.name != workload_filter:
                continue
            results.append(self.run_workload(workload))
        return results


def format_results_table(results: list[BenchmarkRunResult]) -> str:
    """Format workload results as a table.

    Args:
        results: Results to format.

    Returns:
        Formatted table string.
    """
    lines = []

    lines.append("=" * 90)
    lines.append("BENCHMARK RESULTS")
    lines.append("=" * 90)
    lines.append(
        f"{'Workload':<20} {'ns/iter':>14} {'+/-':>12} {'MAD %':>8} "
        f"{'MB/s':>10} {'Rounds':>7} {'Stable':>7}"
    )
    lines.append("-" * 90)

    for result in results:
        if result.samples is None:
            lines.append(f"{result.workload:<20} FAILED: {result.error}")
            continue

        bs = result.samples
        summ = bs.ns_iter_summary
        mb_s = f"{bs.mb_s:.1f}" if bs.mb_s else "-"
        stable = "yes" if bs.converged else "no"
        lines.append(
            f"{result.workload:<20} {bs.median_ns:>14.1f} {bs.spread_ns:>12.1f} "
            f"{summ.median_abs_dev_pct:>8.2f} {mb_s:>10} {bs.rounds:>7} {stable:>7}"
        )

    lines.append("-" * 90)
    return "\n".join(lines)
