"""Command-line interface for steadybench.

Provides the `steadybench` command with subcommands for:
- Running the builtin workloads or a YAML suite
- Listing the workloads a run would measure
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from steadybench.bencher import BenchConfig
from steadybench.log import setup_logger
from steadybench.runner import (
    BenchmarkRunner,
    BenchmarkSuite,
    WorkloadProgress,
    builtin_suite,
    format_results_table,
    load_suite_config,
    parse_bench_config,
)
from steadybench.workloads import BUILTIN_WORKLOADS


def _load_suite(args: argparse.Namespace) -> BenchmarkSuite:
    if args.suite:
        return load_suite_config(Path(args.suite))
    return builtin_suite()


def _config_overrides(args: argparse.Namespace) -> dict:
    """Collect BenchConfig overrides given on the command line."""
    overrides: dict = {}
    if args.samples is not None:
        overrides["samples"] = args.samples
    if args.winsorize_pct is not None:
        overrides["winsorize_pct"] = args.winsorize_pct
    if args.min_round_ms is not None:
        overrides["min_round_ns"] = int(args.min_round_ms * 1_000_000)
    if args.max_total_ms is not None:
        overrides["max_total_ns"] = int(args.max_total_ms * 1_000_000)
    if args.max_mad_pct is not None:
        overrides["max_mad_pct"] = args.max_mad_pct
    if args.absolute_mad:
        overrides["absolute_deviations"] = True
    return overrides


def cmd_run(args: argparse.Namespace) -> int:
    """Run benchmarks."""
    try:
        suite = _load_suite(args)
        suite.config = parse_bench_config(_config_overrides(args), suite.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading suite configuration: {e}")
        return 1

    def progress(p: WorkloadProgress) -> None:
        print(
            f"  [{p.workload}] round {p.progress.round} "
            f"(n={p.progress.batch_size})...",
            end="\r",
            flush=True,
        )

    runner = BenchmarkRunner(
        suite=suite,
        progress_callback=progress if not args.quiet else None,
    )

    config = suite.config
    print(f"Running suite: {suite.name}")
    print(
        f"  {config.samples} samples/round, "
        f"budget {config.max_total_ns / 1e9:.1f}s, "
        f"target MAD {config.max_mad_pct:.1f}%"
    )
    print()

    results = runner.run_all(workload_filter=args.workload)
    if args.workload and not results:
        print(f"Error: no enabled workload named {args.workload!r}")
        return 1

    # Clear progress line and print results
    print(" " * 50, end="\r")
    print(format_results_table(results))

    return 1 if any(r.error for r in results) else 0


def cmd_workloads(args: argparse.Namespace) -> int:
    """List workloads."""
    try:
        suite = _load_suite(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading suite configuration: {e}")
        return 1

    print(f"Workloads in suite {suite.name!r}")
    print("=" * 70)
    print(f"{'Name':<20} {'Enabled':<8} Target")
    print("-" * 70)
    for workload in suite.workloads:
        enabled = "yes" if workload.enabled else "no"
        print(f"{workload.name:<20} {enabled:<8} {workload.target}")

    if not args.suite:
        print("-" * 70)
        print(f"Builtin: {', '.join(sorted(BUILTIN_WORKLOADS))}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    defaults = BenchConfig()
    parser = argparse.ArgumentParser(
        prog="steadybench",
        description="Adaptive micro-benchmarks with robust statistics",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every measurement round",
    )
    parser.add_argument(
        "--log-file",
        help="Append DEBUG logs to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Run benchmarks")
    run_parser.add_argument(
        "--suite",
        help="Path to suite YAML (default: builtin workloads)",
    )
    run_parser.add_argument(
        "--workload",
        help="Run only the specified workload",
    )
    run_parser.add_argument(
        "--samples",
        type=int,
        help=f"Samples per summary (default: {defaults.samples})",
    )
    run_parser.add_argument(
        "--winsorize-pct",
        type=float,
        help=f"Outlier percentile to clamp (default: {defaults.winsorize_pct})",
    )
    run_parser.add_argument(
        "--min-round-ms",
        type=float,
        help=f"Minimum round in ms (default: {defaults.min_round_ns // 10**6})",
    )
    run_parser.add_argument(
        "--max-total-ms",
        type=float,
        help=f"Budget per workload in ms (default: {defaults.max_total_ns // 10**6})",
    )
    run_parser.add_argument(
        "--max-mad-pct",
        type=float,
        help=f"Largest stable MAD in %% (default: {defaults.max_mad_pct})",
    )
    run_parser.add_argument(
        "--absolute-mad",
        action="store_true",
        help="Use the median of absolute deviations",
    )
    run_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    run_parser.set_defaults(func=cmd_run)

    # workloads command
    workloads_parser = subparsers.add_parser("workloads", help="List workloads")
    workloads_parser.add_argument(
        "--suite",
        help="Path to suite YAML (default: builtin workloads)",
    )
    workloads_parser.set_defaults(func=cmd_workloads)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logger(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=Path(args.log_file) if args.log_file else None,
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
