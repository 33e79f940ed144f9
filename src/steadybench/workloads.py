"""Demonstration workloads.

Each workload takes the Bencher handle; byte-oriented ones set
`bencher.bytes` so the report can compute throughput.
"""

from __future__ import annotations

import zlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from steadybench.bencher import Bencher, Workload

CHECKSUM_BUFFER = bytes(range(256)) * 256  # 64 KiB


def factorial(n: int) -> int:
    """Recursive n!."""
    return factorial(n - 1) * n if n > 0 else 1


def simple_bench(_bencher: Bencher) -> None:
    """Recursive factorial of 100."""
    factorial(100)


def checksum_bench(bencher: Bencher) -> None:
    """CRC32 over a 64 KiB buffer."""
    zlib.crc32(CHECKSUM_BUFFER)
    bencher.bytes = len(CHECKSUM_BUFFER)


BUILTIN_WORKLOADS: dict[str, Workload] = {
    "factorial": simple_bench,
    "checksum": checksum_bench,
}
