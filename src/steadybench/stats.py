"""Robust statistics for per-iteration timing samples.

Provides the building blocks of the adaptive timing loop:
- Linearly interpolated percentiles over sorted samples
- Winsorizing (clamping outliers to a percentile pair)
- Summary statistics with a scaled median absolute deviation
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

# Scales the MAD so it estimates the standard deviation of normal data.
MAD_SCALE = 1.4826


@dataclass(frozen=True)
class Summary:
    """Descriptive statistics of one sample set.

    Attributes:
        max: Largest sample.
        min: Smallest sample.
        median: 50th percentile (interpolated).
        median_abs_dev: Median deviation from the median, times MAD_SCALE.
        median_abs_dev_pct: median_abs_dev as a percentage of the median.
            nan or +/-inf when the median is 0.
    """

    max: float
    min: float
    median: float
    median_abs_dev: float
    median_abs_dev_pct: float


def percentile_of_sorted(sorted_samples: Sequence[float], pct: float) -> float:
    """Return the `pct` percentile of an ascending sample set.

    Interpolates linearly between the two closest ranks. Sortedness is not
    checked; unsorted input gives a meaningless value.

    Args:
        sorted_samples: Samples sorted ascending (at least one element).
        pct: Percentile in [0, 100].

    Returns:
        The interpolated percentile value.

    Raises:
        ValueError: If the sequence is empty or pct is out of range.
    """
    if not sorted_samples:
        raise ValueError("percentile of an empty sample set")
    if len(sorted_samples) == 1:
        return sorted_samples[0]
    if not 0.0 <= pct <= 100.0:
        raise ValueError(f"percentile must be within [0, 100], got {pct}")
    if pct == 100.0:
        return sorted_samples[-1]

    rank = (pct / 100.0) * (len(sorted_samples) - 1)
    lrank = math.floor(rank)
    d = rank - lrank
    n = int(lrank)
    lo = sorted_samples[n]
    hi = sorted_samples[n + 1]
    return lo + (hi - lo) * d


def winsorize(samples: list[float], pct: float) -> None:
    """Clamp outliers in place to the `pct` / `100 - pct` percentiles.

    Unlike trimming, the number of samples is unchanged: values below the
    low percentile are raised to it and values above the high percentile
    are lowered to it. The list is left sorted.

    Args:
        samples: Samples to winsorize (modified in place).
        pct: Tail percentile, normally in (0, 50).
    """
    samples.sort()
    lo = percentile_of_sorted(samples, pct)
    hi = percentile_of_sorted(samples, 100.0 - pct)
    for i, value in enumerate(samples):
        if value > hi:
            samples[i] = hi
        elif value < lo:
            samples[i] = lo


def _percentile(samples: Sequence[float], pct: float) -> float:
    return percentile_of_sorted(sorted(samples), pct)


def _median_abs_dev(samples: Sequence[float], absolute: bool) -> float:
    # Signed deviations are kept by default; their median sits near zero.
    med = _percentile(samples, 50.0)
    if absolute:
        devs = [abs(med - v) for v in samples]
    else:
        devs = [med - v for v in samples]
    return _percentile(devs, 50.0) * MAD_SCALE


def _pct_of(part: float, whole: float) -> float:
    if whole == 0:
        if part == 0:
            return math.nan
        return math.copysign(math.inf, part)
    return 100.0 * part / whole


def summarize(samples: Sequence[float], absolute_deviations: bool = False) -> Summary:
    """Compute a Summary from raw samples.

    The input order is left untouched; percentiles are taken on sorted
    copies.

    Args:
        samples: Non-empty sample set (e.g. nanoseconds per iteration).
        absolute_deviations: Take the median of |median - v| instead of the
            signed deviations (textbook MAD).

    Returns:
        Summary of the samples.

    Raises:
        ValueError: If samples is empty.
    """
    if not samples:
        raise ValueError("cannot summarize an empty sample set")

    median = _percentile(samples, 50.0)
    mad = _median_abs_dev(samples, absolute_deviations)
    return Summary(
        max=max(samples),
        min=min(samples),
        median=median,
        median_abs_dev=mad,
        median_abs_dev_pct=_pct_of(mad, median),
    )
