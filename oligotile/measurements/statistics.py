"""Chunked, memory-bounded statistics for measurement value distributions.

Samples are buffered in a fixed-size numpy array. Each time the buffer fills,
the chunk's median, mean and sample standard deviation are appended to three
running lists and the buffer is reset. Reported statistics are the arithmetic
mean of the per-chunk values.

This is an approximation of the global statistics, not an exact computation:
the mean of chunk medians is not the median of all samples. Selection
outcomes depend on these values (they are the default score reference and
deviation), so the approximation is part of the contract.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Final

import numpy as np

CHUNK_SIZE: Final = 20_000
HISTOGRAM_BINS: Final = 10


def _bound_label(value: float) -> str:
    return f"{value:g}"


class Histogram:
    """Fixed-width histogram with an extra bucket for out-of-range values."""

    def __init__(self, minimum: float, maximum: float, bins: int = HISTOGRAM_BINS) -> None:
        if bins <= 0:
            raise ValueError(f"Invalid parameter: bins={bins}")
        self.minimum = float(min(minimum, maximum))
        self.maximum = float(max(minimum, maximum))
        self.bins = bins
        self._step = (self.maximum - self.minimum) / bins
        self._counts = np.zeros(bins + 1, dtype=np.int64)

    @property
    def count(self) -> int:
        return int(self._counts.sum())

    def add(self, value: float) -> None:
        if value < self.minimum or value >= self.maximum or self._step == 0:
            self._counts[self.bins] += 1
            return
        index = min(int((value - self.minimum) / self._step), self.bins - 1)
        self._counts[index] += 1

    def labels(self) -> list[str]:
        """Bucket names as ``"<lo>-<hi>"`` in ascending order."""
        edges = np.linspace(self.minimum, self.maximum, self.bins + 1)
        return [f"{_bound_label(lo)}-{_bound_label(hi)}" for lo, hi in zip(edges[:-1], edges[1:])]

    def fractions(self) -> list[float]:
        """Fraction of samples per bucket; the last entry is the overflow bucket."""
        total = self.count
        if total == 0:
            return [0.0] * (self.bins + 1)
        return [float(c) / total for c in self._counts]

    def clear(self) -> None:
        self._counts[:] = 0


def _chunk_stats(values: np.ndarray) -> tuple[float, float, float]:
    median = float(np.median(values))
    mean = float(np.mean(values))
    stddev = float(np.std(values, ddof=1)) if values.size > 1 else math.nan
    return median, mean, stddev


def _mean_defined(values: Iterable[float]) -> float:
    kept = [v for v in values if not math.isnan(v)]
    if not kept:
        return math.nan
    return sum(kept) / len(kept)


@dataclass(frozen=True, slots=True)
class StatisticsSummary:
    """Snapshot of a measurement distribution."""

    median: float
    mean: float
    stddev: float
    n: int
    minimum: float
    maximum: float
    histogram: dict[str, float] = field(default_factory=dict)
    overflow: float = 0.0

    def to_properties(self) -> dict[str, str]:
        """Render the summary as ``name -> text`` rows of a statistics file."""
        props = {
            "median": repr(self.median),
            "mean": repr(self.mean),
            "stddev": repr(self.stddev),
            "n": str(self.n),
            "min": repr(self.minimum),
            "max": repr(self.maximum),
        }
        for label, fraction in self.histogram.items():
            props[label] = repr(fraction)
        props["overflow"] = repr(self.overflow)
        return props


class ChunkedStatistics:
    """Running statistics over an unbounded stream of float samples.

    Memory is bounded by ``chunk_size`` regardless of the number of samples.
    A trailing partial chunk is included when a summary is requested but is
    not consumed, so sampling may continue afterwards.
    """

    def __init__(
        self,
        histogram_min: float = 0.0,
        histogram_max: float = 1.0,
        *,
        chunk_size: int = CHUNK_SIZE,
        bins: int = HISTOGRAM_BINS,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"Invalid chunk size: {chunk_size}")
        self.chunk_size = chunk_size
        self._buffer = np.empty(chunk_size, dtype=np.float64)
        self._buffered = 0
        self._medians: list[float] = []
        self._means: list[float] = []
        self._stddevs: list[float] = []
        self._n = 0
        self._min = math.nan
        self._max = math.nan
        self.histogram = Histogram(histogram_min, histogram_max, bins)

    @property
    def n(self) -> int:
        return self._n

    @property
    def chunks(self) -> int:
        """Number of completed chunks."""
        return len(self._means)

    def add(self, value: float) -> None:
        value = float(value)
        if math.isnan(value):
            return
        self._buffer[self._buffered] = value
        self._buffered += 1
        if self._buffered == self.chunk_size:
            self._close_chunk()
        self.histogram.add(value)
        self._n += 1
        self._min = value if math.isnan(self._min) else min(self._min, value)
        self._max = value if math.isnan(self._max) else max(self._max, value)

    def _close_chunk(self) -> None:
        median, mean, stddev = _chunk_stats(self._buffer[: self._buffered])
        self._medians.append(median)
        self._means.append(mean)
        self._stddevs.append(stddev)
        self._buffered = 0

    def summary(self) -> StatisticsSummary:
        medians = list(self._medians)
        means = list(self._means)
        stddevs = list(self._stddevs)
        if self._buffered:
            median, mean, stddev = _chunk_stats(self._buffer[: self._buffered])
            medians.append(median)
            means.append(mean)
            stddevs.append(stddev)

        fractions = self.histogram.fractions()
        return StatisticsSummary(
            median=_mean_defined(medians),
            mean=_mean_defined(means),
            stddev=_mean_defined(stddevs),
            n=self._n,
            minimum=self._min,
            maximum=self._max,
            histogram=dict(zip(self.histogram.labels(), fractions[:-1])),
            overflow=fractions[-1],
        )

    def clear(self) -> None:
        self._buffered = 0
        self._medians.clear()
        self._means.clear()
        self._stddevs.clear()
        self._n = 0
        self._min = math.nan
        self._max = math.nan
        self.histogram.clear()


__all__ = ["CHUNK_SIZE", "HISTOGRAM_BINS", "ChunkedStatistics", "Histogram", "StatisticsSummary"]
