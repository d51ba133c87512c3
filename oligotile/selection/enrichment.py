"""Measurements added to the selected records by the selectors.

They are computed from the chromosome and start position already present in a
measurement stream, so they expose :meth:`compute_at` in addition to the usual
``compute(oligo)``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, ClassVar

from oligotile.core.errors import ConfigurationError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.base import (
    FLOAT_CODEC,
    INTEGER_CODEC,
    BaseMeasurement,
    Value,
)
from oligotile.measurements.registry import MeasurementRegistry

if TYPE_CHECKING:  # pragma: no cover
    from oligotile.core.candidate import Oligo
    from oligotile.resources.regions import Region, RegionLookup


class SelectorMeasurement(BaseMeasurement):
    def compute_at(self, chromosome: str, start: int, length: int) -> Value:
        raise NotImplementedError

    def compute(self, oligo: Oligo) -> Value:
        return self.compute_at(oligo.chromosome, oligo.start, oligo.length)


class PositionMeasurement(SelectorMeasurement):
    """Closeness of the oligo to the centre of its tiling window.

    ``1`` for an oligo centred in the window, decreasing linearly towards the
    window edges. The score is the value itself.
    """

    name = "Position"
    description = "Position score of the oligo in its window"
    codec = FLOAT_CODEC

    def __init__(self, settings: DesignSettings | None = None, *, window_length: int | None = None) -> None:
        super().__init__(settings)
        self.window_length = window_length
        self._best: int | None = None

    @property
    def best_offset(self) -> int:
        if self.window_length is None:
            msg = "Window length is undefined"
            raise ConfigurationError(msg)
        if self._best is None:
            self._best = math.ceil((self.window_length - self.settings.oligo_length) / 2)
        return self._best

    def compute_at(self, chromosome: str, start: int, length: int) -> float:
        best = self.best_offset
        window_length = int(self.window_length or 0)
        internal = start - self.settings.origin
        window_start = (internal // window_length) * window_length
        offset = internal - window_start
        return 1.0 - abs(best - offset) / (window_length - best)

    def score(self, value: Value) -> float:
        return 0.0 if value is None else float(value)


class TilingZoneMeasurement(SelectorMeasurement):
    """Label of the window an oligo was selected for. Filled on selection."""

    name = "TilingZone"
    description = "Tiling window of the oligo"

    def compute_at(self, chromosome: str, start: int, length: int) -> str:
        return ""


class _RegionMeasurement(SelectorMeasurement):
    def __init__(self, settings: DesignSettings | None = None, *, lookup: RegionLookup | None = None) -> None:
        super().__init__(settings)
        self.lookup = lookup

    def region_at(self, chromosome: str, start: int, length: int) -> Region | None:
        if self.lookup is None:
            msg = f"No region lookup for measurement {self.name}"
            raise ConfigurationError(msg)
        return self.lookup.get_region(chromosome, start, length)


class ORFMeasurement(_RegionMeasurement):
    name = "ORF"
    description = "Annotated region holding the oligo"

    def compute_at(self, chromosome: str, start: int, length: int) -> str:
        region = self.region_at(chromosome, start, length)
        return "" if region is None else region.label


class FromStartORFMeasurement(_RegionMeasurement):
    """Distance from the region start to the oligo start. Never scored."""

    name = "FromStartORF"
    description = "Distance from the start of the region"
    codec = INTEGER_CODEC

    def compute_at(self, chromosome: str, start: int, length: int) -> int | None:
        region = self.region_at(chromosome, start, length)
        return None if region is None else start - region.start


class FromEndORFMeasurement(_RegionMeasurement):
    """Distance from the oligo end to the region end. Never scored."""

    name = "FromEndORF"
    description = "Distance from the end of the region"
    codec = INTEGER_CODEC

    def compute_at(self, chromosome: str, start: int, length: int) -> int | None:
        region = self.region_at(chromosome, start, length)
        return None if region is None else region.end - start - length


class From5PrimeORFMeasurement(_RegionMeasurement):
    """Strand-aware distance of the oligo to the transcript end of its region.

    On a Watson region this is the gap between the oligo end and the region
    end, on a Crick region the gap between the region start and the oligo
    start. Oligos outside any region get ``-1``.

    The score falls linearly from 1 at distance 0 to 0 at the
    ``maxposwithout0score`` property (default 2000). Negative distances score 0.
    """

    name = "From5PrimeORF"
    description = "Distance from the 5' end of the region"
    codec = INTEGER_CODEC
    default_max_distance: ClassVar[int] = 2000

    def compute_at(self, chromosome: str, start: int, length: int) -> int:
        region = self.region_at(chromosome, start, length)
        if region is None:
            return -1
        if region.watson:
            return region.end - start - length
        return start - region.start

    @property
    def max_distance(self) -> float:
        value = self.float_property("maxposwithout0score")
        if value is None:
            return float(self.default_max_distance)
        if value <= 0:
            msg = f"Invalid maxposwithout0score for {self.name}: {value}"
            raise ConfigurationError(msg)
        return value

    def score(self, value: Value) -> float:
        if value is None or int(value) < 0:  # type: ignore[arg-type]
            return 0.0
        return 1.0 - int(value) / self.max_distance  # type: ignore[arg-type]


class GlobalScoreMeasurement(SelectorMeasurement):
    """Composite score of the record, written as the last column."""

    name = "GlobalScore"
    description = "Global score of the oligo"
    codec = FLOAT_CODEC

    def compute_at(self, chromosome: str, start: int, length: int) -> float | None:
        return None


for _factory in (
    PositionMeasurement,
    TilingZoneMeasurement,
    ORFMeasurement,
    FromStartORFMeasurement,
    FromEndORFMeasurement,
    From5PrimeORFMeasurement,
    GlobalScoreMeasurement,
):
    MeasurementRegistry.register(_factory)


__all__ = [
    "SelectorMeasurement",
    "PositionMeasurement",
    "TilingZoneMeasurement",
    "ORFMeasurement",
    "FromStartORFMeasurement",
    "FromEndORFMeasurement",
    "From5PrimeORFMeasurement",
    "GlobalScoreMeasurement",
]
