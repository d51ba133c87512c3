"""Filters applied to computed measurement records."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import ClassVar, Final, Protocol

from oligotile.core.errors import ConfigurationError, DataIntegrityError
from oligotile.core.settings import DesignSettings
from oligotile.resources.regions import RegionLookup, load_region_lookup
from oligotile.selection.record import SequenceMeasurements

_LOGGER = logging.getLogger(__name__)


class MeasurementFilter(Protocol):
    name: ClassVar[str]

    def accept(self, record: SequenceMeasurements) -> bool:
        """Return ``True`` to keep the record."""


class FloatRangeFilter:
    """Keep records whose ``measurement`` value lies in ``[min, max]``.

    Bounds given in the wrong order are swapped. Missing values are rejected.
    """

    name: ClassVar[str] = "floatrange"

    def __init__(
        self,
        settings: DesignSettings | None = None,
        *,
        measurement: str | None = None,
        min: float = -math.inf,  # noqa: A002
        max: float = math.inf,  # noqa: A002
    ) -> None:
        if not measurement:
            msg = f"Missing measurement for {self.name} filter"
            raise ConfigurationError(msg)
        low, high = float(min), float(max)
        if low > high:
            low, high = high, low
        self.measurement = measurement
        self.min = low
        self.max = high
        self._index = -1

    def accept(self, record: SequenceMeasurements) -> bool:
        if self._index < 0:
            self._index = record.index_of(self.measurement)
            if self._index < 0:
                msg = f"In {self.name}, unknown measurement: {self.measurement}"
                raise DataIntegrityError(msg)
        value = record.values[self._index]
        if value is None:
            return False
        return self.min <= float(value) <= self.max


class RegionFilter:
    """Keep records lying inside an annotated region."""

    name: ClassVar[str] = "regions"

    def __init__(
        self,
        settings: DesignSettings | None = None,
        *,
        regions_file: str | Path | None = None,
        regions_start1: object = False,
        lookup: RegionLookup | None = None,
    ) -> None:
        self.settings = settings or DesignSettings()
        self.lookup = load_region_lookup(self.settings, regions_file, regions_start1, lookup)

    def accept(self, record: SequenceMeasurements) -> bool:
        # Streams without an OligoLength column hold oligos of the configured length.
        length = record.value("OligoLength") if record.index_of("OligoLength") >= 0 else None
        region = self.lookup.get_region(
            str(record.value("Chromosome")),
            int(record.value("OligoStart")),  # type: ignore[arg-type]
            self.settings.oligo_length if length is None else int(length),  # type: ignore[arg-type]
        )
        return region is not None


_REGISTRY: Final[dict[str, type]] = {
    "floatrange": FloatRangeFilter,
    "regions": RegionFilter,
}


def measurement_filter_from_name(
    name: str,
    settings: DesignSettings | None = None,
    **params: object,
) -> MeasurementFilter:
    key = name.lower()
    if key not in _REGISTRY:
        msg = f"Unknown measurement filter: {name}. Available: {list(_REGISTRY.keys())}"
        raise ConfigurationError(msg)
    try:
        return _REGISTRY[key](settings, **params)
    except (TypeError, ValueError) as exc:
        if isinstance(exc, ConfigurationError):
            raise
        msg = f"Invalid parameters for measurement filter {name}: {exc}"
        raise ConfigurationError(msg) from exc


__all__ = ["MeasurementFilter", "FloatRangeFilter", "RegionFilter", "measurement_filter_from_name"]
