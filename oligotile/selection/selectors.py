"""Selectors: the policy layer between a measurement stream and the engine.

A selector extends each incoming record with its own measurements and the
``GlobalScore`` column, loads the statistics file, applies the weights and
feeds the engine. It yields the winners as :class:`Selection` objects.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import ClassVar, Final

from oligotile.core.errors import ConfigurationError, DataIntegrityError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.base import BaseMeasurement
from oligotile.resources.regions import Region, RegionLookup, load_region_lookup
from oligotile.selection.engine import (
    Eligibility,
    RegionSelectionEngine,
    Selection,
    SelectionEngine,
    SelectionStats,
    WindowGeometry,
)
from oligotile.selection.enrichment import (
    From5PrimeORFMeasurement,
    FromEndORFMeasurement,
    FromStartORFMeasurement,
    GlobalScoreMeasurement,
    ORFMeasurement,
    PositionMeasurement,
    SelectorMeasurement,
    TilingZoneMeasurement,
)
from oligotile.selection.record import SequenceMeasurements
from oligotile.selection.weights import WeightAssignment
from oligotile.storage.stats_io import read_statistics
from oligotile.utils.params import parse_int

_LOGGER = logging.getLogger(__name__)


class BaseSelector:
    """Common selector behaviour.

    Parameters
    ----------
    settings : DesignSettings, optional
        Run settings (oligo length, coordinate origin).
    weights : WeightAssignment, optional
        Weights and scoring properties applied to the output record.
    stats_file : str or Path, optional
        Statistics file loaded into the measurements before scoring.
    """

    name: ClassVar[str] = ""

    def __init__(
        self,
        settings: DesignSettings | None = None,
        *,
        weights: WeightAssignment | None = None,
        stats_file: str | Path | None = None,
    ) -> None:
        self.settings = settings or DesignSettings()
        self.weights = weights or WeightAssignment()
        self.stats_file = Path(stats_file) if stats_file is not None else None
        self._output: SequenceMeasurements | None = None
        self._source_width = 0
        self._chromosome_index = -1
        self._start_index = -1
        self._length_index = -1

    def selector_measurements(self) -> list[SelectorMeasurement]:
        return []

    @property
    def measurements(self) -> tuple[BaseMeasurement, ...]:
        if self._output is None:
            msg = f"Selector {self.name} is not prepared"
            raise ConfigurationError(msg)
        return self._output.measurements

    @property
    def stats(self) -> SelectionStats:
        raise NotImplementedError

    def prepare(self, source: Sequence[BaseMeasurement]) -> SequenceMeasurements:
        """Build the output record for a stream whose columns are ``source``."""
        extra = self.selector_measurements()
        output = SequenceMeasurements([*source, *extra, GlobalScoreMeasurement(self.settings)])
        self._source_width = len(source)
        self._chromosome_index = output.index_of("Chromosome")
        self._start_index = output.index_of("OligoStart")
        self._length_index = output.index_of("OligoLength")
        if self._chromosome_index < 0 or self._start_index < 0:
            msg = "Measurement stream needs Chromosome and OligoStart columns"
            raise DataIntegrityError(msg)
        if self._length_index >= self._source_width:
            self._length_index = -1

        if self.stats_file is not None:
            read_statistics(self.stats_file, output.measurements)
        self.weights.apply(output)
        self._output = output
        return output

    def enrich(self, record: SequenceMeasurements) -> SequenceMeasurements:
        """Copy ``record`` into the output record and fill the selector columns."""
        if self._output is None:
            self.prepare(record.measurements)
        output = self._output
        assert output is not None
        values = record.values
        if len(values) != self._source_width:
            msg = f"Expected {self._source_width} values, got {len(values)}"
            raise DataIntegrityError(msg)

        chromosome, start, length = self.position_of(record)
        row = list(values)
        for measurement in output.measurements[self._source_width : -1]:
            row.append(measurement.compute_at(chromosome, start, length))  # type: ignore[attr-defined]
        row.append(None)
        output.set_values(row)
        output.set_id(record.id)
        if self.in_scope(output):
            output.set_value(len(row) - 1, output.score(), keep_score=True)
        return output

    def in_scope(self, output: SequenceMeasurements) -> bool:
        """Whether an enriched record competes at all. Others are not scored."""
        return True

    def position_of(self, record: SequenceMeasurements) -> tuple[str, int, int]:
        """``(chromosome, start, length)`` of a source or output record."""
        values = record.values
        cell = values[self._length_index] if self._length_index >= 0 else None
        length = self.settings.oligo_length if cell is None else int(cell)  # type: ignore[arg-type]
        return str(values[self._chromosome_index]), int(values[self._start_index]), length  # type: ignore[arg-type]

    def select(self, records: Iterable[SequenceMeasurements]) -> Iterator[Selection]:
        raise NotImplementedError


class TilingSelector(BaseSelector):
    """One oligo per tiling window."""

    name = "tiling"

    def __init__(
        self,
        settings: DesignSettings | None = None,
        *,
        window_length: int | str | None = None,
        window_step: int | str | None = None,
        weights: WeightAssignment | None = None,
        stats_file: str | Path | None = None,
    ) -> None:
        super().__init__(settings, weights=weights, stats_file=stats_file)
        length = parse_int("window_length", window_length)
        step = parse_int("window_step", window_step, optional=True)
        self.geometry = WindowGeometry(length, step, self.settings.origin)  # type: ignore[arg-type]
        self._engine = SelectionEngine(self.geometry, eligible=self._eligibility())
        self._position = PositionMeasurement(self.settings, window_length=self.geometry.length)
        self._zone = TilingZoneMeasurement(self.settings)

    def _eligibility(self) -> Eligibility | None:
        return None

    def selector_measurements(self) -> list[SelectorMeasurement]:
        return [self._position, self._zone]

    @property
    def stats(self) -> SelectionStats:
        return self._engine.stats

    def _items(self, records: Iterable[SequenceMeasurements]) -> Iterator[tuple[str, int, SequenceMeasurements]]:
        for record in records:
            output = self.enrich(record)
            chromosome, start, _ = self.position_of(output)
            yield chromosome, start, output

    def select(self, records: Iterable[SequenceMeasurements]) -> Iterator[Selection]:
        _LOGGER.info(
            "%s selector: window length=%d step=%d",
            self.name,
            self.geometry.length,
            self.geometry.stride,
        )
        zone_index = -1
        for selection in self._engine.run(self._items(records)):
            if zone_index < 0:
                zone_index = selection.record.index_of(TilingZoneMeasurement.name)
            if selection.window is not None:
                selection.record.set_value(zone_index, selection.window.label, keep_score=True)
            yield selection


class TilingZoneSelector(TilingSelector):
    """Tiling restricted to annotated regions.

    Only oligos lying inside a region compete; windows without such an oligo
    produce no selection.
    """

    name = "tilingzone"

    def __init__(
        self,
        settings: DesignSettings | None = None,
        *,
        window_length: int | str | None = None,
        window_step: int | str | None = None,
        regions_file: str | Path | None = None,
        regions_start1: object = False,
        lookup: RegionLookup | None = None,
        weights: WeightAssignment | None = None,
        stats_file: str | Path | None = None,
    ) -> None:
        resolved = settings or DesignSettings()
        self.lookup = load_region_lookup(resolved, regions_file, regions_start1, lookup)
        super().__init__(
            resolved,
            window_length=window_length,
            window_step=window_step,
            weights=weights,
            stats_file=stats_file,
        )
        self._orf = ORFMeasurement(self.settings, lookup=self.lookup)

    def _eligibility(self) -> Eligibility | None:
        def eligible(chromosome: str, position: int, record: SequenceMeasurements) -> bool:
            return self.in_scope(record)

        return eligible

    def selector_measurements(self) -> list[SelectorMeasurement]:
        return [self._position, self._zone, self._orf]

    def in_scope(self, output: SequenceMeasurements) -> bool:
        return bool(output.value(ORFMeasurement.name))


class ZoneSelector(BaseSelector):
    """One oligo per annotated region."""

    name = "zone"

    def __init__(
        self,
        settings: DesignSettings | None = None,
        *,
        regions_file: str | Path | None = None,
        regions_start1: object = False,
        lookup: RegionLookup | None = None,
        weights: WeightAssignment | None = None,
        stats_file: str | Path | None = None,
    ) -> None:
        super().__init__(settings, weights=weights, stats_file=stats_file)
        self.lookup = load_region_lookup(self.settings, regions_file, regions_start1, lookup)
        self._engine = RegionSelectionEngine()
        self._measurements: list[SelectorMeasurement] = [
            ORFMeasurement(self.settings, lookup=self.lookup),
            FromStartORFMeasurement(self.settings, lookup=self.lookup),
            FromEndORFMeasurement(self.settings, lookup=self.lookup),
            From5PrimeORFMeasurement(self.settings, lookup=self.lookup),
        ]

    def selector_measurements(self) -> list[SelectorMeasurement]:
        return list(self._measurements)

    def in_scope(self, output: SequenceMeasurements) -> bool:
        return bool(output.value(ORFMeasurement.name))

    @property
    def stats(self) -> SelectionStats:
        return self._engine.stats

    def _items(self, records: Iterable[SequenceMeasurements]) -> Iterator[tuple[Region | None, SequenceMeasurements]]:
        for record in records:
            output = self.enrich(record)
            yield self.lookup.get_region(*self.position_of(output)), output

    def select(self, records: Iterable[SequenceMeasurements]) -> Iterator[Selection]:
        _LOGGER.info("%s selector: %d regions", self.name, len(self.lookup))
        yield from self._engine.run(self._items(records))


_REGISTRY: Final[dict[str, type[BaseSelector]]] = {
    "tiling": TilingSelector,
    "zone": ZoneSelector,
    "tilingzone": TilingZoneSelector,
}


def available_selectors() -> list[str]:
    return list(_REGISTRY.keys())


def selector_from_name(name: str, settings: DesignSettings | None = None, **params: object) -> BaseSelector:
    """Return a selector instance from the registry.

    Raises ConfigurationError for unknown selectors or invalid parameters.

    Parameters
    ----------
    name : str
        Selector name: "tiling", "zone", "tilingzone"
    settings : DesignSettings, optional
        Run settings.
    **params : object
        Constructor parameters (e.g., window_length, regions_file, weights)
    """
    key = name.lower()
    if key not in _REGISTRY:
        msg = f"Unknown selector: {name}. Available: {list(_REGISTRY.keys())}"
        raise ConfigurationError(msg)
    try:
        return _REGISTRY[key](settings, **params)  # type: ignore[arg-type]
    except TypeError as exc:
        msg = f"Invalid parameters for selector {name}: {exc}"
        raise ConfigurationError(msg) from exc


__all__ = [
    "BaseSelector",
    "TilingSelector",
    "TilingZoneSelector",
    "ZoneSelector",
    "available_selectors",
    "selector_from_name",
]
