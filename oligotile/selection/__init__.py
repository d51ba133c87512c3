"""Scoring records and selecting the best oligo per window or region."""

from .record import SequenceMeasurements
from .weights import MeasurementWeight, WeightAssignment
from .engine import (
    EngineState,
    RegionSelectionEngine,
    Selection,
    SelectionEngine,
    SelectionStats,
    Window,
    WindowGeometry,
)
from .enrichment import (
    From5PrimeORFMeasurement,
    FromEndORFMeasurement,
    FromStartORFMeasurement,
    GlobalScoreMeasurement,
    ORFMeasurement,
    PositionMeasurement,
    SelectorMeasurement,
    TilingZoneMeasurement,
)
from .selectors import (
    BaseSelector,
    TilingSelector,
    TilingZoneSelector,
    ZoneSelector,
    available_selectors,
    selector_from_name,
)

__all__ = [
    "SequenceMeasurements",
    "MeasurementWeight",
    "WeightAssignment",
    "EngineState",
    "RegionSelectionEngine",
    "Selection",
    "SelectionEngine",
    "SelectionStats",
    "Window",
    "WindowGeometry",
    "SelectorMeasurement",
    "PositionMeasurement",
    "TilingZoneMeasurement",
    "ORFMeasurement",
    "FromStartORFMeasurement",
    "FromEndORFMeasurement",
    "From5PrimeORFMeasurement",
    "GlobalScoreMeasurement",
    "BaseSelector",
    "TilingSelector",
    "TilingZoneSelector",
    "ZoneSelector",
    "available_selectors",
    "selector_from_name",
]
