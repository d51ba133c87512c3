"""Candidate measurements, their scoring and statistics."""

from .base import (
    BaseMeasurement,
    IntegerMeasurement,
    Measurement,
    NumericMeasurement,
    StringMeasurement,
    Value,
    ValueCodec,
    ValueKind,
)
from .composition import ComplexityMeasurement, GCMeasurement, TmMeasurement
from .registry import MeasurementRegistry
from .sequence import (
    ChromosomeMeasurement,
    OligoLengthMeasurement,
    OligoNameMeasurement,
    OligoSequenceMeasurement,
    OligoStartMeasurement,
)
from .statistics import ChunkedStatistics, Histogram, StatisticsSummary
from .unicity import UnicityMeasurement

__all__ = [
    "Measurement",
    "BaseMeasurement",
    "IntegerMeasurement",
    "NumericMeasurement",
    "StringMeasurement",
    "Value",
    "ValueCodec",
    "ValueKind",
    "ChunkedStatistics",
    "Histogram",
    "StatisticsSummary",
    "MeasurementRegistry",
    "ChromosomeMeasurement",
    "OligoStartMeasurement",
    "OligoLengthMeasurement",
    "OligoNameMeasurement",
    "OligoSequenceMeasurement",
    "GCMeasurement",
    "TmMeasurement",
    "ComplexityMeasurement",
    "UnicityMeasurement",
]
