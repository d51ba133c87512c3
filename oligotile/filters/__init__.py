"""Candidate and measurement filters."""

from .measurement import FloatRangeFilter, MeasurementFilter, RegionFilter, measurement_filter_from_name
from .sequence import NotACGTFilter, SequenceFilter, UnknownBaseFilter, sequence_filter_from_name

__all__ = [
    "SequenceFilter",
    "UnknownBaseFilter",
    "NotACGTFilter",
    "sequence_filter_from_name",
    "MeasurementFilter",
    "FloatRangeFilter",
    "RegionFilter",
    "measurement_filter_from_name",
]
