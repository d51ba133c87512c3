"""Reading and writing measurement streams, statistics and selections."""

from .files import open_text
from .measurements_io import (
    SequenceMeasurementsReader,
    SequenceMeasurementsWriter,
    read_measurements_frame,
)
from .outputs import DefaultOutput, FastaOutput, GffOutput, OutputRegistry, SelectionOutput, output_from_name
from .stats_io import read_statistics, write_statistics

__all__ = [
    "open_text",
    "SequenceMeasurementsReader",
    "SequenceMeasurementsWriter",
    "read_measurements_frame",
    "read_statistics",
    "write_statistics",
    "SelectionOutput",
    "DefaultOutput",
    "FastaOutput",
    "GffOutput",
    "OutputRegistry",
    "output_from_name",
]
