"""Shared test fixtures and configuration for oligotile tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from oligotile.core import DesignSettings, Oligo
from oligotile.measurements import (
    ChromosomeMeasurement,
    GCMeasurement,
    NumericMeasurement,
    OligoLengthMeasurement,
    OligoStartMeasurement,
)
from oligotile.selection import SequenceMeasurements


class QualityMeasurement(NumericMeasurement):
    """Test measurement whose score is its value."""

    name = "Quality"
    description = "Precomputed quality"

    def compute(self, oligo: Oligo) -> float:
        return float(len(oligo.tokens))

    def score(self, value):
        return float("nan") if value is None else float(value)


@pytest.fixture
def quality():
    return QualityMeasurement()


@pytest.fixture
def make_record(quality):
    """Factory for one-column records scored by their value."""
    counter = iter(range(1, 1_000_000))

    def _make(score: float, id: int | None = None) -> SequenceMeasurements:  # noqa: A002
        record = SequenceMeasurements([quality], [score], id=id if id is not None else next(counter))
        record.set_weight("Quality", 1.0)
        return record

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> DesignSettings:
    """Ten base oligos, 0-based coordinates, output under tmp_path."""
    return DesignSettings(oligo_length=10, output_dir=tmp_path)


@pytest.fixture
def source_measurements(settings):
    """Position columns plus GC, as found in a measurement stream."""
    return [
        ChromosomeMeasurement(settings),
        OligoStartMeasurement(settings),
        OligoLengthMeasurement(settings),
        GCMeasurement(settings),
    ]


@pytest.fixture
def make_source_record(source_measurements):
    """Factory for stream records ``(id, chromosome, start, gc)`` of length 10."""

    def _make(id: int, chromosome: str, start: int, gc: float) -> SequenceMeasurements:  # noqa: A002
        return SequenceMeasurements(source_measurements, [chromosome, start, 10, gc], id=id)

    return _make


@pytest.fixture
def genome_file(tmp_path: Path) -> Path:
    """Two-chromosome FASTA genome."""
    path = tmp_path / "genome.fa"
    path.write_text(
        ">chr1 first\n"
        "ACGTTGCAAGGCTTAACCGGATCGATCGGCTAGCTAAATTTGGGCCCATGCATGCAACGT\n"
        "TTGACCGGTAACGTTCAGGCATTACGGCATCGATTGACCAGGTTTAACCGGTACGATCGA\n"
        ">chr2\n"
        "GGGCCCAAATTTACGTACGTNNACGTAGCTAGGATCC\n",
        encoding="utf-8",
    )
    return path
