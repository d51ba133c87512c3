"""Tests for measurement streams and statistics files."""

from __future__ import annotations

import math

import pandas as pd
import pytest

from oligotile.core import DataIntegrityError
from oligotile.measurements import GCMeasurement
from oligotile.storage import (
    SequenceMeasurementsReader,
    SequenceMeasurementsWriter,
    read_measurements_frame,
    read_statistics,
    write_statistics,
)


@pytest.fixture
def stream_file(tmp_path, source_measurements, make_source_record):
    path = tmp_path / "oligos.measurements.txt"
    with SequenceMeasurementsWriter(path, source_measurements) as writer:
        writer.write(make_source_record(1, "chr1", 0, 0.5))
        writer.write(make_source_record(2, "chr1", 1, None))
        writer.write(make_source_record(3, "chr2", 0, 0.1 + 0.2))
    return path


class TestMeasurementStream:
    """Writer and flyweight reader."""

    def test_header_and_lines(self, stream_file):
        lines = stream_file.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Id\tChromosome\tOligoStart\tOligoLength\tGC"
        assert lines[1] == "1\tchr1\t0\t10\t0.5"
        assert lines[2] == "2\tchr1\t1\t10\t"

    def test_read_back(self, stream_file, source_measurements):
        with SequenceMeasurementsReader(stream_file, source_measurements) as reader:
            assert reader.measurements == tuple(source_measurements)
            rows = [(record.id, list(record.values)) for record in reader]

        assert rows == [
            (1, ["chr1", 0, 10, 0.5]),
            (2, ["chr1", 1, 10, None]),
            (3, ["chr2", 0, 10, 0.1 + 0.2]),
        ]

    def test_reader_reuses_record(self, stream_file):
        with SequenceMeasurementsReader(stream_file) as reader:
            records = list(reader)
        assert all(record is reader.record for record in records)
        assert records[0].id == 3

    def test_measurements_created_from_registry(self, stream_file, settings):
        with SequenceMeasurementsReader(stream_file, settings=settings) as reader:
            assert [m.name for m in reader.measurements] == ["Chromosome", "OligoStart", "OligoLength", "GC"]
            assert reader.measurements[3].settings is settings

    def test_gzip_stream(self, tmp_path, source_measurements, make_source_record):
        path = tmp_path / "oligos.measurements.txt.gz"
        with SequenceMeasurementsWriter(path, source_measurements) as writer:
            writer.write(make_source_record(9, "chr1", 4, 0.25))
        with SequenceMeasurementsReader(path, source_measurements) as reader:
            assert [record.id for record in reader] == [9]

    def test_missing_id_header(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("Chromosome\tGC\n", encoding="utf-8")
        with pytest.raises(DataIntegrityError):
            SequenceMeasurementsReader(path)

    def test_unknown_measurement_in_header(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("Id\tChromosome\tMystery\n", encoding="utf-8")
        with pytest.raises(DataIntegrityError, match="Mystery"):
            SequenceMeasurementsReader(path)

    def test_wrong_field_count_reports_line(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("Id\tChromosome\tGC\n1\tchr1\t0.5\n2\tchr1\n", encoding="utf-8")
        with SequenceMeasurementsReader(path) as reader, pytest.raises(DataIntegrityError, match="bad.txt:3"):
            list(reader)

    def test_invalid_value_reports_line(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("Id\tChromosome\tGC\n1\tchr1\thigh\n", encoding="utf-8")
        with SequenceMeasurementsReader(path) as reader, pytest.raises(DataIntegrityError, match="bad.txt:2"):
            list(reader)

    def test_record_width_checked(self, tmp_path, source_measurements, make_source_record):
        with SequenceMeasurementsWriter(tmp_path / "out.txt", source_measurements[:2]) as writer:
            with pytest.raises(DataIntegrityError):
                writer.write(make_source_record(1, "chr1", 0, 0.5))

    def test_frame(self, stream_file):
        frame = read_measurements_frame(stream_file)
        assert list(frame.index) == [1, 2, 3]
        assert frame["OligoStart"].dtype == pd.Int64Dtype()
        assert frame["GC"].dtype == "float64"
        assert math.isnan(frame.loc[2, "GC"])
        assert frame.loc[1, "Chromosome"] == "chr1"


class TestStatisticsFile:
    """Statistics written after a phase and read back before scoring."""

    def test_round_trip(self, tmp_path, source_measurements):
        gc = source_measurements[3]
        for value in (0.4, 0.5, 0.6):
            gc.record_sample(value)
        path = tmp_path / "stats.txt"

        assert write_statistics(path, source_measurements) == 1
        header = path.read_text(encoding="utf-8").splitlines()[0]
        assert header == "\tGC"

        fresh = GCMeasurement()
        assert read_statistics(path, [fresh]) == 1
        assert float(fresh.get_property("median")) == pytest.approx(0.5)
        assert fresh.get_property("n") == "3"
        assert fresh.score(0.6) == pytest.approx(0.0)

    def test_explicit_reference_wins_over_file(self, tmp_path):
        gc = GCMeasurement()
        gc.record_sample(0.2)
        gc.record_sample(0.4)
        path = tmp_path / "stats.txt"
        write_statistics(path, [gc])

        fresh = GCMeasurement()
        read_statistics(path, [fresh])
        fresh.set_property("reference", "0.4")
        assert fresh.reference == pytest.approx(0.4)

    def test_unknown_columns_ignored(self, tmp_path):
        path = tmp_path / "stats.txt"
        path.write_text("\tGC\tMystery\nmedian\t0.5\t3\n", encoding="utf-8")
        gc = GCMeasurement()
        assert read_statistics(path, [gc]) == 1
        assert gc.get_property("median") == "0.5"

    def test_too_many_fields(self, tmp_path):
        path = tmp_path / "stats.txt"
        path.write_text("\tGC\nmedian\t0.5\t0.7\n", encoding="utf-8")
        with pytest.raises(DataIntegrityError):
            read_statistics(path, [GCMeasurement()])
