"""Tests for the tiling, zone and tiling-zone selectors."""

from __future__ import annotations

import pytest

from oligotile.core import ConfigurationError, DataIntegrityError
from oligotile.measurements import ChromosomeMeasurement, GCMeasurement
from oligotile.resources import Region, RegionLookup
from oligotile.selection import (
    From5PrimeORFMeasurement,
    PositionMeasurement,
    SequenceMeasurements,
    TilingSelector,
    TilingZoneSelector,
    WeightAssignment,
    ZoneSelector,
    available_selectors,
    selector_from_name,
)
from oligotile.storage import write_statistics


@pytest.fixture
def weights():
    return WeightAssignment.from_mapping({"GC": {"weight": 1.0, "reference": 0.5, "deviation": 0.5}})


@pytest.fixture
def lookup():
    return RegionLookup([Region("A", "chr1", 0, 100), Region("B", "chr1", 200, 300, watson=False)])


@pytest.fixture
def records(make_source_record):
    return [
        make_source_record(1, "chr1", 10, 0.5),
        make_source_record(2, "chr1", 20, 0.45),
        make_source_record(3, "chr1", 150, 0.5),
        make_source_record(4, "chr1", 210, 0.5),
    ]


class TestTilingSelector:
    """Best oligo per window."""

    def test_selects_one_oligo_per_window(self, settings, weights, records):
        selector = TilingSelector(settings, window_length=100, weights=weights)
        selections = list(selector.select(records))

        assert [s.record.id for s in selections] == [1, 3, 4]
        assert [s.record.value("TilingZone") for s in selections] == ["[0-99]", "[100-199]", "[200-299]"]
        assert selector.stats.selected == 3

    def test_output_columns(self, settings, weights, records):
        selector = TilingSelector(settings, window_length="100", weights=weights)
        first = next(iter(selector.select(records)))

        names = [m.name for m in selector.measurements]
        assert names == ["Chromosome", "OligoStart", "OligoLength", "GC", "Position", "TilingZone", "GlobalScore"]
        assert first.record.value("GlobalScore") == pytest.approx(first.record.score())
        assert first.record.value("GlobalScore") == pytest.approx(1.0)
        # Window [0-99], oligo of 10: best offset 45.
        assert first.record.value("Position") == pytest.approx(1 - 35 / 55)

    def test_position_can_be_weighted(self, settings, records):
        weights = WeightAssignment.from_mapping({"Position": 1.0})
        selector = TilingSelector(settings, window_length=100, weights=weights)
        selections = list(selector.select(records))
        assert selections[0].record.id == 2

    def test_statistics_file_loaded(self, tmp_path, settings, records, source_measurements):
        stats_gc = GCMeasurement()
        for value in (0.3, 0.45, 0.6):
            stats_gc.record_sample(value)
        stats_file = tmp_path / "stats.txt"
        write_statistics(stats_file, [stats_gc])

        selector = TilingSelector(
            settings,
            window_length=100,
            weights=WeightAssignment.from_mapping({"GC": 1.0}),
            stats_file=stats_file,
        )
        selections = list(selector.select(records))
        assert selections[0].record.id == 2
        assert source_measurements[3].reference == pytest.approx(0.45)

    def test_missing_window_length(self, settings):
        with pytest.raises(ConfigurationError):
            TilingSelector(settings)

    def test_stream_needs_positions(self, settings):
        selector = TilingSelector(settings, window_length=100)
        with pytest.raises(DataIntegrityError):
            selector.prepare([ChromosomeMeasurement(settings)])


class TestPositionMeasurement:
    """Closeness to the window centre."""

    def test_values(self, settings):
        position = PositionMeasurement(settings, window_length=100)
        assert position.best_offset == 45
        assert position.compute_at("chr1", 45, 10) == pytest.approx(1.0)
        assert position.compute_at("chr1", 145, 10) == pytest.approx(1.0)
        assert position.compute_at("chr1", 0, 10) == pytest.approx(1 - 45 / 55)
        assert position.score(0.5) == 0.5

    def test_undefined_window(self, settings):
        with pytest.raises(ConfigurationError):
            PositionMeasurement(settings).best_offset


class TestFrom5PrimeORFMeasurement:
    """Strand-aware distance inside a region."""

    def test_watson_and_crick(self, settings, lookup):
        distance = From5PrimeORFMeasurement(settings, lookup=lookup)
        # Watson [0,100]: oligo end to region end.
        assert distance.compute_at("chr1", 10, 10) == 80
        # Crick [200,300]: region start to oligo start.
        assert distance.compute_at("chr1", 210, 10) == 10
        assert distance.compute_at("chr1", 150, 10) == -1

    def test_score(self, settings, lookup):
        distance = From5PrimeORFMeasurement(settings, lookup=lookup)
        assert distance.score(0) == pytest.approx(1.0)
        assert distance.score(1000) == pytest.approx(0.5)
        assert distance.score(-1) == 0.0
        assert distance.score(None) == 0.0
        distance.set_property("maxposwithout0score", "100")
        assert distance.score(50) == pytest.approx(0.5)

    def test_invalid_maximum(self, settings, lookup):
        distance = From5PrimeORFMeasurement(settings, lookup=lookup)
        distance.set_property("maxposwithout0score", "0")
        with pytest.raises(ConfigurationError):
            distance.score(10)


class TestZoneSelector:
    """Best oligo per region."""

    def test_selects_one_oligo_per_region(self, settings, weights, records, lookup):
        selector = ZoneSelector(settings, lookup=lookup, weights=weights)
        selections = list(selector.select(records))

        assert [s.record.id for s in selections] == [1, 4]
        second = selections[1].record
        assert second.value("ORF") == "B chr1 [200,300]C"
        assert second.value("FromStartORF") == 10
        assert second.value("FromEndORF") == 80
        assert selector.stats.ineligible == 1

    def test_out_of_region_records_are_not_scored(self, settings, weights, records, lookup):
        selector = ZoneSelector(settings, lookup=lookup, weights=weights)
        assert selector.enrich(records[2]).value("GlobalScore") is None
        assert selector.enrich(records[0]).value("GlobalScore") == pytest.approx(1.0)

    def test_distance_to_five_prime_end_can_be_weighted(self, settings, records, lookup):
        weights = WeightAssignment.from_mapping({"From5PrimeORF": {"weight": 1.0, "MaxPosWithout0Score": 100}})
        selector = ZoneSelector(settings, lookup=lookup, weights=weights)
        selections = list(selector.select(records))

        assert [s.record.id for s in selections] == [2, 4]
        assert [s.record.value("From5PrimeORF") for s in selections] == [70, 10]
        assert selections[0].record.value("GlobalScore") == pytest.approx(0.3)
        assert selections[1].record.value("GlobalScore") == pytest.approx(0.9)

    def test_regions_file(self, tmp_path, settings, weights, records):
        path = tmp_path / "orfs.tsv"
        path.write_text("A\tchr1\t1\t101\tW\n", encoding="utf-8")
        selector = selector_from_name(
            "zone", settings, regions_file=path, regions_start1="true", weights=weights
        )
        selections = list(selector.select(records))
        assert [s.label for s in selections] == ["A chr1 [0,100]W"]

    def test_regions_required(self, settings):
        with pytest.raises(ConfigurationError):
            ZoneSelector(settings)


class TestTilingZoneSelector:
    """Tiling restricted to regions."""

    def test_only_oligos_in_regions_compete(self, settings, weights, records, lookup):
        selector = TilingZoneSelector(settings, window_length=100, lookup=lookup, weights=weights)
        selections = list(selector.select(records))

        assert [s.record.id for s in selections] == [1, 4]
        assert selector.stats.ineligible == 1
        assert selector.stats.empty_windows == 0
        assert selections[0].record.value("ORF") == "A chr1 [0,100]W"

    def test_out_of_region_records_are_not_scored(self, settings, weights, records, lookup):
        selector = TilingZoneSelector(settings, window_length=100, lookup=lookup, weights=weights)
        assert selector.enrich(records[2]).value("GlobalScore") is None
        assert selector.enrich(records[3]).value("GlobalScore") == pytest.approx(1.0)


class TestSelectorRegistry:
    """Name-based selector creation."""

    def test_available(self):
        assert available_selectors() == ["tiling", "zone", "tilingzone"]

    def test_from_name(self, settings):
        selector = selector_from_name("Tiling", settings, window_length=50, window_step=25)
        assert isinstance(selector, TilingSelector)
        assert selector.geometry.stride == 25

    def test_unknown_selector(self, settings):
        with pytest.raises(ConfigurationError):
            selector_from_name("random", settings)

    def test_invalid_parameters(self, settings):
        with pytest.raises(ConfigurationError):
            selector_from_name("tiling", settings, window_length=50, bogus=1)
        with pytest.raises(ConfigurationError):
            selector_from_name("tiling", settings, window_length="wide")

    def test_enrich_checks_width(self, settings, make_source_record):
        selector = TilingSelector(settings, window_length=100)
        selector.prepare(make_source_record(1, "chr1", 0, 0.5).measurements)
        with pytest.raises(DataIntegrityError):
            selector.enrich(SequenceMeasurements([ChromosomeMeasurement(settings)], ["chr1"]))
