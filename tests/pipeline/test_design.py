"""End-to-end design runs on a small genome."""

from __future__ import annotations

import logging

import mlflow
import pytest
from Bio import SeqIO

from oligotile.logging import DesignTracker
from oligotile.pipeline import DesignConfig, DesignPipeline, run_design
from oligotile.pipeline.design import FILTERED_FILE, MEASUREMENTS_FILE
from oligotile.storage import read_measurements_frame


def _config(genome_file, output_dir, **overrides) -> DesignConfig:
    data = {
        "genome": str(genome_file),
        "output_dir": str(output_dir),
        "oligo_length": 10,
        "oligo_step": 5,
        "measurements": [
            "chromosome",
            "oligostart",
            "oligolength",
            "oligoname",
            "oligosequence",
            "gc",
            "complexity",
        ],
        "sequence_filters": ["xn"],
        "measurement_filters": [{"name": "floatrange", "params": {"measurement": "GC", "min": 0.0, "max": 1.0}}],
        "selector": {"name": "tiling", "params": {"window_length": 40}},
        "weights": {"GC": 0.5, "Complexity": 0.5},
        "outputs": ["default", "fasta", "gff"],
    }
    data.update(overrides)
    return DesignConfig.from_dict(data)


class TestDesignPipeline:
    """Full runs: tiling, measurement, filtering and selection."""

    def test_run(self, genome_file, tmp_path):
        result = run_design(_config(genome_file, tmp_path / "design"))

        assert result.counts["generated"] == 29
        assert result.counts["rejected"] == 2
        assert result.counts["measured"] == 27
        assert result.counts["filter_kept"] == 27
        assert result.selection.selected == 4
        assert result.selection.windows == 4
        assert result.selection.empty_windows == 0

        frame = read_measurements_frame(result.measurements_file)
        assert len(frame) == 27
        assert set(frame["Chromosome"]) == {"chr1", "chr2"}
        assert result.stats_file.exists()

        fasta = list(SeqIO.parse(result.outputs["fasta"], "fasta"))
        assert len(fasta) == 4
        assert all(len(record.seq) == 10 for record in fasta)
        assert all("N" not in str(record.seq) for record in fasta)

        gff = result.outputs["gff"].read_text(encoding="utf-8").splitlines()
        assert len(gff) == 5
        selected = result.outputs["default"].read_text(encoding="utf-8").splitlines()
        assert selected[0].split("\t")[-3:] == ["Position", "TilingZone", "GlobalScore"]
        assert len(selected) == 5

    def test_phases_are_logged(self, genome_file, tmp_path, caplog):
        with caplog.at_level(logging.INFO, logger="oligotile.pipeline"):
            run_design(_config(genome_file, tmp_path / "design"))

        assert "Phase measurements done: generated=29, rejected=2, measured=27" in caplog.text
        assert "Phase filters done: read=27, kept=27, filtered=0" in caplog.text
        assert "Phase selection done:" in caplog.text

    def test_measurement_filter_phase(self, genome_file, tmp_path):
        config = _config(
            genome_file,
            tmp_path,
            measurement_filters=[{"name": "floatrange", "params": {"measurement": "GC", "min": 0.5, "max": 1.0}}],
        )
        pipeline = DesignPipeline(config)
        measured = pipeline.compute_measurements()
        filtered = pipeline.filter_measurements()

        assert measured["measured"] == filtered["read"]
        frame = read_measurements_frame(tmp_path / FILTERED_FILE)
        assert (frame["GC"] >= 0.5).all()
        assert filtered["kept"] == len(frame)
        assert filtered["filtered"] == filtered["read"] - filtered["kept"]

    def test_thread_pool_matches_sequential(self, genome_file, tmp_path):
        sequential = run_design(_config(genome_file, tmp_path / "seq", workers=1))
        pooled = run_design(_config(genome_file, tmp_path / "pool", workers=3, batch_size=4))

        assert (tmp_path / "seq" / MEASUREMENTS_FILE).read_text() == (tmp_path / "pool" / MEASUREMENTS_FILE).read_text()
        assert sequential.outputs["default"].read_text() == pooled.outputs["default"].read_text()

    def test_zone_selection(self, genome_file, tmp_path):
        regions = tmp_path / "orfs.tsv"
        regions.write_text("G1\tchr1\t1\t40\tW\nG2\tchr2\t1\t20\tC\n", encoding="utf-8")
        config = _config(
            genome_file,
            tmp_path / "zone",
            start1=True,
            selector={"name": "zone", "params": {"regions_file": str(regions), "regions_start1": True}},
        )
        result = run_design(config)

        assert result.selection.selected == 2
        gff = result.outputs["gff"].read_text(encoding="utf-8").splitlines()[1:]
        assert [line.split("\t")[6] for line in gff] == ["+", "-"]

    def test_tracking(self, genome_file, tmp_path):
        tracker = DesignTracker(experiment_name="pipeline_test", tracking_uri=str(tmp_path / "mlruns"))
        result = run_design(_config(genome_file, tmp_path / "design"), tracker=tracker)

        runs = mlflow.search_runs(experiment_ids=[tracker.experiment_id])
        assert len(runs) == 1
        assert runs.loc[0, "metrics.selection_selected"] == pytest.approx(result.selection.selected)
        assert runs.loc[0, "metrics.measurements_rejected"] == pytest.approx(2)
        assert runs.loc[0, "params.selector"] == "tiling"
