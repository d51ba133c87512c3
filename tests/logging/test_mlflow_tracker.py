"""Tests for MLflow design run tracking."""

import tempfile
from pathlib import Path

import mlflow

from oligotile.logging import DesignTracker
from oligotile.selection import SelectionStats


class TestDesignTracker:
    """Design tracker tests."""

    def test_initialization(self):
        """Test DesignTracker initialization."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tracker = DesignTracker(
                experiment_name="test_exp",
                tracking_uri=str(Path(tmpdir) / "mlruns"),
            )
            assert tracker.experiment_name == "test_exp"
            assert mlflow.get_experiment_by_name("test_exp") is not None

    def test_existing_experiment_reused(self):
        """A second tracker attaches to the existing experiment."""
        with tempfile.TemporaryDirectory() as tmpdir:
            uri = str(Path(tmpdir) / "mlruns")
            first = DesignTracker(experiment_name="test_exp", tracking_uri=uri)
            second = DesignTracker(experiment_name="test_exp", tracking_uri=uri)
            assert first.experiment_id == second.experiment_id

    def test_log_phase_and_selection(self):
        """Phase counters are logged as prefixed metrics."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tracker = DesignTracker(
                experiment_name="test_exp",
                tracking_uri=str(Path(tmpdir) / "mlruns"),
            )
            tracker.start_run("test_run")
            run_id = mlflow.active_run().info.run_id
            tracker.log_params({"oligo_length": 60, "selector": "tiling"})
            tracker.log_phase("measurements", {"generated": 100, "rejected": 3})
            tracker.log_selection(SelectionStats(windows=10, selected=9, empty_windows=1))
            tracker.end_run()

            run = mlflow.get_run(run_id)
            assert run.data.metrics["measurements_generated"] == 100.0
            assert run.data.metrics["selection_selected"] == 9.0
            assert run.data.metrics["selection_empty_windows"] == 1.0
            assert run.data.params["selector"] == "tiling"

    def test_log_artifacts(self):
        """JSON summaries and files are attached to the run."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tracker = DesignTracker(
                experiment_name="test_exp",
                tracking_uri=str(Path(tmpdir) / "mlruns"),
            )
            stats_file = Path(tmpdir) / "oligos.filtered.stats.txt"
            stats_file.write_text("\tGC\nmedian\t0.5\n", encoding="utf-8")

            tracker.start_run("test_run")
            run_id = mlflow.active_run().info.run_id
            tracker.log_artifact_json({"counts": {"generated": 10}})
            tracker.log_artifact_file(stats_file)
            tracker.end_run()

            names = {artifact.path for artifact in mlflow.MlflowClient().list_artifacts(run_id)}
            assert names == {"summary.json", "oligos.filtered.stats.txt"}
