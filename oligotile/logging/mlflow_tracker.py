"""MLflow integration for design run tracking.

Records the parameters of a design run, the candidate counts of each phase,
the selection statistics and the produced files.
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import mlflow

from oligotile.selection.engine import SelectionStats


class DesignTracker:
    """Track design runs with MLflow.

    Parameters
    ----------
    experiment_name : str
        Name of the MLflow experiment.
    tracking_uri : str | None
        MLflow tracking server URI (default: local filesystem).
    """

    def __init__(
        self,
        experiment_name: str = "oligotile-design",
        tracking_uri: str | None = None,
    ) -> None:
        self.experiment_name = experiment_name
        self.tracking_uri = tracking_uri or "./mlruns"

        mlflow.set_tracking_uri(self.tracking_uri)

        try:
            self.experiment_id = mlflow.create_experiment(experiment_name)
        except mlflow.exceptions.MlflowException:
            # Experiment already exists
            experiment = mlflow.get_experiment_by_name(experiment_name)
            self.experiment_id = experiment.experiment_id

    def start_run(self, run_name: str | None = None) -> None:
        mlflow.set_experiment(self.experiment_name)
        mlflow.start_run(run_name=run_name)

    def end_run(self) -> None:
        mlflow.end_run()

    def log_params(self, params: Mapping[str, Any]) -> None:
        """Log design parameters. Values are stringified by MLflow."""
        if params:
            mlflow.log_params(dict(params))

    def log_phase(self, phase: str, counts: Mapping[str, int | float]) -> None:
        """Log the counters of one phase as ``<phase>_<counter>`` metrics."""
        mlflow.log_metrics({f"{phase}_{key}": float(value) for key, value in counts.items()})

    def log_selection(self, stats: SelectionStats) -> None:
        self.log_phase("selection", stats.as_dict())

    def log_artifact_json(self, data: dict[str, Any], filename: str = "summary.json") -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / filename
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            mlflow.log_artifact(str(path))

    def log_artifact_file(self, filepath: Path | str) -> None:
        mlflow.log_artifact(str(filepath))
