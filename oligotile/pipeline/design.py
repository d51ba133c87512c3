"""Design pipeline: candidates to selected oligos.

Three phases, each producing files in the output directory:

1. tiling the genome, sequence filtering and measurement computation
   (measurement stream and its statistics);
2. measurement filtering (filtered stream and the statistics used for
   scoring);
3. selection and output writing.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import islice
from pathlib import Path
from typing import Final

from oligotile.core.candidate import Oligo
from oligotile.core.settings import DesignSettings
from oligotile.executors.factory import build_executor
from oligotile.filters.measurement import MeasurementFilter, measurement_filter_from_name
from oligotile.filters.sequence import SequenceFilter, sequence_filter_from_name
from oligotile.logging.mlflow_tracker import DesignTracker
from oligotile.measurements.base import BaseMeasurement
from oligotile.measurements.registry import MeasurementRegistry
from oligotile.pipeline.config import DesignConfig
from oligotile.selection.engine import SelectionStats
from oligotile.selection.record import SequenceMeasurements
from oligotile.selection.selectors import BaseSelector, selector_from_name
from oligotile.sources.tiling import FastaTilingSource
from oligotile.storage.measurements_io import SequenceMeasurementsReader, SequenceMeasurementsWriter
from oligotile.storage.outputs import OutputRegistry, SelectionOutput, output_from_name
from oligotile.storage.stats_io import write_statistics
from oligotile.utils import get_logger, log_phase

_LOGGER = get_logger("pipeline")

MEASUREMENTS_FILE: Final = "oligos.measurements.txt"
MEASUREMENTS_STATS_FILE: Final = "oligos.measurements.stats.txt"
FILTERED_FILE: Final = "oligos.filtered.txt"
FILTERED_STATS_FILE: Final = "oligos.filtered.stats.txt"
SELECTED_PREFIX: Final = "oligos.selected"


@dataclass(slots=True)
class DesignResult:
    """Files and counters produced by a design run."""

    measurements_file: Path
    measurements_stats_file: Path
    filtered_file: Path
    stats_file: Path
    outputs: dict[str, Path] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)
    selection: SelectionStats = field(default_factory=SelectionStats)


def _batched(items: Iterable[Oligo], size: int) -> Iterator[list[Oligo]]:
    iterator = iter(items)
    while batch := list(islice(iterator, size)):
        yield batch


class DesignPipeline:
    """Run the phases of a design described by a :class:`DesignConfig`.

    Parameters
    ----------
    config : DesignConfig
        Validated configuration.
    tracker : DesignTracker | None
        Run tracker. When omitted and tracking is enabled in the config, one
        is created from the config.
    """

    def __init__(self, config: DesignConfig, *, tracker: DesignTracker | None = None) -> None:
        self.config = config
        self.settings: DesignSettings = config.settings()
        self.output_dir = self.settings.output_dir
        if tracker is None and config.tracking.enabled:
            tracker = DesignTracker(config.tracking.experiment_name, config.tracking.tracking_uri)
        self.tracker = tracker
        self.measurements = self.build_measurements()
        self.sequence_filters: list[SequenceFilter] = [
            sequence_filter_from_name(p.name, **p.params) for p in config.sequence_filters
        ]
        self.measurement_filters: list[MeasurementFilter] = [
            measurement_filter_from_name(p.name, self.settings, **p.params) for p in config.measurement_filters
        ]

    def build_measurements(self) -> list[BaseMeasurement]:
        return [MeasurementRegistry.create(p.name, self.settings, **p.params) for p in self.config.measurements]

    def build_selector(self, stats_file: Path) -> BaseSelector:
        selector = self.config.selector
        return selector_from_name(
            selector.name,
            self.settings,
            weights=self.config.weights,
            stats_file=stats_file,
            **selector.params,
        )

    def _path(self, name: str) -> Path:
        return self.output_dir / name

    def _accept(self, oligo: Oligo) -> bool:
        return all(f.accept(oligo) for f in self.sequence_filters)

    def compute_measurements(self) -> dict[str, int]:
        """Phase 1: tile the genome, filter candidates, compute and write measurements."""
        source = FastaTilingSource(self.config.genome, self.settings, step=self.config.oligo_step)
        executor = build_executor(self.measurements, self.settings)
        executor.prepare()
        record = SequenceMeasurements(self.measurements)
        for measurement in self.measurements:
            measurement.clear()

        generated = rejected = 0
        try:
            with SequenceMeasurementsWriter(self._path(MEASUREMENTS_FILE), self.measurements) as writer:
                for batch in _batched(source, self.settings.batch_size):
                    generated += len(batch)
                    kept = [oligo for oligo in batch if self._accept(oligo)]
                    rejected += len(batch) - len(kept)
                    rows = executor.run(kept)
                    for oligo, row in zip(kept, rows):
                        record.set_values(row)
                        record.set_id(oligo.id)
                        record.record_samples()
                        writer.write(record)
        finally:
            executor.close()

        write_statistics(self._path(MEASUREMENTS_STATS_FILE), self.measurements)
        counts = {"generated": generated, "rejected": rejected, "measured": generated - rejected}
        _LOGGER.info(
            "Measurements computed for %d oligos (%d generated, %d rejected by sequence filters)",
            counts["measured"],
            generated,
            rejected,
        )
        return counts

    def filter_measurements(self) -> dict[str, int]:
        """Phase 2: apply measurement filters and compute the scoring statistics."""
        for measurement in self.measurements:
            measurement.clear()

        read = kept = 0
        with SequenceMeasurementsReader(
            self._path(MEASUREMENTS_FILE), self.measurements, settings=self.settings
        ) as reader, SequenceMeasurementsWriter(self._path(FILTERED_FILE), reader.measurements) as writer:
            for record in reader:
                read += 1
                if all(f.accept(record) for f in self.measurement_filters):
                    record.record_samples()
                    writer.write(record)
                    kept += 1

        write_statistics(self._path(FILTERED_STATS_FILE), self.measurements)
        _LOGGER.info("Measurement filters kept %d of %d oligos", kept, read)
        return {"read": read, "kept": kept, "filtered": read - kept}

    def select(self) -> tuple[dict[str, Path], SelectionStats]:
        """Phase 3: select the best oligos and write every configured output."""
        selector = self.build_selector(self._path(FILTERED_STATS_FILE))
        paths: dict[str, Path] = {}
        outputs: list[SelectionOutput] = []
        try:
            with SequenceMeasurementsReader(
                self._path(FILTERED_FILE), self.measurements, settings=self.settings
            ) as reader:
                selector.prepare(reader.measurements)
                for name in self.config.outputs:
                    path = self._path(SELECTED_PREFIX + OutputRegistry.get(name).extension)
                    outputs.append(output_from_name(name, path, selector.measurements, self.settings))
                    paths[name] = path
                for selection in selector.select(reader):
                    for output in outputs:
                        output.write(selection)
        finally:
            for output in outputs:
                output.close()

        stats = selector.stats
        _LOGGER.info(
            "Selected %d oligos in %d windows (%d empty, %d skipped)",
            stats.selected,
            stats.windows,
            stats.empty_windows,
            stats.skipped_windows,
        )
        return paths, stats

    def run(self) -> DesignResult:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        tracker = self.tracker
        if tracker is not None:
            tracker.start_run(self.config.tracking.run_name)
        try:
            if tracker is not None:
                tracker.log_params(self.config.to_params())

            measured = self.compute_measurements()
            log_phase(_LOGGER, "measurements", measured)
            if tracker is not None:
                tracker.log_phase("measurements", measured)

            filtered = self.filter_measurements()
            log_phase(_LOGGER, "filters", filtered)
            if tracker is not None:
                tracker.log_phase("filters", filtered)

            outputs, stats = self.select()
            log_phase(_LOGGER, "selection", stats.as_dict())
            result = DesignResult(
                measurements_file=self._path(MEASUREMENTS_FILE),
                measurements_stats_file=self._path(MEASUREMENTS_STATS_FILE),
                filtered_file=self._path(FILTERED_FILE),
                stats_file=self._path(FILTERED_STATS_FILE),
                outputs=outputs,
                counts={**measured, **{f"filter_{k}": v for k, v in filtered.items()}},
                selection=stats,
            )

            if tracker is not None:
                tracker.log_selection(stats)
                tracker.log_artifact_file(result.stats_file)
                for path in outputs.values():
                    tracker.log_artifact_file(path)
                tracker.log_artifact_json({"counts": result.counts, "selection": stats.as_dict()})
            return result
        finally:
            if tracker is not None:
                tracker.end_run()


def run_design(config: DesignConfig, *, tracker: DesignTracker | None = None) -> DesignResult:
    return DesignPipeline(config, tracker=tracker).run()
