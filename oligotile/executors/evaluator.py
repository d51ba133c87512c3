"""Evaluator computing every measurement of a run for a batch of oligos."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from oligotile.core.candidate import Oligo
from oligotile.measurements.base import BaseMeasurement, Value


@dataclass(slots=True)
class MeasurementEvaluator:
    measurements: Sequence[BaseMeasurement]

    @property
    def parallel_safe(self) -> bool:
        return all(m.parallel_safe for m in self.measurements)

    def evaluate_batch(self, oligos: list[Oligo]) -> list[list[Value]]:
        return [[m.compute(oligo) for m in self.measurements] for oligo in oligos]
