"""Executor protocol surfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from oligotile.core.candidate import Oligo
from oligotile.measurements.base import Value


class Evaluator(Protocol):
    """Computes measurement values for a batch of oligos."""

    def evaluate_batch(self, oligos: list[Oligo]) -> list[list[Value]]:
        """Return one value row per oligo, in input order."""


class Executor(Protocol):
    """Runs an Evaluator over many oligos (sequentially or in parallel)."""

    def prepare(self) -> None:
        """Optional heavy initialization."""

    def run(
        self,
        oligos: Sequence[Oligo],
        *,
        timeout_s: float | None = None,
        batch_size: int | None = None,
    ) -> list[list[Value]]:
        """Evaluate oligos and return value rows in the same order."""

    def close(self) -> None:
        """Optional cleanup hook."""
