"""Sequential executor.

Evaluates batches one after the other in the calling thread. Used when a
single worker is requested or when a measurement cannot be shared between
threads.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass

from oligotile.core.candidate import Oligo
from oligotile.executors.interfaces import Evaluator
from oligotile.measurements.base import Value


@dataclass
class LocalExecutor:
    """Executor that runs an Evaluator in the calling thread.

    Parameters
    ----------
    evaluator : Evaluator
        Evaluator computing measurement rows.
    batch_size : int
        Mini-batch size handed to the evaluator.
    """

    evaluator: Evaluator
    batch_size: int = 1024

    def prepare(self) -> None:
        """No-op; kept for symmetry with the pool executor."""

    def run(
        self,
        oligos: Sequence[Oligo],
        *,
        timeout_s: float | None = None,
        batch_size: int | None = None,
    ) -> list[list[Value]]:
        """Evaluate oligos and return value rows in input order.

        ``timeout_s`` is checked between batches.
        """
        if not oligos:
            return []

        size = batch_size or self.batch_size
        deadline = None if timeout_s is None else time.perf_counter() + timeout_s
        rows: list[list[Value]] = []
        for start in range(0, len(oligos), size):
            if deadline is not None and time.perf_counter() > deadline:
                raise TimeoutError(f"Evaluation exceeded {timeout_s}s")
            rows.extend(self.evaluator.evaluate_batch(list(oligos[start : start + size])))
        return rows

    def close(self) -> None:
        """Optional cleanup hook."""
