"""Thread pool executor for measurement computation.

Each call to :meth:`LocalPoolExecutor.run` splits the oligos into sub-batches
of ``batch_size`` and hands them to a bounded pool of worker threads. Rows
come back in input order whatever order the workers finish in.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field

from oligotile.core.candidate import Oligo
from oligotile.executors.interfaces import Evaluator
from oligotile.measurements.base import Value


def _split(oligos: Sequence[Oligo], size: int) -> list[list[Oligo]]:
    return [list(oligos[i : i + size]) for i in range(0, len(oligos), size)]


@dataclass(slots=True)
class LocalPoolExecutor:
    """Order-preserving thread pool.

    Parameters
    ----------
    evaluator : Evaluator
        Evaluator called from the worker threads; must be thread safe.
    num_workers : int
        Upper bound on concurrent worker threads.
    batch_size : int
        Oligos per submitted task. Keep it below the size of the batches
        passed to :meth:`run` so that every worker gets a share.
    """

    evaluator: Evaluator
    num_workers: int = 4
    batch_size: int = 256
    _pool: ThreadPoolExecutor | None = field(default=None, init=False, repr=False)

    def prepare(self) -> None:
        """Start the worker threads; :meth:`run` calls it when needed."""
        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=max(1, self.num_workers), thread_name_prefix="oligotile-measure"
            )

    def run(
        self,
        oligos: Sequence[Oligo],
        *,
        timeout_s: float | None = None,
        batch_size: int | None = None,
    ) -> list[list[Value]]:
        """Evaluate oligos on the pool and return rows in input order."""
        if not oligos:
            return []
        self.prepare()
        assert self._pool is not None

        tasks = _split(oligos, batch_size or self.batch_size)
        deadline = None if timeout_s is None else time.perf_counter() + timeout_s
        futures: list[Future] = [self._pool.submit(self.evaluator.evaluate_batch, task) for task in tasks]

        rows: list[list[Value]] = []
        try:
            for task, future in zip(tasks, futures):
                remaining = None if deadline is None else max(0.0, deadline - time.perf_counter())
                try:
                    task_rows = future.result(timeout=remaining)
                except TimeoutError:
                    raise
                except Exception as exc:
                    raise RuntimeError("Measurement task failed") from exc
                if len(task_rows) != len(task):
                    msg = f"Evaluator returned {len(task_rows)} rows for {len(task)} oligos"
                    raise RuntimeError(msg)
                rows.extend(task_rows)
        except BaseException:
            for future in futures:
                future.cancel()
            raise
        return rows

    def close(self) -> None:
        """Stop the worker threads without waiting for abandoned tasks."""
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None
