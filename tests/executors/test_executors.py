"""Tests for the measurement executors."""

from __future__ import annotations

import threading
import time

import pytest

from oligotile.core import DesignSettings, Oligo
from oligotile.executors import LocalExecutor, LocalPoolExecutor, MeasurementEvaluator, build_executor
from oligotile.measurements import ChromosomeMeasurement, GCMeasurement, OligoStartMeasurement, UnicityMeasurement


class _FailingEvaluator:
    def evaluate_batch(self, oligos: list[Oligo]) -> list[list]:
        raise ValueError("boom")


class _SlowEvaluator:
    def __init__(self, delay_s: float) -> None:
        self._delay_s = delay_s

    def evaluate_batch(self, oligos: list[Oligo]) -> list[list]:
        time.sleep(self._delay_s)
        return [[oligo.id] for oligo in oligos]


def _make_oligos(n: int) -> list[Oligo]:
    return [Oligo(i, "chr1", i, 4, "GCAT" if i % 2 else "AAAA") for i in range(n)]


@pytest.fixture
def evaluator() -> MeasurementEvaluator:
    return MeasurementEvaluator([ChromosomeMeasurement(), OligoStartMeasurement(), GCMeasurement()])


def test_evaluator_rows(evaluator):
    rows = evaluator.evaluate_batch(_make_oligos(2))
    assert rows == [["chr1", 0, 0.0], ["chr1", 1, 0.5]]
    assert evaluator.parallel_safe


def test_local_executor_preserves_order(evaluator):
    rows = LocalExecutor(evaluator, batch_size=3).run(_make_oligos(10))
    assert [row[1] for row in rows] == list(range(10))


def test_local_executor_empty(evaluator):
    assert LocalExecutor(evaluator).run([]) == []


def test_thread_pool_preserves_order(evaluator):
    executor = LocalPoolExecutor(evaluator, num_workers=3, batch_size=2)
    try:
        rows = executor.run(_make_oligos(11))
    finally:
        executor.close()
    assert [row[1] for row in rows] == list(range(11))
    assert rows == LocalExecutor(evaluator).run(_make_oligos(11))


def test_pool_failure_is_wrapped():
    executor = LocalPoolExecutor(_FailingEvaluator(), num_workers=2, batch_size=1)
    with pytest.raises(RuntimeError, match="Measurement task failed"):
        executor.run(_make_oligos(3))
    executor.close()


def test_pool_timeout():
    executor = LocalPoolExecutor(_SlowEvaluator(0.5), num_workers=1, batch_size=1)
    with pytest.raises(TimeoutError):
        executor.run(_make_oligos(4), timeout_s=0.05)
    executor.close()


def test_build_executor_sequential_for_single_worker(evaluator):
    executor = build_executor(evaluator.measurements, DesignSettings(max_workers=1))
    assert isinstance(executor, LocalExecutor)


def test_build_executor_pool(evaluator):
    executor = build_executor(evaluator.measurements, DesignSettings(max_workers=4, batch_size=16))
    assert isinstance(executor, LocalPoolExecutor)
    assert executor.num_workers == 4
    assert executor.batch_size == 4


def test_build_executor_falls_back_for_unsafe_measurements(tmp_path):
    measurements = [ChromosomeMeasurement(), UnicityMeasurement(mup_dir=tmp_path)]
    executor = build_executor(measurements, DesignSettings(max_workers=4))
    assert isinstance(executor, LocalExecutor)


class _RecordingEvaluator:
    """Records the size and thread of every batch it evaluates."""

    def __init__(self) -> None:
        self.calls: list[tuple[int, str]] = []
        self._lock = threading.Lock()

    def evaluate_batch(self, oligos: list[Oligo]) -> list[list]:
        with self._lock:
            self.calls.append((len(oligos), threading.current_thread().name))
        return [[oligo.id] for oligo in oligos]


def test_build_executor_splits_batches_across_workers(evaluator):
    settings = DesignSettings(max_workers=4, batch_size=64)
    executor = build_executor(evaluator.measurements, settings)
    recorder = _RecordingEvaluator()
    executor.evaluator = recorder
    try:
        rows = executor.run(_make_oligos(64))
    finally:
        executor.close()

    assert [row[0] for row in rows] == list(range(64))
    assert sorted(size for size, _ in recorder.calls) == [16, 16, 16, 16]
    assert all(name.startswith("oligotile-measure") for _, name in recorder.calls)


def test_pool_reuses_threads_between_runs(evaluator):
    executor = LocalPoolExecutor(evaluator, num_workers=2, batch_size=2)
    executor.prepare()
    pool = executor._pool
    try:
        executor.run(_make_oligos(4))
        executor.run(_make_oligos(4))
        assert executor._pool is pool
    finally:
        executor.close()
    assert executor._pool is None
