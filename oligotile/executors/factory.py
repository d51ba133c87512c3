"""Executor selection for a measurement phase."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from oligotile.core.settings import DesignSettings
from oligotile.executors.evaluator import MeasurementEvaluator
from oligotile.executors.interfaces import Executor
from oligotile.executors.local import LocalExecutor
from oligotile.executors.pool import LocalPoolExecutor
from oligotile.measurements.base import BaseMeasurement

_LOGGER = logging.getLogger(__name__)


def build_executor(measurements: Sequence[BaseMeasurement], settings: DesignSettings) -> Executor:
    """Pool executor unless one worker is requested or a measurement is not thread safe."""
    evaluator = MeasurementEvaluator(measurements)
    if settings.max_workers <= 1:
        return LocalExecutor(evaluator, batch_size=settings.batch_size)
    if not evaluator.parallel_safe:
        unsafe = [m.name for m in measurements if not m.parallel_safe]
        _LOGGER.info("Sequential measurement computation (not thread safe: %s)", ", ".join(unsafe))
        return LocalExecutor(evaluator, batch_size=settings.batch_size)
    # One share of each pipeline batch per worker.
    share = math.ceil(settings.batch_size / settings.max_workers)
    return LocalPoolExecutor(evaluator, num_workers=settings.max_workers, batch_size=share)
