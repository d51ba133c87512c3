"""Executors computing measurements for batches of oligos."""

from .evaluator import MeasurementEvaluator
from .factory import build_executor
from .interfaces import Evaluator, Executor
from .local import LocalExecutor
from .pool import LocalPoolExecutor

__all__ = [
    "Evaluator",
    "Executor",
    "MeasurementEvaluator",
    "LocalExecutor",
    "LocalPoolExecutor",
    "build_executor",
]
