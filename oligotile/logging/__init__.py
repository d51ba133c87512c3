"""Run tracking."""

from .mlflow_tracker import DesignTracker

__all__ = ["DesignTracker"]
