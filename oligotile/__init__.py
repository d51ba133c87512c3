"""oligotile public interface (surfaces only).

Measurements live under ``oligotile.measurements``, selection under
``oligotile.selection`` and whole design runs under ``oligotile.pipeline``.
"""

from __future__ import annotations

from .core import ConfigurationError, DataIntegrityError, DesignSettings, Oligo, OligotileError
from .selection import SelectionEngine, SequenceMeasurements, WindowGeometry, selector_from_name

__all__ = [
    "Oligo",
    "DesignSettings",
    "OligotileError",
    "ConfigurationError",
    "DataIntegrityError",
    "SequenceMeasurements",
    "SelectionEngine",
    "WindowGeometry",
    "selector_from_name",
]

__version__ = "0.1.0"
