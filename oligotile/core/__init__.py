"""Core primitives shared by every layer of oligotile."""

from .candidate import Oligo
from .errors import ConfigurationError, DataIntegrityError, OligotileError
from .settings import DesignSettings

__all__ = [
    "Oligo",
    "DesignSettings",
    "OligotileError",
    "ConfigurationError",
    "DataIntegrityError",
]
