"""Exception types raised by oligotile.

I/O failures are not wrapped: ``OSError`` propagates to the caller unchanged.
Empty selection windows are not exceptions at all; they are logged.
"""

from __future__ import annotations


class OligotileError(Exception):
    """Base class for errors raised by the package."""


class ConfigurationError(OligotileError, ValueError):
    """Invalid or missing run configuration (window geometry, plugin names...)."""


class DataIntegrityError(OligotileError, ValueError):
    """A measurement stream does not match the expected schema."""


__all__ = ["OligotileError", "ConfigurationError", "DataIntegrityError"]
