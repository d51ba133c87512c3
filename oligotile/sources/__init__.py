"""Candidate sources."""

from .tiling import FastaTilingSource

__all__ = ["FastaTilingSource"]
