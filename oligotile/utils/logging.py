"""Centralized logging helpers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Final

_LOGGER_NAME: Final = "oligotile"


def get_logger(component: str | None = None, *, level: int = logging.INFO) -> logging.Logger:
    """Return the package logger (or one of its components) with a console handler.

    The handler is attached once; later calls only return the logger.
    """
    name = f"{_LOGGER_NAME}.{component}" if component else _LOGGER_NAME
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger


def log_phase(logger: logging.Logger, phase: str, counts: Mapping[str, int]) -> None:
    """One INFO line per design phase, counters in insertion order."""
    summary = ", ".join(f"{key}={value}" for key, value in counts.items())
    logger.info("Phase %s done: %s", phase, summary or "nothing counted")
