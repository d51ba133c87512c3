"""Statistics files.

The first line lists the measurement names after an empty cell. Each following
line holds one statistic (``median``, ``mean``, ``stddev``, ``n``, ``min``,
``max``, the histogram buckets, ``overflow``) for every measurement.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from oligotile.core.errors import DataIntegrityError
from oligotile.measurements.base import BaseMeasurement
from oligotile.storage.files import open_text

_LOGGER = logging.getLogger(__name__)

SEPARATOR = "\t"


def write_statistics(path: str | Path, measurements: Sequence[BaseMeasurement]) -> int:
    """Write the statistics of every measurement that has some. Returns the column count."""
    columns: list[tuple[str, dict[str, str]]] = []
    for measurement in measurements:
        stats = measurement.statistics()
        if stats is not None:
            columns.append((measurement.name, stats))

    rows: list[str] = []
    for _, stats in columns:
        for key in stats:
            if key not in rows:
                rows.append(key)

    with open_text(path, "w") as handle:
        handle.write(SEPARATOR.join(["", *(name for name, _ in columns)]) + "\n")
        for key in rows:
            handle.write(SEPARATOR.join([key, *(stats.get(key, "") for _, stats in columns)]) + "\n")
    _LOGGER.debug("Statistics of %d measurements written to %s", len(columns), path)
    return len(columns)


def read_statistics(path: str | Path, measurements: Sequence[BaseMeasurement]) -> int:
    """Apply a statistics file to ``measurements`` as properties.

    Columns naming unknown measurements are ignored. Returns the number of
    measurements updated.
    """
    by_name = {m.name.lower(): m for m in measurements}
    with open_text(path, "r") as handle:
        header = handle.readline().rstrip("\r\n").split(SEPARATOR)
        targets = [by_name.get(name.lower()) for name in header[1:]]
        for lineno, line in enumerate(handle, start=2):
            line = line.rstrip("\r\n")
            if not line:
                continue
            fields = line.split(SEPARATOR)
            if len(fields) > len(header):
                msg = f"{path}:{lineno}: expected at most {len(header)} fields, got {len(fields)}"
                raise DataIntegrityError(msg)
            key = fields[0]
            for measurement, text in zip(targets, fields[1:]):
                if measurement is not None and text != "":
                    measurement.set_property(key, text)

    ignored = [name for name, target in zip(header[1:], targets) if target is None]
    if ignored:
        _LOGGER.debug("Ignoring statistics of unknown measurements: %s", ", ".join(ignored))
    return sum(1 for target in targets if target is not None)


__all__ = ["write_statistics", "read_statistics"]
