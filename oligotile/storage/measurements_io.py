"""Tab-separated measurement streams.

Header line ``Id<TAB>name1<TAB>name2...`` followed by one line per candidate,
``<id><TAB>value1<TAB>value2...``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from types import TracebackType
from typing import IO

import pandas as pd

from oligotile.core.errors import ConfigurationError, DataIntegrityError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.base import BaseMeasurement, ValueKind
from oligotile.measurements.registry import MeasurementRegistry
from oligotile.selection.record import SequenceMeasurements
from oligotile.storage.files import open_text

_LOGGER = logging.getLogger(__name__)

ID_COLUMN = "Id"
SEPARATOR = "\t"

_PANDAS_DTYPES = {
    ValueKind.FLOAT: "float64",
    ValueKind.INTEGER: "Int64",
    ValueKind.STRING: "string",
}


class SequenceMeasurementsWriter:
    """Write records to a measurement stream. Usable as a context manager."""

    def __init__(self, path: str | Path, measurements: Sequence[BaseMeasurement]) -> None:
        self.path = Path(path)
        self.measurements = tuple(measurements)
        self.count = 0
        self._handle: IO[str] = open_text(self.path, "w")
        self._handle.write(SEPARATOR.join([ID_COLUMN, *(m.name for m in self.measurements)]) + "\n")

    def write(self, record: SequenceMeasurements) -> None:
        if len(record) != len(self.measurements):
            msg = f"Record has {len(record)} values, stream has {len(self.measurements)} columns"
            raise DataIntegrityError(msg)
        self._handle.write(SEPARATOR.join([str(record.id), *record.formatted()]) + "\n")
        self.count += 1

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> SequenceMeasurementsWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _resolve_measurements(
    names: Sequence[str],
    measurements: Sequence[BaseMeasurement] | None,
    settings: DesignSettings | None,
) -> list[BaseMeasurement]:
    provided = {m.name.lower(): m for m in measurements or ()}
    resolved: list[BaseMeasurement] = []
    for name in names:
        measurement = provided.get(name.lower())
        if measurement is None:
            try:
                measurement = MeasurementRegistry.create(name, settings)
            except ConfigurationError as exc:
                msg = f"Unknown measurement in header: {name}"
                raise DataIntegrityError(msg) from exc
        resolved.append(measurement)
    return resolved


class SequenceMeasurementsReader:
    """Iterate over a measurement stream.

    The same :class:`SequenceMeasurements` instance is returned for every line;
    its values are replaced on each step. Copy a record to keep it.

    Header names are matched against ``measurements`` first, then created from
    the :class:`MeasurementRegistry`.
    """

    def __init__(
        self,
        path: str | Path,
        measurements: Sequence[BaseMeasurement] | None = None,
        *,
        settings: DesignSettings | None = None,
    ) -> None:
        self.path = Path(path)
        self._handle: IO[str] = open_text(self.path, "r")
        header = self._handle.readline().rstrip("\r\n")
        fields = header.split(SEPARATOR) if header else []
        if not fields or fields[0] != ID_COLUMN:
            self._handle.close()
            msg = f"{self.path}: missing '{ID_COLUMN}' header"
            raise DataIntegrityError(msg)
        try:
            self.measurements = tuple(_resolve_measurements(fields[1:], measurements, settings))
        except DataIntegrityError:
            self._handle.close()
            raise
        self.record = SequenceMeasurements(self.measurements)
        self._lineno = 1

    def __iter__(self) -> Iterator[SequenceMeasurements]:
        width = len(self.measurements) + 1
        record = self.record
        for line in self._handle:
            self._lineno += 1
            line = line.rstrip("\r\n")
            if not line:
                continue
            fields = line.split(SEPARATOR)
            if len(fields) != width:
                msg = f"{self.path}:{self._lineno}: expected {width} fields, got {len(fields)}"
                raise DataIntegrityError(msg)
            try:
                record.set_id(int(fields[0]))
                record.set_values(m.parse(text) for m, text in zip(self.measurements, fields[1:]))
            except (DataIntegrityError, ValueError) as exc:
                msg = f"{self.path}:{self._lineno}: {exc}"
                raise DataIntegrityError(msg) from exc
            yield record

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    def __enter__(self) -> SequenceMeasurementsReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def read_measurements_frame(path: str | Path) -> pd.DataFrame:
    """Load a measurement stream into a DataFrame indexed by ``Id``.

    Column dtypes follow the value kind of each registered measurement; columns
    of unregistered measurements are read as strings.
    """
    with open_text(path, "r") as handle:
        header = handle.readline().rstrip("\r\n").split(SEPARATOR)
    if not header or header[0] != ID_COLUMN:
        msg = f"{path}: missing '{ID_COLUMN}' header"
        raise DataIntegrityError(msg)

    dtypes: dict[str, str] = {ID_COLUMN: "int64"}
    na_values: dict[str, list[str]] = {}
    for name in header[1:]:
        kind = MeasurementRegistry.kind_of(name) if MeasurementRegistry.contains(name) else ValueKind.STRING
        dtypes[name] = _PANDAS_DTYPES[kind]
        if kind is not ValueKind.STRING:
            na_values[name] = [""]

    frame = pd.read_csv(
        path,
        sep=SEPARATOR,
        dtype=dtypes,
        keep_default_na=False,
        na_values=na_values,
        compression="infer",
    )
    return frame.set_index(ID_COLUMN)


__all__ = [
    "ID_COLUMN",
    "SequenceMeasurementsWriter",
    "SequenceMeasurementsReader",
    "read_measurements_frame",
]
