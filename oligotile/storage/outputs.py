"""Writers for selected oligos."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from types import TracebackType
from typing import IO, ClassVar

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from oligotile.core.errors import ConfigurationError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.base import BaseMeasurement
from oligotile.selection.engine import Selection
from oligotile.selection.record import SequenceMeasurements
from oligotile.storage.files import open_text
from oligotile.storage.measurements_io import SequenceMeasurementsWriter

_LOGGER = logging.getLogger(__name__)

GFF_SOURCE = "oligotile"
GFF_TYPE = "oligo"


def _require(measurements: Sequence[BaseMeasurement], output: str, *names: str) -> None:
    present = {m.name.lower() for m in measurements}
    missing = [name for name in names if name.lower() not in present]
    if missing:
        msg = f"Output {output} requires measurements: {', '.join(missing)}"
        raise ConfigurationError(msg)


def _global_score(record: SequenceMeasurements) -> float:
    if record.index_of("GlobalScore") >= 0:
        value = record.value("GlobalScore")
        if value is not None:
            return float(value)
    return record.score()


class SelectionOutput:
    """Base class of selection writers. Usable as a context manager."""

    name: ClassVar[str] = ""
    extension: ClassVar[str] = ".txt"

    def __init__(
        self,
        path: str | Path,
        measurements: Sequence[BaseMeasurement],
        settings: DesignSettings | None = None,
    ) -> None:
        self.path = Path(path)
        self.measurements = tuple(measurements)
        self.settings = settings or DesignSettings()
        self.count = 0

    def write(self, selection: Selection) -> None:
        self._write(selection)
        self.count += 1

    def _write(self, selection: Selection) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> SelectionOutput:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class DefaultOutput(SelectionOutput):
    """Selected records in the measurement stream format."""

    name = "default"
    extension = ".txt"

    def __init__(
        self,
        path: str | Path,
        measurements: Sequence[BaseMeasurement],
        settings: DesignSettings | None = None,
    ) -> None:
        super().__init__(path, measurements, settings)
        self._writer = SequenceMeasurementsWriter(self.path, self.measurements)

    def _write(self, selection: Selection) -> None:
        self._writer.write(selection.record)

    def close(self) -> None:
        self._writer.close()


class FastaOutput(SelectionOutput):
    """``>id name score`` headers followed by the oligo sequence."""

    name = "fasta"
    extension = ".fasta"

    def __init__(
        self,
        path: str | Path,
        measurements: Sequence[BaseMeasurement],
        settings: DesignSettings | None = None,
    ) -> None:
        super().__init__(path, measurements, settings)
        _require(self.measurements, self.name, "OligoSequence")
        self._handle: IO[str] = open_text(self.path, "w")

    def _write(self, selection: Selection) -> None:
        record = selection.record
        oligo_name = record.value("OligoName") if record.index_of("OligoName") >= 0 else ""
        entry = SeqRecord(
            Seq(str(record.value("OligoSequence") or "")),
            id=str(record.id),
            description=f"{oligo_name or ''} {_global_score(record)!r}".strip(),
        )
        SeqIO.write(entry, self._handle, "fasta")

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()


class GffOutput(SelectionOutput):
    """GFF3 features, one per selected oligo, in 1-based coordinates."""

    name = "gff"
    extension = ".gff3"

    def __init__(
        self,
        path: str | Path,
        measurements: Sequence[BaseMeasurement],
        settings: DesignSettings | None = None,
    ) -> None:
        super().__init__(path, measurements, settings)
        _require(self.measurements, self.name, "Chromosome", "OligoStart", "OligoLength")
        self._handle: IO[str] = open_text(self.path, "w")
        self._handle.write("##gff-version 3\n")

    def _strand(self, record: SequenceMeasurements) -> str:
        if record.index_of("ORF") < 0:
            return "."
        label = record.value("ORF")
        if not label:
            return "."
        return "+" if str(label).endswith("W") else "-"

    def _write(self, selection: Selection) -> None:
        record = selection.record
        start = int(record.value("OligoStart")) + 1 - self.settings.origin  # type: ignore[arg-type]
        end = start + int(record.value("OligoLength")) - 1  # type: ignore[arg-type]
        attributes = [f"ID=oligo{record.id}"]
        if record.index_of("OligoName") >= 0 and record.value("OligoName"):
            attributes.append(f"Name={record.value('OligoName')}")
        if selection.label:
            attributes.append(f"Zone={selection.label}")
        fields = [
            str(record.value("Chromosome")),
            GFF_SOURCE,
            GFF_TYPE,
            str(start),
            str(end),
            repr(_global_score(record)),
            self._strand(record),
            ".",
            ";".join(attributes),
        ]
        self._handle.write("\t".join(fields) + "\n")

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()


class OutputRegistry:
    _registry: dict[str, type[SelectionOutput]] = {
        "default": DefaultOutput,
        "fasta": FastaOutput,
        "gff": GffOutput,
    }

    @classmethod
    def register(cls, factory: type[SelectionOutput]) -> None:
        if not factory.name:
            msg = f"Output class {factory!r} has no name"
            raise ConfigurationError(msg)
        cls._registry[factory.name.lower()] = factory

    @classmethod
    def get(cls, name: str) -> type[SelectionOutput]:
        try:
            return cls._registry[name.lower()]
        except KeyError:
            msg = f"Unknown output: {name}"
            raise ConfigurationError(msg) from None

    @classmethod
    def names(cls) -> list[str]:
        return sorted(cls._registry)


def output_from_name(
    name: str,
    path: str | Path,
    measurements: Sequence[BaseMeasurement],
    settings: DesignSettings | None = None,
) -> SelectionOutput:
    return OutputRegistry.get(name)(path, measurements, settings)


__all__ = [
    "SelectionOutput",
    "DefaultOutput",
    "FastaOutput",
    "GffOutput",
    "OutputRegistry",
    "output_from_name",
]
