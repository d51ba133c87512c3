"""Measurements describing where a candidate comes from."""

from __future__ import annotations

from typing import TYPE_CHECKING

from oligotile.measurements.base import IntegerMeasurement, StringMeasurement

if TYPE_CHECKING:  # pragma: no cover
    from oligotile.core.candidate import Oligo


class ChromosomeMeasurement(StringMeasurement):
    name = "Chromosome"
    description = "Chromosome of the oligo"

    def compute(self, oligo: Oligo) -> str:
        return oligo.chromosome


class OligoStartMeasurement(IntegerMeasurement):
    name = "OligoStart"
    description = "Start position of the oligo in the chromosome"

    def compute(self, oligo: Oligo) -> int:
        return oligo.start


class OligoLengthMeasurement(IntegerMeasurement):
    name = "OligoLength"
    description = "Length of the oligo"

    def compute(self, oligo: Oligo) -> int:
        return oligo.length


class OligoNameMeasurement(StringMeasurement):
    name = "OligoName"
    description = "Name of the oligo"

    def compute(self, oligo: Oligo) -> str:
        return oligo.name


class OligoSequenceMeasurement(StringMeasurement):
    name = "OligoSequence"
    description = "Sequence of the oligo"

    def compute(self, oligo: Oligo) -> str:
        return oligo.tokens


__all__ = [
    "ChromosomeMeasurement",
    "OligoStartMeasurement",
    "OligoLengthMeasurement",
    "OligoNameMeasurement",
    "OligoSequenceMeasurement",
]
