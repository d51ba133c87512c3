"""Base-composition measurements backed by Biopython."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from Bio.SeqUtils import MeltingTemp, gc_fraction

from oligotile.measurements.base import NumericMeasurement

if TYPE_CHECKING:  # pragma: no cover
    from oligotile.core.candidate import Oligo

# Bases counted as masked: soft-masked lower case, unknown and hard-masked.
MASKED_BASES: Final = frozenset("acgtnNxX")

# Hybridisation conditions (nM oligo, mM sodium).
OLIGO_CONCENTRATION: Final = 50.0
SODIUM_CONCENTRATION: Final = 50.0


class GCMeasurement(NumericMeasurement):
    """Fraction of G and C bases over the full oligo length."""

    name = "GC"
    description = "GC fraction of the oligo"
    histogram_min = 0.0
    histogram_max = 1.0

    def compute(self, oligo: Oligo) -> float:
        if not oligo.tokens:
            return 0.0
        return float(gc_fraction(oligo.tokens, ambiguous="ignore"))


class TmMeasurement(NumericMeasurement):
    """Nearest-neighbour melting temperature (DNA/DNA, Biopython tables)."""

    name = "Tm"
    description = "Melting temperature of the oligo"
    histogram_min = 0.0
    histogram_max = 100.0

    def compute(self, oligo: Oligo) -> float:
        return float(
            MeltingTemp.Tm_NN(
                oligo.tokens.upper(),
                dnac1=OLIGO_CONCENTRATION,
                dnac2=0,
                Na=SODIUM_CONCENTRATION,
                strict=False,
            )
        )


class ComplexityMeasurement(NumericMeasurement):
    """Fraction of unmasked bases.

    The score is the value itself: fully unmasked oligos score 1.
    """

    name = "Complexity"
    description = "Fraction of unmasked bases in the oligo"
    histogram_min = 0.0
    histogram_max = 1.0

    def compute(self, oligo: Oligo) -> float:
        tokens = oligo.tokens
        if not tokens:
            return 0.0
        masked = sum(1 for base in tokens if base in MASKED_BASES)
        return 1.0 - masked / len(tokens)

    def score(self, value: float | None) -> float:
        return 0.0 if value is None else float(value)


__all__ = ["GCMeasurement", "TmMeasurement", "ComplexityMeasurement", "MASKED_BASES"]
