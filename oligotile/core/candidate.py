"""Candidate oligonucleotide data structures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Oligo:
    """A candidate probe cut from a chromosome.

    ``start`` is expressed in the run's coordinate origin (0 or 1, see
    :class:`~oligotile.core.settings.DesignSettings`). ``tokens`` keeps the
    genome's soft-masking (lower-case bases).
    """

    id: int
    chromosome: str
    start: int
    length: int
    tokens: str = ""

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def name(self) -> str:
        return f"{self.chromosome}:subseq({self.start},{self.length})"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "chromosome": self.chromosome,
            "start": self.start,
            "length": self.length,
            "tokens": self.tokens,
        }

    def __len__(self) -> int:  # pragma: no cover - simple delegation
        return len(self.tokens)
