"""Candidate generation by tiling the chromosomes of a FASTA genome."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from Bio import SeqIO

from oligotile.core.candidate import Oligo
from oligotile.core.errors import ConfigurationError
from oligotile.core.settings import DesignSettings
from oligotile.storage.files import open_text

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class FastaTilingSource:
    """Cut every chromosome of ``genome`` into overlapping oligos.

    Oligos start every ``step`` bases and are ``settings.oligo_length`` long.
    Trailing bases too short to make a full oligo are dropped. Ids are assigned
    sequentially from 1 across the whole genome, in file order.

    Parameters
    ----------
    genome : str | Path
        FASTA file, optionally gzip-compressed (``.gz``).
    settings : DesignSettings
        Oligo length and coordinate origin.
    step : int
        Distance between the starts of two consecutive oligos.
    """

    genome: str | Path
    settings: DesignSettings
    step: int = 1

    def __post_init__(self) -> None:
        if self.step < 1:
            msg = f"Invalid oligo step: {self.step}"
            raise ConfigurationError(msg)
        self.genome = Path(self.genome)

    def __iter__(self) -> Iterator[Oligo]:
        length = self.settings.oligo_length
        origin = self.settings.origin
        next_id = 1
        with open_text(self.genome, "r") as handle:
            for chromosome in SeqIO.parse(handle, "fasta"):
                sequence = str(chromosome.seq)
                count = 0
                for index in range(0, len(sequence) - length + 1, self.step):
                    yield Oligo(
                        id=next_id,
                        chromosome=chromosome.id,
                        start=index + origin,
                        length=length,
                        tokens=sequence[index : index + length],
                    )
                    next_id += 1
                    count += 1
                _LOGGER.debug("Chromosome %s: %d bases, %d oligos", chromosome.id, len(sequence), count)
