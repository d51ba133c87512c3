"""Genome unicity measurement.

Reads the minimal-unique-prefix (mup) lengths computed by an external genome
indexing tool. One file per chromosome, ``<mup_dir>/<chromosome>.mup``, each
data line holding ``<position> <prefix length>``. Lines that do not start with
a digit are headers and are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from oligotile.core.errors import DataIntegrityError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.base import NumericMeasurement

if TYPE_CHECKING:  # pragma: no cover
    from oligotile.core.candidate import Oligo

_LOGGER = logging.getLogger(__name__)

MUP_EXTENSION = ".mup"


def load_mup_file(path: Path) -> dict[int, int]:
    """Parse a mup file into ``position -> prefix length``."""
    prefixes: dict[int, int] = {}
    with path.open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            if not line or not line[0].isdigit():
                continue
            fields = line.split()
            if len(fields) < 2:
                msg = f"{path}:{lineno}: expected '<position> <length>'"
                raise DataIntegrityError(msg)
            prefixes[int(fields[0])] = int(fields[1])
    return prefixes


class UnicityMeasurement(NumericMeasurement):
    """Number of distinct unique-prefix end positions inside the oligo.

    The mup table of the current chromosome is cached, which makes instances
    unsafe to share between threads.

    Parameters
    ----------
    settings : DesignSettings, optional
        Run settings.
    mup_dir : str or Path, optional
        Directory holding the ``.mup`` files. Defaults to ``<output_dir>/mup``.
    """

    name = "Unicity"
    description = "Unicity of the oligo in the genome"
    parallel_safe = False
    histogram_min = 0.0
    histogram_max = 100.0

    def __init__(
        self,
        settings: DesignSettings | None = None,
        *,
        mup_dir: str | Path | None = None,
    ) -> None:
        super().__init__(settings)
        self.mup_dir = Path(mup_dir) if mup_dir is not None else self.settings.output_dir / "mup"
        self._chromosome: str | None = None
        self._prefixes: dict[int, int] = {}
        self._observed_max = 0.0

    def _load(self, chromosome: str) -> None:
        path = self.mup_dir / f"{chromosome}{MUP_EXTENSION}"
        _LOGGER.debug("Loading unique prefixes from %s", path)
        self._prefixes = load_mup_file(path)
        self._chromosome = chromosome

    def compute(self, oligo: Oligo) -> float:
        if oligo.chromosome != self._chromosome:
            self._load(oligo.chromosome)

        last = oligo.start + oligo.length - 1
        ends = set()
        for position in range(oligo.start, last + 1):
            length = self._prefixes.get(position)
            if length is None:
                continue
            end = position + length - 1
            if end <= last:
                ends.add(end)
        return float(len(ends))

    def record_sample(self, value: float | None) -> None:
        super().record_sample(value)
        if value is not None:
            self._observed_max = max(self._observed_max, float(value))

    @property
    def maximum(self) -> float:
        explicit = self.float_property("max")
        if explicit:
            return explicit
        if self._observed_max > 0:
            return self._observed_max
        return float(self.settings.oligo_length)

    def score(self, value: float | None) -> float:
        if value is None:
            return 0.0
        return float(value) / self.maximum

    def clear(self) -> None:
        super().clear()
        self._observed_max = 0.0


__all__ = ["UnicityMeasurement", "load_mup_file", "MUP_EXTENSION"]
