"""Annotated regions (ORFs) and the lookup used by zone selectors.

Region files are tab-separated: ``name, chromosome, start, end, W|C``. Lines
starting with ``#`` are comments.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from oligotile.core.errors import ConfigurationError, DataIntegrityError
from oligotile.core.settings import DesignSettings
from oligotile.utils.params import parse_flag

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Region:
    """An annotated interval ``[start, end]`` on one strand of a chromosome."""

    name: str
    chromosome: str = field(compare=False)
    start: int
    end: int
    watson: bool = True

    @property
    def strand(self) -> str:
        return "W" if self.watson else "C"

    @property
    def label(self) -> str:
        return f"{self.name} {self.chromosome} [{self.start},{self.end}]{self.strand}"

    def contains(self, start: int, end: int) -> bool:
        return start >= self.start and end <= self.end


class RegionLookup:
    """Find the region holding an oligo.

    Parameters
    ----------
    regions : iterable of Region
        Regions of any chromosome, in any order.
    """

    def __init__(self, regions: Iterable[Region]) -> None:
        by_chromosome: dict[str, list[Region]] = {}
        for region in regions:
            by_chromosome.setdefault(region.chromosome, []).append(region)
        self._regions: dict[str, list[Region]] = {}
        self._starts: dict[str, list[int]] = {}
        self._max_length: dict[str, int] = {}
        for chromosome, items in by_chromosome.items():
            items.sort(key=lambda r: (r.start, r.end))
            self._regions[chromosome] = items
            self._starts[chromosome] = [r.start for r in items]
            self._max_length[chromosome] = max(r.end - r.start for r in items)
        self._last_query: tuple[str, int, int] | None = None
        self._last_region: Region | None = None

    def __len__(self) -> int:
        return sum(len(items) for items in self._regions.values())

    @property
    def chromosomes(self) -> list[str]:
        return list(self._regions)

    def get_regions(self, chromosome: str) -> list[Region]:
        return list(self._regions.get(chromosome, ()))

    def get_region(self, chromosome: str, start: int, length: int) -> Region | None:
        """Lowest-start region containing ``[start, start + length]``, or ``None``."""
        query = (chromosome, start, length)
        if query == self._last_query:
            return self._last_region
        self._last_query = query
        self._last_region = self._find(chromosome, start, start + length)
        return self._last_region

    def _find(self, chromosome: str, start: int, end: int) -> Region | None:
        regions = self._regions.get(chromosome)
        if not regions:
            return None
        starts = self._starts[chromosome]
        hi = bisect.bisect_right(starts, start)
        lo = bisect.bisect_left(starts, end - self._max_length[chromosome])
        for region in regions[lo:hi]:
            if region.contains(start, end):
                return region
        return None

    @classmethod
    def from_file(cls, path: str | Path, *, start_offset: int = 0) -> RegionLookup:
        """Load a region file, shifting coordinates by ``start_offset``.

        The offset is the difference between the oligo coordinate origin and the
        region file's origin (``1 - 0`` when oligos are 1-based and regions are
        0-based).
        """
        path = Path(path)
        regions: list[Region] = []
        with path.open("r", encoding="utf-8") as handle:
            for lineno, line in enumerate(handle, start=1):
                line = line.rstrip("\r\n")
                if not line or line.startswith("#"):
                    continue
                fields = line.split("\t")
                if len(fields) < 5:
                    msg = f"{path}:{lineno}: expected 5 tab-separated fields, got {len(fields)}"
                    raise DataIntegrityError(msg)
                try:
                    start = int(fields[2]) + start_offset
                    end = int(fields[3]) + start_offset
                except ValueError as exc:
                    msg = f"{path}:{lineno}: invalid coordinates"
                    raise DataIntegrityError(msg) from exc
                regions.append(Region(fields[0], fields[1], start, end, fields[4].strip().upper() == "W"))
        _LOGGER.debug("Regions read from %s: %d", path, len(regions))
        return cls(regions)


def load_region_lookup(
    settings: DesignSettings,
    regions_file: str | Path | None,
    regions_start1: object = False,
    lookup: RegionLookup | None = None,
) -> RegionLookup:
    """Return ``lookup`` or load ``regions_file`` in the coordinates of ``settings``.

    ``regions_start1`` tells whether the file is 1-based.
    """
    if lookup is not None:
        return lookup
    if regions_file is None:
        msg = "Missing parameter: regions_file"
        raise ConfigurationError(msg)
    offset = settings.origin - (1 if parse_flag("regions_start1", regions_start1) else 0)
    return RegionLookup.from_file(regions_file, start_offset=offset)


__all__ = ["Region", "RegionLookup", "load_region_lookup"]
