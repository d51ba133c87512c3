"""Streaming windowed selection.

The engine walks a stream of scored records ordered by (chromosome, position)
exactly once and keeps the best record of the current window. Only a handful
of records are held at any time, whatever the size of the stream.

Windows are ``[start, start + length - 1]`` and follow each other every
``step`` positions. When ``step < length`` consecutive windows overlap, and a
record in the trailing zone of a window (``position >= start + step``) is also
a candidate of the next one. The engine tracks the best such record (the
"next best") and promotes it when the stream crosses into the next window, so
that the next window does not lose a candidate it has already seen. When
``step > length`` the positions between two windows belong to none of them,
and records there are skipped like ineligible ones.

Ordering of the input is a precondition and is not verified.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Iterator
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING

from oligotile.core.errors import ConfigurationError
from oligotile.selection.record import SequenceMeasurements

if TYPE_CHECKING:  # pragma: no cover
    from oligotile.resources.regions import Region

_LOGGER = logging.getLogger(__name__)

Eligibility = Callable[[str, int, SequenceMeasurements], bool]


class EngineState(Enum):
    INIT = "init"
    IN_WINDOW = "in_window"
    WINDOW_BOUNDARY = "window_boundary"
    CHROMOSOME_BOUNDARY = "chromosome_boundary"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class WindowGeometry:
    """Window length and step, plus the first coordinate of a chromosome."""

    length: int
    step: int | None = None
    origin: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.length, int) or self.length <= 0:
            msg = f"Invalid window length: {self.length}"
            raise ConfigurationError(msg)
        if self.step is None:
            object.__setattr__(self, "step", self.length)
        if not isinstance(self.step, int) or self.step <= 0:
            msg = f"Invalid window step: {self.step}"
            raise ConfigurationError(msg)
        if self.origin not in (0, 1):
            msg = f"Invalid coordinate origin: {self.origin}"
            raise ConfigurationError(msg)

    @property
    def stride(self) -> int:
        return self.step if self.step is not None else self.length


@dataclass(frozen=True, slots=True)
class Window:
    chromosome: str
    start: int
    end: int

    @property
    def label(self) -> str:
        return f"[{self.start}-{self.end}]"

    def contains(self, position: int) -> bool:
        return self.start <= position <= self.end


@dataclass(frozen=True, slots=True)
class Selection:
    """A winning record and the unit (window or region) it was selected for."""

    record: SequenceMeasurements
    window: Window | None = None
    region: Region | None = None

    @property
    def label(self) -> str:
        if self.window is not None:
            return self.window.label
        if self.region is not None:
            return self.region.label
        return ""


@dataclass(slots=True)
class SelectionStats:
    chromosomes: int = 0
    windows: int = 0
    skipped_windows: int = 0
    empty_windows: int = 0
    candidates: int = 0
    ineligible: int = 0
    selected: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class SelectionEngine:
    """Best record per tiling window.

    Parameters
    ----------
    geometry : WindowGeometry
        Window length, step and coordinate origin.
    eligible : callable, optional
        ``(chromosome, position, record) -> bool``. Ineligible records take no
        part in the selection; windows holding only ineligible records are
        skipped without error.
    """

    def __init__(self, geometry: WindowGeometry, *, eligible: Eligibility | None = None) -> None:
        self.geometry = geometry
        self._eligible = eligible
        self.state = EngineState.INIT
        self.stats = SelectionStats()
        self._reset_chromosome(None)

    def _reset_chromosome(self, chromosome: str | None) -> None:
        self._chromosome = chromosome
        self._start = self.geometry.origin
        self._best: SequenceMeasurements | None = None
        self._best_score = -math.inf
        self._next: SequenceMeasurements | None = None
        self._next_score = -math.inf
        self._next_pos = 0
        self._last_emitted: int | None = None
        self._candidates_seen = False
        self._chromosome_windows = 0
        self._chromosome_selected = 0

    @property
    def window(self) -> Window | None:
        if self._chromosome is None:
            return None
        return Window(self._chromosome, self._start, self._start + self.geometry.length - 1)

    def run(self, items: Iterable[tuple[str, int, SequenceMeasurements]]) -> Iterator[Selection]:
        """Yield the winner of every window that has one.

        ``items`` yields ``(chromosome, position, record)``. Records may be
        flyweights: winners are detached copies.
        """
        self.stats = SelectionStats()
        self.state = EngineState.INIT
        self._reset_chromosome(None)

        for chromosome, position, record in items:
            self.stats.candidates += 1
            if chromosome != self._chromosome:
                if self._chromosome is not None:
                    self.state = EngineState.CHROMOSOME_BOUNDARY
                    yield from self._flush()
                    self._log_chromosome()
                self._begin_chromosome(chromosome, position)
            elif position > self._start + self.geometry.length - 1:
                self.state = EngineState.WINDOW_BOUNDARY
                yield from self._flush()
                steps = self._advance(position)
                self.stats.skipped_windows += steps - 1
                if steps == 1:
                    self._promote()
                else:
                    self._discard_next()
            self.state = EngineState.IN_WINDOW

            if position < self._start and self._start > self.geometry.origin:
                # Between two windows when step > length.
                _LOGGER.debug("Oligo %s at %s:%d lies between windows", record.id, chromosome, position)
                self.stats.ineligible += 1
                continue
            if self._eligible is not None and not self._eligible(chromosome, position, record):
                self.stats.ineligible += 1
                continue
            self._consider(position, record)

        if self._chromosome is not None:
            yield from self._flush()
            self._log_chromosome()
        self.state = EngineState.DONE

    def _begin_chromosome(self, chromosome: str, position: int) -> None:
        self._reset_chromosome(chromosome)
        self.stats.chromosomes += 1
        self.stats.windows += 1
        self._chromosome_windows += 1
        self.stats.skipped_windows += self._advance(position)

    def _advance(self, position: int) -> int:
        last = self._start + self.geometry.length - 1
        steps = 0
        if position > last:
            steps = -(-(position - last) // self.geometry.stride)
            self._start += steps * self.geometry.stride
        self.stats.windows += steps
        self._chromosome_windows += steps
        self._candidates_seen = False
        return steps

    def _consider(self, position: int, record: SequenceMeasurements) -> None:
        self._candidates_seen = True
        score = record.score()
        snapshot = None
        if score > self._best_score:
            snapshot = record.copy()
            self._best = snapshot
            self._best_score = score
        if position >= self._start + self.geometry.stride and score > self._next_score:
            self._next = snapshot if snapshot is not None else record.copy()
            self._next_score = score
            self._next_pos = position

    def _promote(self) -> None:
        if self._next is None:
            return
        self._best = self._next
        self._best_score = self._next_score
        self._candidates_seen = True
        if self._next_pos < self._start + self.geometry.stride:
            self._discard_next()

    def _discard_next(self) -> None:
        self._next = None
        self._next_score = -math.inf

    def _flush(self) -> Iterator[Selection]:
        window = self.window
        label = window.label if window is not None else ""
        best = self._best
        self._best = None
        self._best_score = -math.inf
        if best is None:
            if self._candidates_seen:
                _LOGGER.error("No oligo selected for window %s %s (bad case)", self._chromosome, label)
                self.stats.empty_windows += 1
            else:
                _LOGGER.debug("No eligible oligo in window %s %s", self._chromosome, label)
            return
        if best.id == self._last_emitted:
            return
        self._last_emitted = best.id
        self.stats.selected += 1
        self._chromosome_selected += 1
        yield Selection(best, window=window)

    def _log_chromosome(self) -> None:
        _LOGGER.debug(
            "Chromosome %s: %d windows, %d oligos selected",
            self._chromosome,
            self._chromosome_windows,
            self._chromosome_selected,
        )


class RegionSelectionEngine:
    """Best record per annotated region.

    ``items`` yields ``(region, record)`` where ``region`` is ``None`` for
    records outside any region. Such records are skipped. The current region
    is flushed when the region changes and at the end of the stream.
    """

    def __init__(self) -> None:
        self.state = EngineState.INIT
        self.stats = SelectionStats()
        self._region: Region | None = None
        self._best: SequenceMeasurements | None = None
        self._best_score = -math.inf
        self._chromosome: str | None = None

    def run(self, items: Iterable[tuple[Region | None, SequenceMeasurements]]) -> Iterator[Selection]:
        self.stats = SelectionStats()
        self.state = EngineState.INIT
        self._region = None
        self._best = None
        self._best_score = -math.inf
        self._chromosome = None

        for region, record in items:
            self.stats.candidates += 1
            if region != self._region:
                self.state = EngineState.WINDOW_BOUNDARY
                yield from self._flush()
                self._region = region
                if region is not None:
                    self.stats.windows += 1
                    if region.chromosome != self._chromosome:
                        self._chromosome = region.chromosome
                        self.stats.chromosomes += 1
            self.state = EngineState.IN_WINDOW
            if region is None:
                self.stats.ineligible += 1
                continue
            score = record.score()
            if score > self._best_score:
                self._best = record.copy()
                self._best_score = score

        yield from self._flush()
        self.state = EngineState.DONE

    def _flush(self) -> Iterator[Selection]:
        region, best = self._region, self._best
        self._best = None
        self._best_score = -math.inf
        if region is None:
            return
        if best is None:
            _LOGGER.error("No oligo selected for region %s (bad case)", region.label)
            self.stats.empty_windows += 1
            return
        self.stats.selected += 1
        yield Selection(best, region=region)


__all__ = [
    "EngineState",
    "WindowGeometry",
    "Window",
    "Selection",
    "SelectionStats",
    "SelectionEngine",
    "RegionSelectionEngine",
]
