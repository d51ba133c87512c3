"""Run-wide settings threaded through measurement and selector constructors."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from oligotile.core.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class DesignSettings:
    """Context shared by every component of a design run.

    Attributes
    ----------
    oligo_length : int
        Length of the candidate oligos.
    start1 : bool
        When ``True`` chromosome coordinates start at 1 instead of 0.
    output_dir : Path
        Directory receiving intermediate and final files.
    max_workers : int
        Upper bound for the measurement worker pool. ``1`` disables the pool.
    batch_size : int
        Number of candidates handed to the executor at once.
    """

    oligo_length: int = 60
    start1: bool = False
    output_dir: Path = field(default=Path("."))
    max_workers: int = 1
    batch_size: int = 1024

    def __post_init__(self) -> None:
        if self.oligo_length < 1:
            raise ConfigurationError(f"Invalid oligo length: {self.oligo_length}")
        if self.max_workers < 1:
            raise ConfigurationError(f"Invalid worker count: {self.max_workers}")
        if self.batch_size < 1:
            raise ConfigurationError(f"Invalid batch size: {self.batch_size}")
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    @property
    def origin(self) -> int:
        """First coordinate of a chromosome."""
        return 1 if self.start1 else 0

    def with_overrides(self, **changes: object) -> DesignSettings:
        return replace(self, **changes)  # type: ignore[arg-type]
