"""Per-candidate measurement record and weighted composite score."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from oligotile.core.errors import DataIntegrityError
from oligotile.measurements.base import BaseMeasurement, Value

if TYPE_CHECKING:  # pragma: no cover
    from oligotile.core.candidate import Oligo

WEIGHT_SUM_TOLERANCE = 1e-6


class SequenceMeasurements:
    """Ordered measurement values of one candidate.

    Measurements are shared with every other record of the run, never owned.
    Readers reuse a single instance for the whole stream (flyweight): the
    values of a record are only valid until the next one is read. Use
    :meth:`copy` to keep a record beyond that point.

    The composite score is cached and invalidated by any change of values,
    id or weights.
    """

    __slots__ = ("id", "_measurements", "_values", "_weights", "_index", "_score")

    def __init__(
        self,
        measurements: Sequence[BaseMeasurement],
        values: Iterable[Value] | None = None,
        *,
        id: int = 0,  # noqa: A002
        weights: dict[str, float] | None = None,
    ) -> None:
        self.id = id
        self._measurements: tuple[BaseMeasurement, ...] = tuple(measurements)
        self._index = {m.name.lower(): i for i, m in enumerate(self._measurements)}
        if len(self._index) != len(self._measurements):
            msg = "Duplicate measurement names in record"
            raise DataIntegrityError(msg)
        self._values: list[Value] = [None] * len(self._measurements)
        self._weights: dict[int, float] = {}
        self._score: float | None = None
        if values is not None:
            self.set_values(values)
        for name, weight in (weights or {}).items():
            self.set_weight(name, weight)

    @property
    def measurements(self) -> tuple[BaseMeasurement, ...]:
        return self._measurements

    @property
    def values(self) -> list[Value]:
        return self._values

    def __len__(self) -> int:
        return len(self._measurements)

    def set_id(self, id: int) -> None:  # noqa: A002
        self.id = id
        self._score = None

    def set_values(self, values: Iterable[Value]) -> None:
        values = list(values)
        if len(values) != len(self._measurements):
            msg = f"Expected {len(self._measurements)} values, got {len(values)}"
            raise DataIntegrityError(msg)
        self._values = values
        self._score = None

    def set_value(self, index: int, value: Value, *, keep_score: bool = False) -> None:
        """Replace one value. ``keep_score`` is for columns that never contribute to the score."""
        self._values[index] = value
        if not keep_score:
            self._score = None

    def index_of(self, name: str) -> int:
        """Position of a measurement, looked up case-insensitively; ``-1`` if absent."""
        return self._index.get(name.lower(), -1)

    def get_measurement(self, name: str) -> BaseMeasurement | None:
        index = self.index_of(name)
        return None if index < 0 else self._measurements[index]

    def value(self, name: str) -> Value:
        index = self.index_of(name)
        if index < 0:
            msg = f"Unknown measurement: {name}"
            raise DataIntegrityError(msg)
        return self._values[index]

    def set_weight(self, name: str, weight: float) -> bool:
        """Set the weight of a measurement. Returns ``False`` if it is not in the record."""
        index = self.index_of(name)
        if index < 0:
            return False
        self._weights[index] = float(weight)
        self._score = None
        return True

    def weight(self, name: str) -> float | None:
        index = self.index_of(name)
        return self._weights.get(index) if index >= 0 else None

    @property
    def weights(self) -> dict[str, float]:
        return {self._measurements[i].name: w for i, w in self._weights.items()}

    def weight_sum_is_one(self) -> bool:
        return math.isclose(sum(self._weights.values()), 1.0, abs_tol=WEIGHT_SUM_TOLERANCE)

    def score(self) -> float:
        """Weighted sum of measurement scores. Unweighted measurements do not contribute."""
        if self._score is None:
            total = 0.0
            for index, weight in self._weights.items():
                total += self._measurements[index].score(self._values[index]) * weight
            self._score = total
        return self._score

    def compute(self, oligo: Oligo) -> None:
        self.id = oligo.id
        self._values = [m.compute(oligo) for m in self._measurements]
        self._score = None

    def record_samples(self) -> None:
        for measurement, value in zip(self._measurements, self._values):
            measurement.record_sample(value)

    def formatted(self) -> list[str]:
        return [m.format(v) for m, v in zip(self._measurements, self._values)]

    def copy(self) -> SequenceMeasurements:
        clone = SequenceMeasurements.__new__(SequenceMeasurements)
        clone.id = self.id
        clone._measurements = self._measurements
        clone._index = self._index
        clone._values = list(self._values)
        clone._weights = dict(self._weights)
        clone._score = self._score
        return clone

    def __repr__(self) -> str:
        pairs = ", ".join(f"{m.name}={v!r}" for m, v in zip(self._measurements, self._values))
        return f"SequenceMeasurements(id={self.id}, {pairs})"


__all__ = ["SequenceMeasurements"]
