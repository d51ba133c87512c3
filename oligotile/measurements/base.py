"""Measurement abstractions.

A measurement is created once per run and reused for every candidate. It
computes a value from an :class:`~oligotile.core.candidate.Oligo`, converts the
value to and from text, turns it into a score (higher is better) and keeps
running statistics over the samples it has seen.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from oligotile.core.errors import DataIntegrityError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.statistics import ChunkedStatistics

if TYPE_CHECKING:  # pragma: no cover
    from oligotile.core.candidate import Oligo

_LOGGER = logging.getLogger(__name__)

Value = float | int | str | None


class ValueKind(Enum):
    """Storage kind of a measurement value."""

    FLOAT = "float"
    INTEGER = "integer"
    STRING = "string"


@dataclass(frozen=True, slots=True)
class ValueCodec:
    """Text conversion for one :class:`ValueKind`.

    Floats are rendered with ``repr`` so that parsing restores the exact value.
    A missing numeric value is written as an empty cell.
    """

    kind: ValueKind

    def parse(self, text: str) -> Value:
        if self.kind is ValueKind.STRING:
            return text
        if text == "":
            return None
        try:
            if self.kind is ValueKind.INTEGER:
                return int(text)
            return float(text)
        except ValueError as exc:
            msg = f"Invalid {self.kind.value} value: {text!r}"
            raise DataIntegrityError(msg) from exc

    def format(self, value: Value) -> str:
        if value is None:
            return ""
        if self.kind is ValueKind.FLOAT:
            return repr(float(value))
        if self.kind is ValueKind.INTEGER:
            return str(int(value))
        text = str(value)
        if "\t" in text or "\n" in text or "\r" in text:
            msg = f"String value contains a field separator: {text!r}"
            raise DataIntegrityError(msg)
        return text


FLOAT_CODEC = ValueCodec(ValueKind.FLOAT)
INTEGER_CODEC = ValueCodec(ValueKind.INTEGER)
STRING_CODEC = ValueCodec(ValueKind.STRING)


@runtime_checkable
class Measurement(Protocol):
    name: str
    description: str
    codec: ValueCodec
    parallel_safe: bool

    def compute(self, oligo: Oligo) -> Value:  # noqa: D401
        """Return the measurement value for the candidate."""

    def parse(self, text: str) -> Value:
        ...  # pragma: no cover

    def format(self, value: Value) -> str:
        ...  # pragma: no cover

    def score(self, value: Value) -> float:
        ...  # pragma: no cover

    def record_sample(self, value: Value) -> None:
        ...  # pragma: no cover

    def statistics(self) -> dict[str, str] | None:
        ...  # pragma: no cover

    def set_property(self, key: str, text: str) -> None:
        ...  # pragma: no cover

    def clear(self) -> None:
        ...  # pragma: no cover


class BaseMeasurement:
    """Default measurement behaviour: string values, zero score, no statistics.

    Subclasses set the class attributes and override :meth:`compute`.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    codec: ClassVar[ValueCodec] = STRING_CODEC
    parallel_safe: ClassVar[bool] = True

    def __init__(self, settings: DesignSettings | None = None) -> None:
        self.settings = settings or DesignSettings()
        self._properties: dict[str, str] = {}

    @property
    def kind(self) -> ValueKind:
        return self.codec.kind

    def compute(self, oligo: Oligo) -> Value:
        raise NotImplementedError

    def parse(self, text: str) -> Value:
        return self.codec.parse(text)

    def format(self, value: Value) -> str:
        return self.codec.format(value)

    def score(self, value: Value) -> float:
        return 0.0

    def record_sample(self, value: Value) -> None:
        return None

    def statistics(self) -> dict[str, str] | None:
        return None

    # Property keys are case insensitive.
    def set_property(self, key: str, text: str) -> None:
        self._properties[key.strip().lower()] = text

    def get_property(self, key: str) -> str | None:
        return self._properties.get(key.strip().lower())

    def float_property(self, key: str) -> float | None:
        text = self.get_property(key)
        if text is None or text == "":
            return None
        try:
            return float(text)
        except ValueError as exc:
            msg = f"Invalid value for property {key!r} of {self.name}: {text!r}"
            raise DataIntegrityError(msg) from exc

    def clear(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class StringMeasurement(BaseMeasurement):
    codec = STRING_CODEC


class IntegerMeasurement(BaseMeasurement):
    """Integer identity measurement; never contributes to the score."""

    codec = INTEGER_CODEC


class NumericMeasurement(BaseMeasurement):
    """Float measurement scored by distance to a reference value.

    ``score(v) = 1 - |reference - v| / deviation``

    ``reference`` and ``deviation`` come from the ``reference`` and
    ``deviation`` properties when set, otherwise from the ``median`` and
    ``stddev`` properties of a loaded statistics file, otherwise from the
    statistics collected in memory. They are resolved on the first call to
    :meth:`score` and kept until a property changes or :meth:`clear` is called.
    """

    codec = FLOAT_CODEC
    histogram_min: ClassVar[float] = 0.0
    histogram_max: ClassVar[float] = 1.0

    def __init__(self, settings: DesignSettings | None = None) -> None:
        super().__init__(settings)
        self._stats = ChunkedStatistics(self.histogram_min, self.histogram_max)
        self._resolved: tuple[float, float] | None = None
        self._warned = False

    def record_sample(self, value: Value) -> None:
        if value is None:
            return
        self._stats.add(float(value))

    def statistics(self) -> dict[str, str] | None:
        return self._stats.summary().to_properties()

    @property
    def sample_count(self) -> int:
        return self._stats.n

    def set_property(self, key: str, text: str) -> None:
        super().set_property(key, text)
        self._resolved = None

    def _resolve(self) -> tuple[float, float]:
        reference = self.float_property("reference")
        if reference is None:
            reference = self.float_property("median")
        deviation = self.float_property("deviation")
        if deviation is None:
            deviation = self.float_property("stddev")
        if reference is None or deviation is None:
            summary = self._stats.summary()
            if reference is None:
                reference = summary.median
            if deviation is None:
                deviation = summary.stddev
        return reference, deviation

    @property
    def reference(self) -> float:
        if self._resolved is None:
            self._resolved = self._resolve()
        return self._resolved[0]

    @property
    def deviation(self) -> float:
        if self._resolved is None:
            self._resolved = self._resolve()
        return self._resolved[1]

    def score(self, value: Value) -> float:
        if value is None:
            return 0.0
        reference, deviation = self.reference, self.deviation
        if math.isnan(reference) or math.isnan(deviation) or deviation == 0:
            if not self._warned:
                _LOGGER.warning(
                    "Cannot score %s: reference=%s deviation=%s; scoring 0",
                    self.name,
                    reference,
                    deviation,
                )
                self._warned = True
            return 0.0
        return 1.0 - abs(reference - float(value)) / deviation

    def clear(self) -> None:
        self._stats.clear()
        self._resolved = None
        self._warned = False


__all__ = [
    "Value",
    "ValueKind",
    "ValueCodec",
    "FLOAT_CODEC",
    "INTEGER_CODEC",
    "STRING_CODEC",
    "Measurement",
    "BaseMeasurement",
    "StringMeasurement",
    "IntegerMeasurement",
    "NumericMeasurement",
]
