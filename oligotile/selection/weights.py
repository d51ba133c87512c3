"""Weight assignment applied to the output record of a selector."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from oligotile.core.errors import ConfigurationError
from oligotile.selection.record import SequenceMeasurements

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MeasurementWeight:
    """Weight of one measurement and the properties set on it before scoring."""

    name: str
    weight: float
    properties: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if math.isnan(self.weight) or self.weight < 0:
            msg = f"Invalid weight for {self.name}: {self.weight}"
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class WeightAssignment:
    """Measurement name -> weight, plus per-measurement scoring properties.

    Measurements left out of the assignment do not contribute to the score.
    """

    weights: tuple[MeasurementWeight, ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> WeightAssignment:
        """Build an assignment from ``{name: weight}`` or ``{name: {"weight": w, ...}}``."""
        entries: list[MeasurementWeight] = []
        for name, entry_value in mapping.items():
            if isinstance(entry_value, Mapping):
                fields = {str(k).strip().lower(): v for k, v in entry_value.items()}
                if "weight" not in fields:
                    msg = f"Missing weight for measurement {name}"
                    raise ConfigurationError(msg)
                weight = fields.pop("weight")
                properties = {k: str(v) for k, v in fields.items()}
            else:
                weight = entry_value
                properties = {}
            try:
                value = float(weight)  # type: ignore[arg-type]
            except (TypeError, ValueError) as exc:
                msg = f"Invalid weight for {name}: {weight!r}"
                raise ConfigurationError(msg) from exc
            entries.append(MeasurementWeight(str(name), value, properties))
        return cls(tuple(entries))

    @property
    def total(self) -> float:
        return sum(entry.weight for entry in self.weights)

    def apply(self, record: SequenceMeasurements) -> None:
        """Set weights and properties on ``record``.

        An unknown measurement is reported and ignored, which is equivalent to
        a zero weight.
        """
        for entry in self.weights:
            measurement = record.get_measurement(entry.name)
            if measurement is None:
                _LOGGER.warning("Unknown measurement in weights: %s", entry.name)
                continue
            for key, text in entry.properties.items():
                measurement.set_property(key, text)
            record.set_weight(entry.name, entry.weight)

        if not record.weight_sum_is_one():
            _LOGGER.warning("The sum of weights is not 1 (%s)", sum(record.weights.values()))

    def to_params(self) -> dict[str, float]:
        return {f"weight.{entry.name}": entry.weight for entry in self.weights}


__all__ = ["MeasurementWeight", "WeightAssignment"]
