"""Measurement registry."""

from __future__ import annotations

from collections.abc import Callable

from oligotile.core.errors import ConfigurationError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.base import BaseMeasurement, ValueKind
from oligotile.measurements.composition import ComplexityMeasurement, GCMeasurement, TmMeasurement
from oligotile.measurements.sequence import (
    ChromosomeMeasurement,
    OligoLengthMeasurement,
    OligoNameMeasurement,
    OligoSequenceMeasurement,
    OligoStartMeasurement,
)
from oligotile.measurements.unicity import UnicityMeasurement

Factory = Callable[..., BaseMeasurement]


class MeasurementRegistry:
    """Name -> measurement class mapping. Names are matched case-insensitively."""

    _registry: dict[str, type[BaseMeasurement]] = {
        "chromosome": ChromosomeMeasurement,
        "oligostart": OligoStartMeasurement,
        "oligolength": OligoLengthMeasurement,
        "oligoname": OligoNameMeasurement,
        "oligosequence": OligoSequenceMeasurement,
        "gc": GCMeasurement,
        "tm": TmMeasurement,
        "complexity": ComplexityMeasurement,
        "unicity": UnicityMeasurement,
    }

    @classmethod
    def register(cls, factory: type[BaseMeasurement], *, replace: bool = False) -> None:
        name = getattr(factory, "name", "")
        if not isinstance(name, str) or not name:
            msg = f"Measurement class {factory!r} has no name"
            raise ConfigurationError(msg)
        if not callable(getattr(factory, "compute", None)):
            msg = f"Measurement class {factory!r} does not define compute()"
            raise ConfigurationError(msg)
        key = name.lower()
        existing = cls._registry.get(key)
        if existing is not None and existing is not factory and not replace:
            msg = f"Measurement already registered: {name}"
            raise ConfigurationError(msg)
        cls._registry[key] = factory

    @classmethod
    def get(cls, name: str) -> type[BaseMeasurement]:
        try:
            return cls._registry[name.lower()]
        except KeyError:
            msg = f"Unknown measurement: {name}"
            raise ConfigurationError(msg) from None

    @classmethod
    def create(
        cls,
        name: str,
        settings: DesignSettings | None = None,
        **params: object,
    ) -> BaseMeasurement:
        factory = cls.get(name)
        try:
            return factory(settings, **params)
        except TypeError as exc:
            msg = f"Invalid parameters for measurement {name}: {exc}"
            raise ConfigurationError(msg) from exc

    @classmethod
    def kind_of(cls, name: str) -> ValueKind:
        return cls.get(name).codec.kind

    @classmethod
    def contains(cls, name: str) -> bool:
        return name.lower() in cls._registry

    @classmethod
    def names(cls) -> list[str]:
        return sorted(factory.name for factory in cls._registry.values())


__all__ = ["MeasurementRegistry"]
