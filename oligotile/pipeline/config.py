"""Design run configuration.

A run is described by a YAML or JSON document::

    genome: genome.fa
    output_dir: design
    oligo_length: 60
    oligo_step: 1
    start1: false
    workers: 4
    measurements: [chromosome, oligostart, oligolength, gc, tm, complexity]
    sequence_filters: [xn]
    measurement_filters:
      - name: floatrange
        params: {measurement: GC, min: 0.3, max: 0.7}
    selector:
      name: tiling
      params: {window_length: 1000}
    weights:
      GC: 0.5
      Tm: {weight: 0.5, reference: 80}
    outputs: [default, fasta]
    tracking:
      enabled: false
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from oligotile.core.errors import ConfigurationError
from oligotile.core.settings import DesignSettings
from oligotile.measurements.registry import MeasurementRegistry
from oligotile.selection.selectors import available_selectors
from oligotile.selection.weights import WeightAssignment
from oligotile.storage.outputs import OutputRegistry

_LOGGER = logging.getLogger(__name__)

DEFAULT_MEASUREMENTS = ("chromosome", "oligostart", "oligolength", "gc", "tm", "complexity")


@dataclass(frozen=True, slots=True)
class PluginConfig:
    """A named plugin and its constructor parameters."""

    name: str
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: object, section: str) -> PluginConfig:
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, Mapping):
            name = value.get("name")
            if not name:
                msg = f"Missing name in {section} entry: {value!r}"
                raise ConfigurationError(msg)
            params = value.get("params") or {}
            if not isinstance(params, Mapping):
                msg = f"Invalid params in {section} entry {name}"
                raise ConfigurationError(msg)
            return cls(str(name), dict(params))
        msg = f"Invalid {section} entry: {value!r}"
        raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class TrackingConfig:
    enabled: bool = False
    experiment_name: str = "oligotile-design"
    tracking_uri: str | None = None
    run_name: str | None = None


@dataclass(frozen=True, slots=True)
class DesignConfig:
    """Validated design run configuration."""

    genome: Path
    selector: PluginConfig
    output_dir: Path = field(default=Path("."))
    oligo_length: int = 60
    oligo_step: int = 1
    start1: bool = False
    workers: int = 1
    batch_size: int = 1024
    measurements: tuple[PluginConfig, ...] = tuple(PluginConfig(n) for n in DEFAULT_MEASUREMENTS)
    sequence_filters: tuple[PluginConfig, ...] = ()
    measurement_filters: tuple[PluginConfig, ...] = ()
    weights: WeightAssignment = field(default_factory=WeightAssignment)
    outputs: tuple[str, ...] = ("default",)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)

    def __post_init__(self) -> None:
        if self.oligo_step < 1:
            raise ConfigurationError(f"Invalid oligo step: {self.oligo_step}")
        if not self.measurements:
            raise ConfigurationError("At least one measurement must be specified in config")
        for plugin in self.measurements:
            MeasurementRegistry.get(plugin.name)
        if self.selector.name.lower() not in available_selectors():
            msg = f"Unknown selector: {self.selector.name}. Available: {available_selectors()}"
            raise ConfigurationError(msg)
        for name in self.outputs:
            OutputRegistry.get(name)
        # Raises on invalid values.
        self.settings()

    def settings(self) -> DesignSettings:
        return DesignSettings(
            oligo_length=self.oligo_length,
            start1=self.start1,
            output_dir=self.output_dir,
            max_workers=self.workers,
            batch_size=self.batch_size,
        )

    def to_params(self) -> dict[str, Any]:
        """Flat parameters for run tracking."""
        params: dict[str, Any] = {
            "genome": str(self.genome),
            "oligo_length": self.oligo_length,
            "oligo_step": self.oligo_step,
            "start1": self.start1,
            "workers": self.workers,
            "measurements": ",".join(p.name for p in self.measurements),
            "selector": self.selector.name,
            "outputs": ",".join(self.outputs),
        }
        params.update({f"selector.{k}": v for k, v in self.selector.params.items()})
        params.update(self.weights.to_params())
        return params

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DesignConfig:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Config must be a mapping")
        if not data.get("genome"):
            raise ConfigurationError("Config must contain 'genome'")
        if not data.get("selector"):
            raise ConfigurationError("Config must contain 'selector'")

        def plugins(section: str) -> tuple[PluginConfig, ...]:
            entries = data.get(section) or []
            if not isinstance(entries, list):
                raise ConfigurationError(f"'{section}' must be a list")
            return tuple(PluginConfig.from_value(entry, section) for entry in entries)

        weights = data.get("weights") or {}
        if not isinstance(weights, Mapping):
            raise ConfigurationError("'weights' must be a mapping")
        tracking = data.get("tracking") or {}
        if not isinstance(tracking, Mapping):
            raise ConfigurationError("'tracking' must be a mapping")
        outputs = data.get("outputs") or ["default"]
        if isinstance(outputs, str):
            outputs = [outputs]

        kwargs: dict[str, Any] = {
            "genome": Path(data["genome"]),
            "selector": PluginConfig.from_value(data["selector"], "selector"),
            "output_dir": Path(data.get("output_dir", ".")),
            "oligo_length": _as_int(data, "oligo_length", 60),
            "oligo_step": _as_int(data, "oligo_step", 1),
            "start1": bool(data.get("start1", False)),
            "workers": _as_int(data, "workers", 1),
            "batch_size": _as_int(data, "batch_size", 1024),
            "sequence_filters": plugins("sequence_filters"),
            "measurement_filters": plugins("measurement_filters"),
            "weights": WeightAssignment.from_mapping(weights),
            "outputs": tuple(str(o) for o in outputs),
            "tracking": TrackingConfig(
                enabled=bool(tracking.get("enabled", False)),
                experiment_name=str(tracking.get("experiment_name", "oligotile-design")),
                tracking_uri=tracking.get("tracking_uri"),
                run_name=tracking.get("run_name"),
            ),
        }
        if "measurements" in data:
            kwargs["measurements"] = plugins("measurements")
        return cls(**kwargs)


def _as_int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value for {key}: {value!r}") from exc


def _load_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".json"}:
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc


def load_design_config(path: str | Path) -> DesignConfig:
    """Read and validate a YAML or JSON design configuration."""
    path = Path(path)
    config = DesignConfig.from_dict(_load_config(path))
    _LOGGER.debug("Loaded design config from %s", path)
    return config


__all__ = ["PluginConfig", "TrackingConfig", "DesignConfig", "load_design_config"]
