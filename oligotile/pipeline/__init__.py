"""Configuration and orchestration of design runs."""

from .config import DesignConfig, PluginConfig, TrackingConfig, load_design_config
from .design import DesignPipeline, DesignResult, run_design

__all__ = [
    "DesignConfig",
    "PluginConfig",
    "TrackingConfig",
    "load_design_config",
    "DesignPipeline",
    "DesignResult",
    "run_design",
]
