"""Configuration management for STRATSEL."""

from .loader import DEFAULT_CONFIG_PATH, load_config, save_config
from .schema import Config, DataConfig, SchedulerConfig, SimulationConfig, StoreConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "save_config",
    "Config",
    "DataConfig",
    "SchedulerConfig",
    "SimulationConfig",
    "StoreConfig",
]
