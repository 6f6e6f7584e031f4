"""Configuration schema definitions."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


DEFAULT_TIMEFRAMES = ["15Min", "1Hour", "4Hour", "1day", "1week"]


@dataclass
class DataConfig:
    """Candle store and universe configuration."""

    # Parquet store root: <data_dir>/<timeframe>/<SYMBOL>.parquet
    data_dir: str = "./Historical/data"
    timeframes: List[str] = field(default_factory=lambda: list(DEFAULT_TIMEFRAMES))

    # Universe settings
    universe_file: Optional[str] = "./backtesters/optionable_stocks.csv"
    benchmark_symbol: str = "SPY"


@dataclass
class SimulationConfig:
    """Trade simulation constants."""

    # Series walk
    warmup_bars: int = 25
    lookback: int = 30
    cooldown: int = 8
    max_holding_bars: int = 12

    # Account
    initial_balance: float = 100.0
    risk_fraction: float = 0.15
    min_risk_amount: float = 30.0

    # Volatility-scaled exits
    atr_period: int = 14
    atr_fallback_pct: float = 0.02
    stop_factor: float = 0.7
    target_factor: float = 1.1
    lock_factor: float = 0.35

    # Numeric floors
    min_stop_distance: float = 0.0001
    rr_epsilon: float = 0.0001


@dataclass
class SchedulerConfig:
    """Batch scheduler configuration."""

    concurrency: int = 2
    round_delay: float = 1.2  # seconds between rounds
    retry_failed: bool = False
    max_retries: int = 1


@dataclass
class StoreConfig:
    """Result store configuration."""

    results_path: str = "./backtesters/log/results.json"


@dataclass
class Config:
    """Main configuration class."""

    data: DataConfig = field(default_factory=DataConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)

    # Global settings
    name: str = "STRATSEL"
    description: str = "Strategy backtest and selection engine"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Validation
    validate_config: bool = True

    def validate(self) -> None:
        """Validate configuration parameters."""
        if not self.validate_config:
            return

        sim = self.simulation
        if sim.warmup_bars < 0:
            raise ValueError("warmup_bars must be non-negative")

        if sim.lookback <= 0:
            raise ValueError("lookback must be positive")

        if sim.cooldown < 0:
            raise ValueError("cooldown must be non-negative")

        if sim.max_holding_bars < 1:
            raise ValueError("max_holding_bars must be at least 1")

        if sim.initial_balance <= 0:
            raise ValueError("initial_balance must be positive")

        if sim.risk_fraction <= 0 or sim.risk_fraction > 1:
            raise ValueError("risk_fraction must be between 0 and 1")

        if sim.min_risk_amount < 0:
            raise ValueError("min_risk_amount must be non-negative")

        if sim.atr_period <= 0:
            raise ValueError("atr_period must be positive")

        if sim.atr_fallback_pct <= 0:
            raise ValueError("atr_fallback_pct must be positive")

        for key in ("stop_factor", "target_factor", "lock_factor"):
            if getattr(sim, key) <= 0:
                raise ValueError(f"{key} must be positive")

        if sim.min_stop_distance <= 0 or sim.rr_epsilon <= 0:
            raise ValueError("min_stop_distance and rr_epsilon must be positive")

        if self.scheduler.concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        if self.scheduler.round_delay < 0:
            raise ValueError("round_delay must be non-negative")

        if self.scheduler.max_retries < 0:
            raise ValueError("max_retries must be non-negative")

        if not self.data.timeframes:
            raise ValueError("at least one timeframe is required")

        if len(set(self.data.timeframes)) != len(self.data.timeframes):
            raise ValueError("timeframes must be unique")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "data": dict(self.data.__dict__),
            "simulation": dict(self.simulation.__dict__),
            "scheduler": dict(self.scheduler.__dict__),
            "store": dict(self.store.__dict__),
            "name": self.name,
            "description": self.description,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "validate_config": self.validate_config,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Config:
        """Create config from dictionary.

        Raises:
            ValueError: On unknown keys or a section that is not a mapping
        """
        unknown = set(data) - set(_SECTIONS) - set(_GLOBALS)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        config = cls()
        for key, section_cls in _SECTIONS.items():
            if key in data:
                setattr(config, key, _build_section(section_cls, key, data[key]))

        for key in _GLOBALS:
            if key in data:
                setattr(config, key, data[key])

        return config


_SECTIONS = {
    "data": DataConfig,
    "simulation": SimulationConfig,
    "scheduler": SchedulerConfig,
    "store": StoreConfig,
}
_GLOBALS = ("name", "description", "log_level", "log_file", "validate_config")


def _build_section(section_cls, key: str, values: Any):
    if values is None:
        return section_cls()
    if not isinstance(values, dict):
        raise ValueError(f"'{key}' must be a mapping")

    allowed = {f.name for f in fields(section_cls)}
    unknown = set(values) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in '{key}': {sorted(unknown)}")
    return section_cls(**values)
