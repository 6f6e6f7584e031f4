"""STRATSEL - Strategy backtest and selection engine."""

__version__ = "1.0.0"

from .config import load_config
from .types import Candle, Direction, Signal, StrategyStats, SymbolResult, TimeframeResult

__all__ = [
    "Candle",
    "Direction",
    "Signal",
    "StrategyStats",
    "SymbolResult",
    "TimeframeResult",
    "load_config",
]
