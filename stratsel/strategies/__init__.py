"""Trading strategies for STRATSEL."""

from .base import BaseStrategy, FunctionStrategy
from .registry import StrategyRegistry, default_registry

__all__ = [
    "BaseStrategy",
    "FunctionStrategy",
    "StrategyRegistry",
    "default_registry",
]
