"""Indicators consumed by the simulator."""

from .volatility import atr, atr_or_default, default_atr, true_range

__all__ = [
    "atr",
    "atr_or_default",
    "default_atr",
    "true_range",
]
