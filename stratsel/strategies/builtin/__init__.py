"""Built-in trading strategies."""

from .breakout import BreakoutMomentum
from .rsi_reversal import RsiReversal
from .sma_crossover import SmaCrossover

__all__ = [
    "BreakoutMomentum",
    "RsiReversal",
    "SmaCrossover",
]
