"""Backtesting engine for STRATSEL."""

from .metrics import summarize_outcomes
from .selector import PerformanceAggregator, trade_weighted_mean, unweighted_mean
from .simulator import SimulationRun, TradeSimulator, position_size, risk_levels

__all__ = [
    "PerformanceAggregator",
    "SimulationRun",
    "TradeSimulator",
    "position_size",
    "risk_levels",
    "summarize_outcomes",
    "trade_weighted_mean",
    "unweighted_mean",
]
