"""Backtest metrics calculation."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List

import numpy as np

from ..types import StrategyStats, TradeOutcome


def summarize_outcomes(outcomes: List[TradeOutcome], decimals: int = 2) -> StrategyStats:
    """Reduce closed trades to summary statistics.

    Args:
        outcomes: Closed trades of one simulated series
        decimals: Rounding applied to the published ratios

    Returns:
        Statistics; all zeros when there are no trades
    """
    if not outcomes:
        return StrategyStats.empty()

    trades = len(outcomes)
    wins = sum(1 for t in outcomes if t.is_winner)
    losses = trades - wins

    win_rate = wins / trades * 100.0
    avg_duration = float(np.mean([t.duration for t in outcomes]))
    avg_rr = float(np.mean([t.rr for t in outcomes]))

    return StrategyStats(
        trades=trades,
        wins=wins,
        losses=losses,
        win_rate=round(win_rate, decimals),
        avg_duration=round(avg_duration, decimals),
        avg_rr=round(avg_rr, decimals),
    )


def exit_reason_counts(outcomes: List[TradeOutcome]) -> Dict[str, int]:
    """Number of trades per exit reason."""
    return dict(Counter(t.exit_reason.value for t in outcomes))


def total_profit_loss(outcomes: List[TradeOutcome]) -> float:
    return float(sum(t.profit_loss for t in outcomes))
