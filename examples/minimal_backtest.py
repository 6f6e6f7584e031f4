#!/usr/bin/env python3
"""Minimal example: pick the best strategy for a synthetic symbol."""

import numpy as np
import pandas as pd

from stratsel.backtest import PerformanceAggregator
from stratsel.data import InMemoryCandleSource
from stratsel.strategies import default_registry
from stratsel.types import Candle


def random_walk(periods, freq, seed):
    rng = np.random.RandomState(seed)
    closes = np.maximum(100 + np.cumsum(rng.normal(0, 1, periods)), 1.0)
    index = pd.date_range("2024-01-01", periods=periods, freq=freq)
    return [
        Candle(timestamp=ts, open=c, high=c + 0.6, low=c - 0.6, close=c, volume=float(rng.randint(500, 3000)))
        for ts, c in zip(index, closes)
    ]


def main():
    """Run every built-in strategy on two timeframes and print the winners."""
    source = InMemoryCandleSource({
        ("DEMO", "1day"): random_walk(500, "D", seed=1),
        ("DEMO", "1week"): random_walk(120, "7D", seed=2),
    })

    aggregator = PerformanceAggregator(source)
    result = aggregator.select_best("DEMO", ["1day", "1week"], default_registry())

    print(f"\nBest strategies for {result.symbol}:")
    print("-" * 40)
    for timeframe, best in result.timeframes.items():
        print(
            f"{timeframe:>6}: {best.strategy or '-':<18} "
            f"win rate {best.win_rate:.2f}% over {best.trades} trades, "
            f"avg RR {best.avg_rr:.2f}"
        )
    print(f"\nOverall win rate: {result.overall_win_rate:.2f}%")


if __name__ == "__main__":
    main()
