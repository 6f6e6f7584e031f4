"""SMA crossover strategy."""

from __future__ import annotations

from typing import Optional

import pandas as pd

from ...types import Direction, Signal, StrategyWindow
from ..base import BaseStrategy


class SmaCrossover(BaseStrategy):
    """Fast/slow simple moving average crossover.

    Goes long when the fast SMA crosses above the slow SMA and short on the
    opposite cross. With ``use_trend_filter`` the cross must agree with the
    higher-timeframe trend (last higher close vs. its own SMA).
    """

    def __init__(self, name: str = "sma_crossover", **kwargs):
        """Initialize SMA crossover strategy.

        Args:
            name: Strategy name
            **kwargs: Strategy parameters
        """
        super().__init__(name, **kwargs)

        self.fast_period = kwargs.get('fast_period', 5)
        self.slow_period = kwargs.get('slow_period', 20)
        self.trend_period = kwargs.get('trend_period', 20)
        self.use_trend_filter = kwargs.get('use_trend_filter', True)

    def validate_parameters(self) -> bool:
        return 0 < self.fast_period < self.slow_period and self.trend_period > 0

    def evaluate(self, window: StrategyWindow) -> Optional[Signal]:
        """Signal on a fresh SMA cross.

        Args:
            window: Current strategy window

        Returns:
            Trading signal or None
        """
        if self.in_cooldown(window) or len(window.prices) < self.slow_period + 1:
            return None

        prices = pd.Series(window.prices)
        fast = prices.rolling(self.fast_period).mean()
        slow = prices.rolling(self.slow_period).mean()

        prev_diff = fast.iloc[-2] - slow.iloc[-2]
        curr_diff = fast.iloc[-1] - slow.iloc[-1]

        if prev_diff <= 0 < curr_diff:
            direction = Direction.LONG
        elif prev_diff >= 0 > curr_diff:
            direction = Direction.SHORT
        else:
            return None

        trend = self._higher_trend(window)
        if self.use_trend_filter and trend is not None and trend != direction:
            return None

        return self.signal(
            direction,
            fast_sma=float(fast.iloc[-1]),
            slow_sma=float(slow.iloc[-1]),
        )

    def _higher_trend(self, window: StrategyWindow) -> Optional[Direction]:
        """Direction of the higher timeframe, None if it cannot be told."""
        context = self.higher_context(window)
        if len(context) < self.trend_period:
            return None

        closes = pd.Series([c.close for c in context[-self.trend_period:]])
        mean = closes.mean()
        last = closes.iloc[-1]
        if last > mean:
            return Direction.LONG
        if last < mean:
            return Direction.SHORT
        return None

    def get_description(self) -> str:
        return f"SMA {self.fast_period}/{self.slow_period} crossover"
