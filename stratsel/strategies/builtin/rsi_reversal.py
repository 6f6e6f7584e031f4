"""RSI reversal strategy."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from ...types import Direction, Signal, StrategyWindow
from ..base import BaseStrategy


def rsi(prices: pd.Series, period: int = 14) -> float:
    """Wilder RSI at the last price; NaN with too little data."""
    if len(prices) < period + 1:
        return float('nan')

    delta = prices.diff().dropna()
    gain = delta.clip(lower=0.0)
    loss = -delta.clip(upper=0.0)

    avg_gain = gain.ewm(alpha=1.0 / period, adjust=False).mean().iloc[-1]
    avg_loss = loss.ewm(alpha=1.0 / period, adjust=False).mean().iloc[-1]

    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


class RsiReversal(BaseStrategy):
    """Mean reversion on RSI extremes.

    Long when RSI drops below ``oversold`` and the last bar closed up,
    short when RSI rises above ``overbought`` and the last bar closed down.
    """

    def __init__(self, name: str = "rsi_reversal", **kwargs):
        super().__init__(name, **kwargs)

        self.rsi_period = kwargs.get('rsi_period', 14)
        self.oversold = kwargs.get('oversold', 30.0)
        self.overbought = kwargs.get('overbought', 70.0)

    def validate_parameters(self) -> bool:
        return self.rsi_period > 1 and 0 < self.oversold < self.overbought < 100

    def evaluate(self, window: StrategyWindow) -> Optional[Signal]:
        if self.in_cooldown(window) or len(window.prices) < self.rsi_period + 2:
            return None

        prices = pd.Series(window.prices, dtype=float)
        value = rsi(prices.iloc[:-1], self.rsi_period)
        if np.isnan(value):
            return None

        last_change = prices.iloc[-1] - prices.iloc[-2]

        if value < self.oversold and last_change > 0:
            return self.signal(Direction.LONG, rsi=value)
        if value > self.overbought and last_change < 0:
            return self.signal(Direction.SHORT, rsi=value)
        return None

    def get_description(self) -> str:
        return f"RSI({self.rsi_period}) reversal {self.oversold:g}/{self.overbought:g}"
