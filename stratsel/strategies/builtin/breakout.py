"""Volume-confirmed range breakout strategy."""

from __future__ import annotations

from typing import Optional

from ...types import Direction, Signal, StrategyWindow
from ..base import BaseStrategy


class BreakoutMomentum(BaseStrategy):
    """Breakout of the recent high/low range on above-average volume.

    This setup looks for a close beyond the highest high (or lowest low) of
    the previous ``range_period`` bars while volume is at least
    ``volume_multiplier`` times its average over the same bars.
    """

    def __init__(self, name: str = "breakout_momentum", **kwargs):
        super().__init__(name, **kwargs)

        self.range_period = kwargs.get('range_period', 20)
        self.volume_multiplier = kwargs.get('volume_multiplier', 1.5)

    def validate_parameters(self) -> bool:
        return self.range_period > 1 and self.volume_multiplier > 0

    def evaluate(self, window: StrategyWindow) -> Optional[Signal]:
        if self.in_cooldown(window) or len(window.candles) < self.range_period + 1:
            return None

        bars = window.frame()
        prior = bars.iloc[-(self.range_period + 1):-1]
        current = bars.iloc[-1]

        avg_volume = prior['Volume'].mean()
        if avg_volume <= 0 or current['Volume'] < avg_volume * self.volume_multiplier:
            return None

        range_high = prior['High'].max()
        range_low = prior['Low'].min()

        if current['Close'] > range_high:
            direction = Direction.LONG
        elif current['Close'] < range_low:
            direction = Direction.SHORT
        else:
            return None

        return self.signal(
            direction,
            range_high=float(range_high),
            range_low=float(range_low),
            volume_ratio=float(current['Volume'] / avg_volume),
        )
