from typing import List, Optional, Sequence

import pandas as pd
import pytest

from stratsel.backtest.simulator import NO_TRADE_INDEX
from stratsel.strategies import FunctionStrategy
from stratsel.types import Candle, Direction


def build_series(
    closes: Sequence[float],
    spread: float = 0.5,
    volume: float = 1000.0,
    start: str = "2024-01-01",
    freq: str = "D",
) -> List[Candle]:
    index = pd.date_range(start, periods=len(closes), freq=freq)
    return [
        Candle(
            timestamp=ts,
            open=float(c),
            high=float(c) + spread,
            low=float(c) - spread,
            close=float(c),
            volume=volume,
        )
        for ts, c in zip(index, closes)
    ]


def once(direction: Direction = Direction.LONG, name: str = "once") -> FunctionStrategy:
    """Strategy that signals only until its first trade."""

    def _signal(window) -> Optional[Direction]:
        return direction if window.last_trade_index == NO_TRADE_INDEX else None

    return FunctionStrategy(name, _signal)


def always(direction: Direction = Direction.LONG, name: str = "always") -> FunctionStrategy:
    return FunctionStrategy(name, lambda window: direction)


def never(name: str = "never") -> FunctionStrategy:
    return FunctionStrategy(name, lambda window: None)


@pytest.fixture
def rising_series() -> List[Candle]:
    return build_series([100.0 + i for i in range(60)])


@pytest.fixture
def flat_series() -> List[Candle]:
    return build_series([100.0] * 50)
