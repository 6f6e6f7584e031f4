"""Volatility measures used for risk sizing."""

from __future__ import annotations

import math
from typing import List

import pandas as pd

from ..types import Candle, candles_to_frame


def true_range(data: pd.DataFrame) -> pd.Series:
    """Calculate True Range.

    Args:
        data: OHLCV data

    Returns:
        True range series; the first bar falls back to its high-low range
    """
    high = data['High']
    low = data['Low']
    prev_close = data['Close'].shift(1)

    tr1 = high - low
    tr2 = (high - prev_close).abs()
    tr3 = (low - prev_close).abs()

    return pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)


def atr(candles: List[Candle], period: int = 14) -> float:
    """Calculate ATR (Average True Range) at the last candle.

    Simple mean of the last ``period`` true ranges.

    Args:
        candles: Candle window, oldest first
        period: ATR period

    Returns:
        ATR value, NaN when the window holds fewer than ``period + 1`` candles
    """
    if len(candles) < period + 1:
        return float('nan')

    tr = true_range(candles_to_frame(candles)).iloc[1:]
    return float(tr.tail(period).mean())


def default_atr(price: float, fallback_pct: float = 0.02) -> float:
    """Volatility assumed when ATR cannot be computed: a fixed share of price."""
    return abs(price) * fallback_pct


def atr_or_default(
    candles: List[Candle],
    price: float,
    period: int = 14,
    fallback_pct: float = 0.02,
) -> float:
    """ATR over ``candles``, or ``default_atr`` if it is missing or degenerate.

    Args:
        candles: Candle window, oldest first
        price: Reference price for the fallback
        period: ATR period
        fallback_pct: Fallback ATR as a fraction of price

    Returns:
        Positive, finite volatility estimate (0 only for a zero price)
    """
    value = atr(candles, period)
    if not math.isfinite(value) or value <= 0:
        return default_atr(price, fallback_pct)
    return value
