"""Base candle source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List

import pandas as pd

from ...types import Bars, Candle


# Timeframe label -> on-disk directory name
TIMEFRAME_DIRS: Dict[str, str] = {
    "15min": "15min",
    "1hour": "1hour",
    "4hour": "4hour",
    "1day": "1day",
    "1week": "1week",
}


def timeframe_dir(timeframe: str) -> str:
    """Resolve a timeframe label (``15Min``, ``1Hour``...) to its directory.

    Raises:
        KeyError: If the timeframe is unknown
    """
    key = timeframe.strip().lower()
    if key not in TIMEFRAME_DIRS:
        raise KeyError(f"Unknown timeframe '{timeframe}'")
    return TIMEFRAME_DIRS[key]


def higher_timeframe(timeframe: str) -> str:
    """Context timeframe handed to strategies alongside ``timeframe``."""
    return "1hour" if timeframe.strip().lower() == "15min" else "1day"


class CandleSource(ABC):
    """Abstract base class for candle sources."""

    @abstractmethod
    def load_series(self, symbol: str, timeframe: str) -> List[Candle]:
        """Load the full candle series for a symbol.

        Args:
            symbol: Stock symbol
            timeframe: Timeframe label

        Returns:
            Candles ascending by timestamp, de-duplicated. Empty when no data
            exists; never raises for missing data.
        """
        pass

    def normalize_bars(self, bars: Bars) -> Bars:
        """Normalize raw OHLCV rows.

        Args:
            bars: DataFrame with a timestamp index and open/high/low/close/volume
                columns (any case)

        Returns:
            Sorted, de-duplicated bars with invalid rows removed
        """
        bars = bars.rename(columns=str.lower)
        required_cols = ['open', 'high', 'low', 'close', 'volume']
        missing = [col for col in required_cols if col not in bars.columns]
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        bars = bars[required_cols].copy()

        if not isinstance(bars.index, pd.DatetimeIndex):
            bars.index = pd.to_datetime(bars.index)

        bars = bars.sort_index(kind='mergesort')
        bars = bars[~bars.index.duplicated(keep='last')]

        for col in required_cols:
            bars[col] = pd.to_numeric(bars[col], errors='coerce')

        bars = bars.dropna(subset=['close'])
        bars['volume'] = bars['volume'].fillna(0.0)

        invalid_mask = (
            (bars['high'] < bars['low']) |
            (bars['high'] < bars['close']) |
            (bars['low'] > bars['close'])
        )
        if invalid_mask.any():
            bars = bars[~invalid_mask]

        return bars

    @staticmethod
    def to_candles(bars: Bars) -> List[Candle]:
        """Convert normalized bars to candles."""
        return [
            Candle(
                timestamp=pd.Timestamp(ts),
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume),
            )
            for ts, row in zip(bars.index, bars.itertuples(index=False))
        ]


class InMemoryCandleSource(CandleSource):
    """Candle source backed by a dict, keyed by (symbol, timeframe)."""

    def __init__(self, series: Dict[tuple, List[Candle]] | None = None):
        self._series: Dict[tuple, List[Candle]] = {}
        for (symbol, timeframe), candles in (series or {}).items():
            self.add(symbol, timeframe, candles)

    def add(self, symbol: str, timeframe: str, candles: List[Candle]) -> None:
        self._series[(symbol.upper(), timeframe.lower())] = list(candles)

    def load_series(self, symbol: str, timeframe: str) -> List[Candle]:
        return list(self._series.get((symbol.upper(), timeframe.lower()), []))
