"""Candle sources."""

from .base import CandleSource, InMemoryCandleSource, higher_timeframe, timeframe_dir
from .parquet import ParquetCandleSource

__all__ = [
    "CandleSource",
    "InMemoryCandleSource",
    "ParquetCandleSource",
    "higher_timeframe",
    "timeframe_dir",
]
