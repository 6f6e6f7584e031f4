"""Data layer for STRATSEL."""

from .source import CandleSource, InMemoryCandleSource, ParquetCandleSource, higher_timeframe
from .universe import UniverseLoader

__all__ = [
    "CandleSource",
    "InMemoryCandleSource",
    "ParquetCandleSource",
    "UniverseLoader",
    "higher_timeframe",
]
