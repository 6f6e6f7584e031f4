"""Parquet-backed candle store reader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd
import pyarrow.parquet as pq

from .base import CandleSource, timeframe_dir
from ...types import Bars, Candle
from ...utils import sanitize_symbol

logger = logging.getLogger(__name__)

TIME_COLUMNS = ("time", "timestamp", "ts", "t")


class ParquetCandleSource(CandleSource):
    """Reads ``<data_dir>/<timeframe>/<SYMBOL>.parquet`` files."""

    def __init__(self, data_dir: str = "./Historical/data"):
        """Initialize source.

        Args:
            data_dir: Root directory of the candle store
        """
        self.data_dir = Path(data_dir).expanduser()

    def get_path(self, symbol: str, timeframe: str) -> Optional[Path]:
        """Path of the parquet file for a symbol/timeframe.

        Args:
            symbol: Stock symbol
            timeframe: Timeframe label

        Returns:
            File path, or None if the symbol or timeframe is invalid
        """
        clean = sanitize_symbol(symbol)
        if clean is None:
            return None
        try:
            folder = timeframe_dir(timeframe)
        except KeyError:
            return None
        return self.data_dir / folder / f"{clean}.parquet"

    def load_series(self, symbol: str, timeframe: str) -> List[Candle]:
        path = self.get_path(symbol, timeframe)
        if path is None:
            logger.error("Failed reading %s %s: invalid symbol or timeframe", symbol, timeframe)
            return []

        if not path.exists():
            logger.error("Failed reading %s %s: parquet not found: %s", symbol, timeframe, path)
            return []

        try:
            bars = self._read_bars(path)
        except Exception as e:
            logger.error("Failed reading %s %s: %s", symbol, timeframe, e)
            return []

        return self.to_candles(bars)

    def _read_bars(self, path: Path) -> Bars:
        """Read and normalize a parquet file.

        Args:
            path: Parquet file path

        Returns:
            Normalized bars
        """
        table = pq.read_table(path)
        data = table.to_pandas()

        if data.empty:
            return self.normalize_bars(
                pd.DataFrame(columns=['open', 'high', 'low', 'close', 'volume'],
                             index=pd.DatetimeIndex([]))
            )

        lowered = {c: str(c).lower() for c in data.columns}
        data = data.rename(columns=lowered)

        time_col = next((c for c in TIME_COLUMNS if c in data.columns), None)
        if time_col is not None:
            data = data.set_index(_to_datetime(data[time_col]))
            data = data.drop(columns=[time_col])

        return self.normalize_bars(data)


def _to_datetime(values: pd.Series) -> pd.DatetimeIndex:
    """Parse epoch seconds/milliseconds or datetime-like values."""
    if pd.api.types.is_numeric_dtype(values):
        # Epoch in milliseconds once past ~2001-09 in seconds
        unit = "ms" if values.abs().max() > 1e11 else "s"
        return pd.DatetimeIndex(pd.to_datetime(values, unit=unit))
    return pd.DatetimeIndex(pd.to_datetime(values))
