"""Universe loader for tradable symbols."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ...types import Asset
from ...utils import sanitize_symbol

logger = logging.getLogger(__name__)


class UniverseLoader:
    """Load the ordered list of tradable symbols."""

    def __init__(self, universe_file: Optional[str] = None, benchmark_symbol: Optional[str] = "SPY"):
        """Initialize universe loader.

        Args:
            universe_file: Path to universe CSV file. Either one symbol per line
                or a header row with a ``symbol`` column (and optional ``name``)
            benchmark_symbol: Symbol always appended to the universe when absent
        """
        self.universe_file = universe_file
        self.benchmark_symbol = benchmark_symbol
        self._universe: Optional[pd.DataFrame] = None

    def load_universe(self) -> pd.DataFrame:
        """Load universe from file.

        Returns:
            DataFrame with ``symbol`` and ``name`` columns, in file order

        Raises:
            FileNotFoundError: If universe file doesn't exist
            ValueError: If universe file format is invalid
        """
        if self.universe_file is None:
            df = pd.DataFrame({'symbol': pd.Series(dtype=str), 'name': pd.Series(dtype=str)})
        else:
            universe_path = Path(self.universe_file).expanduser()
            if not universe_path.exists():
                raise FileNotFoundError(f"Universe file not found: {universe_path}")

            try:
                df = self._read_csv(universe_path)
            except pd.errors.EmptyDataError:
                logger.warning("Universe file is empty: %s", universe_path)
                df = pd.DataFrame({'symbol': pd.Series(dtype=str), 'name': pd.Series(dtype=str)})
            except (pd.errors.ParserError, UnicodeDecodeError) as e:
                raise ValueError(f"Failed to load universe file: {e}") from e

        df = self._clean(df)
        df = self._ensure_benchmark(df)

        self._universe = df
        return df

    def get_symbols(self) -> List[str]:
        """Get list of symbols from universe.

        Returns:
            List of stock symbols
        """
        if self._universe is None:
            self.load_universe()

        return self._universe['symbol'].tolist()

    def load_assets(self) -> List[Asset]:
        """Get universe entries as assets, in file order.

        Returns:
            List of assets
        """
        if self._universe is None:
            self.load_universe()

        return [
            Asset(symbol=row.symbol, name=row.name or row.symbol)
            for row in self._universe.itertuples(index=False)
        ]

    def _read_csv(self, path: Path) -> pd.DataFrame:
        """Read either a headed CSV or a bare list of symbols."""
        with open(path, 'r', encoding='utf-8') as f:
            first_line = f.readline().strip().lower()

        header = [h.strip() for h in first_line.split(',')]
        if 'symbol' in header:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, na_filter=False)
            df.columns = [str(c).strip().lower() for c in df.columns]
        else:
            df = pd.read_csv(
                path, header=None, dtype=str, skip_blank_lines=True,
                keep_default_na=False, na_filter=False,
            )
            df = df.iloc[:, [0]]
            df.columns = ['symbol']

        if 'name' not in df.columns:
            df['name'] = df['symbol']

        return df[['symbol', 'name']]

    def _clean(self, df: pd.DataFrame) -> pd.DataFrame:
        # Empty cells are missing; literal "NA"/"NULL" are tickers
        raw = df['symbol'].fillna('').astype(str).str.strip()
        df = df[raw != ''].copy()
        df['symbol'] = df['symbol'].map(sanitize_symbol)

        dropped = int(df['symbol'].isna().sum())
        if dropped:
            logger.warning("Dropped %d invalid symbols from universe", dropped)

        df = df.dropna(subset=['symbol'])
        names = df['name'].fillna('').astype(str).str.strip()
        df['name'] = names.where(names != '', df['symbol'])
        df = df.drop_duplicates(subset=['symbol'], keep='first')
        return df.reset_index(drop=True)

    def _ensure_benchmark(self, df: pd.DataFrame) -> pd.DataFrame:
        benchmark = sanitize_symbol(self.benchmark_symbol)
        if benchmark is None or benchmark in set(df['symbol']):
            return df

        extra = pd.DataFrame({'symbol': [benchmark], 'name': [benchmark]})
        return pd.concat([df, extra], ignore_index=True)
