"""JSON-backed store of per-symbol backtest results."""

from __future__ import annotations

import json
import logging
import shutil
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from ..types import SymbolResult
from ..utils import atomic_write_text

logger = logging.getLogger(__name__)


class ResultStoreError(RuntimeError):
    """The results file could not be written."""


class ResultStore:
    """Persisted collection of ``SymbolResult`` records, one per symbol.

    Every mutation rewrites the whole file. Mutations are serialised by a
    lock so worker threads can call ``upsert`` directly; a single writing
    process is assumed.
    """

    def __init__(self, path: Union[str, Path], read_only: bool = False):
        """Open (or create) the results file.

        Args:
            path: Results JSON path
            read_only: Never create, back up or rewrite the file

        Raises:
            ResultStoreError: If a missing file cannot be created
        """
        self.path = Path(path).expanduser()
        self.read_only = read_only
        self._lock = threading.RLock()
        self._records: List[Dict[str, Any]] = self._load()

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            if not self.read_only:
                self._write([])
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Unreadable results file %s (%s), starting empty", self.path, e)
            self._backup()
            return []

        if not isinstance(data, list):
            logger.warning("Results file %s is not a list, starting empty", self.path)
            self._backup()
            return []

        records = [r for r in data if isinstance(r, dict) and r.get("symbol")]
        if len(records) != len(data):
            logger.warning("Ignored %d malformed entries in %s", len(data) - len(records), self.path)
        return records

    def _backup(self) -> None:
        if self.read_only:
            return
        try:
            shutil.copy2(self.path, Path(str(self.path) + ".bak"))
        except OSError as e:
            logger.warning("Could not back up %s: %s", self.path, e)

    def _write(self, records: List[Dict[str, Any]]) -> None:
        if self.read_only:
            raise ResultStoreError(f"{self.path} is opened read-only")
        try:
            atomic_write_text(self.path, json.dumps(records, indent=2))
        except (OSError, TypeError, ValueError) as e:
            raise ResultStoreError(f"Failed to write results to {self.path}: {e}") from e

    def upsert(self, result: SymbolResult) -> str:
        """Insert or fully replace the entry for ``result.symbol``.

        Args:
            result: Fresh result

        Returns:
            ``"new"`` if the symbol was absent, ``"yes"`` if an entry was replaced

        Raises:
            ResultStoreError: If the file cannot be rewritten
        """
        with self._lock:
            idx = self._index_of(result.symbol)
            status = "new" if idx is None else "yes"
            record = result.to_dict(replaced=status)

            if idx is None:
                self._records.append(record)
            else:
                self._records[idx] = record

            self._write(self._records)
            return status

    def retested_symbols(self) -> Set[str]:
        """Symbols already reprocessed in the current retest cycle."""
        with self._lock:
            return {r["symbol"] for r in self._records if r.get("retested") == "yes"}

    def reset_retested(self, symbols: Optional[Iterable[str]] = None) -> int:
        """Clear the retested flag so the next run processes the symbols again.

        Args:
            symbols: Symbols to reset, all when None

        Returns:
            Number of entries changed
        """
        wanted = None if symbols is None else {s.upper() for s in symbols}
        with self._lock:
            changed = 0
            for record in self._records:
                if wanted is not None and str(record["symbol"]).upper() not in wanted:
                    continue
                if record.get("retested") != "no":
                    record["retested"] = "no"
                    changed += 1
            if changed:
                self._write(self._records)
            return changed

    def sort_by_win_rate(self) -> None:
        """Order entries by overall win rate, best first (stable)."""
        with self._lock:
            self._records.sort(key=lambda r: float(r.get("overallWinRate", 0) or 0), reverse=True)

    def flush(self) -> None:
        """Rewrite the whole file from memory."""
        with self._lock:
            self._write(self._records)

    def get(self, symbol: str) -> Optional[SymbolResult]:
        with self._lock:
            idx = self._index_of(symbol)
            return None if idx is None else SymbolResult.from_dict(self._records[idx])

    def best_strategy(self, symbol: str, timeframe: str) -> Optional[str]:
        """Winning strategy stored for a symbol/timeframe, if any."""
        result = self.get(symbol)
        return None if result is None else result.best_strategy(timeframe)

    def results(self) -> List[SymbolResult]:
        """All stored results in file order."""
        with self._lock:
            return [SymbolResult.from_dict(r) for r in self._records]

    def _index_of(self, symbol: str) -> Optional[int]:
        for i, record in enumerate(self._records):
            if record.get("symbol") == symbol:
                return i
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return self._index_of(symbol) is not None
