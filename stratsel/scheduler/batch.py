"""Bounded-concurrency batch runner over the symbol universe."""

from __future__ import annotations

import logging
import time
from collections import Counter, deque
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional

from ..backtest import PerformanceAggregator
from ..config import SchedulerConfig
from ..store import ResultStore, ResultStoreError
from ..strategies import StrategyRegistry
from ..types import Asset, SymbolResult
from ..utils import format_eta

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    """Outcome of one scheduler run."""

    total: int = 0
    processed: int = 0
    skipped: int = 0
    failed: List[str] = field(default_factory=list)
    elapsed: float = 0.0


class BatchScheduler:
    """Drives every symbol through selection and persistence.

    Work is dispatched in rounds of at most ``concurrency`` symbols, retry
    queue first, with a fixed pause between rounds. A symbol that fails is
    logged and dropped (or queued for retry when ``retry_failed`` is set);
    a failing store write stops the run.
    """

    def __init__(
        self,
        aggregator: PerformanceAggregator,
        store: ResultStore,
        timeframes: List[str],
        config: Optional[SchedulerConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize scheduler.

        Args:
            aggregator: Per-symbol strategy selection
            store: Result store written after each symbol
            timeframes: Timeframes processed for every symbol, in order
            config: Scheduler settings
            sleep: Pause function used between rounds
            clock: Monotonic clock used for progress and ETA
        """
        self.aggregator = aggregator
        self.store = store
        self.timeframes = list(timeframes)
        self.config = config or SchedulerConfig()
        self._sleep = sleep
        self._clock = clock

    def run(self, assets: List[Asset], strategies: StrategyRegistry) -> BatchSummary:
        """Process every asset not yet retested in this cycle.

        Args:
            assets: Universe, in processing order
            strategies: Strategies to compare

        Returns:
            Run summary

        Raises:
            ResultStoreError: If the results file cannot be written
        """
        cfg = self.config
        skip = self.store.retested_symbols()
        pending: Deque[Asset] = deque(a for a in assets if a.symbol not in skip)
        retry: Deque[Asset] = deque()
        attempts: Counter = Counter()

        summary = BatchSummary(total=len(pending), skipped=len(assets) - len(pending))
        logger.info("Skipping %d already-retested symbols", summary.skipped)
        logger.info("Symbols to run: %d", summary.total)

        start = self._clock()

        with ThreadPoolExecutor(max_workers=cfg.concurrency) as executor:
            while pending or retry:
                batch: List[Asset] = []
                while len(batch) < cfg.concurrency and (pending or retry):
                    batch.append(retry.popleft() if retry else pending.popleft())

                futures = {executor.submit(self.process_asset, a, strategies): a for a in batch}
                for future in as_completed(futures):
                    asset = futures[future]
                    try:
                        future.result()
                    except ResultStoreError:
                        raise
                    except Exception as e:
                        logger.error("%s failed: %s", asset.symbol, e)
                        if cfg.retry_failed and attempts[asset.symbol] < cfg.max_retries:
                            attempts[asset.symbol] += 1
                            retry.append(asset)
                        else:
                            summary.failed.append(asset.symbol)
                        continue

                    summary.processed += 1
                    self._log_progress(summary, start)

                if pending or retry:
                    self._sleep(cfg.round_delay)

        self.store.sort_by_win_rate()
        self.store.flush()

        summary.elapsed = self._clock() - start
        logger.info(
            "Backtesting complete: %d processed, %d failed, %d stored results",
            summary.processed, len(summary.failed), len(self.store),
        )
        return summary

    def process_asset(self, asset: Asset, strategies: StrategyRegistry) -> SymbolResult:
        """Select, persist and report one symbol."""
        result = self.aggregator.select_best(asset.symbol, self.timeframes, strategies, name=asset.name)
        status = self.store.upsert(result)
        logger.info(
            "%s | Overall Win Rate: %.2f%% | Replaced: %s",
            asset.symbol, result.overall_win_rate, status,
        )
        return result

    def _log_progress(self, summary: BatchSummary, start: float) -> None:
        elapsed = self._clock() - start
        avg_time = elapsed / summary.processed
        remaining = summary.total - summary.processed - len(summary.failed)
        logger.info(
            "Progress: %d/%d | ETA: %s",
            summary.processed, summary.total, format_eta(avg_time * remaining),
        )
