"""Best-strategy selection per symbol and timeframe."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from ..config import SimulationConfig
from ..data import CandleSource, higher_timeframe
from ..strategies import StrategyRegistry
from ..types import Candle, SymbolResult, TimeframeResult
from .simulator import TradeSimulator

logger = logging.getLogger(__name__)

WeightingPolicy = Callable[[Dict[str, TimeframeResult]], float]


def unweighted_mean(results: Dict[str, TimeframeResult]) -> float:
    """Plain mean of the winning win rates; every timeframe counts the same."""
    if not results:
        return 0.0
    return sum(r.win_rate for r in results.values()) / len(results)


def trade_weighted_mean(results: Dict[str, TimeframeResult]) -> float:
    """Win rates weighted by the number of trades behind them."""
    total = sum(r.trades for r in results.values())
    if total == 0:
        return 0.0
    return sum(r.win_rate * r.trades for r in results.values()) / total


class PerformanceAggregator:
    """Runs every strategy on every timeframe of a symbol and keeps the best."""

    def __init__(
        self,
        source: CandleSource,
        config: Optional[SimulationConfig] = None,
        weighting: WeightingPolicy = unweighted_mean,
    ):
        """Initialize aggregator.

        Args:
            source: Candle source
            config: Simulation constants
            weighting: Policy turning per-timeframe results into the overall score
        """
        self.source = source
        self.simulator = TradeSimulator(config)
        self.weighting = weighting

    def select_best(
        self,
        symbol: str,
        timeframes: List[str],
        strategies: StrategyRegistry,
        name: Optional[str] = None,
    ) -> SymbolResult:
        """Pick the best strategy for each timeframe.

        Timeframes are processed in the order given; strategies in registry
        order. Only a strictly higher win rate replaces the current best, so
        ties keep the strategy registered first.

        Args:
            symbol: Stock symbol
            timeframes: Timeframe labels
            strategies: Strategies to compare
            name: Display name, defaults to the symbol

        Returns:
            Fresh result flagged as retested
        """
        results: Dict[str, TimeframeResult] = {}
        for timeframe in timeframes:
            results[timeframe] = self.best_for_timeframe(symbol, timeframe, strategies)

        overall = round(self.weighting(results), 2)
        return SymbolResult(
            symbol=symbol,
            name=name or symbol,
            overall_win_rate=overall,
            timeframes=results,
            retested="yes",
        )

    def best_for_timeframe(
        self,
        symbol: str,
        timeframe: str,
        strategies: StrategyRegistry,
    ) -> TimeframeResult:
        """Best strategy for one timeframe; ``strategy == ""`` if none won."""
        series = self._load(symbol, timeframe)
        higher = self._load(symbol, higher_timeframe(timeframe))

        best = TimeframeResult()
        for strategy_name, strategy in strategies.items():
            stats = self.simulator.simulate_safely(
                series, higher, strategy, label=f"{symbol} {timeframe}"
            )
            logger.debug(
                "%s %s %s: %d trades, %.2f%% win rate",
                symbol, timeframe, strategy_name, stats.trades, stats.win_rate,
            )
            if stats.win_rate > best.win_rate:
                best = TimeframeResult.from_stats(strategy_name, stats)

        return best

    def _load(self, symbol: str, timeframe: str) -> List[Candle]:
        try:
            return self.source.load_series(symbol, timeframe)
        except Exception as e:
            logger.error("Failed loading %s %s: %s", symbol, timeframe, e)
            return []
