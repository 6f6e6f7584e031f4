"""Bar-by-bar trade simulator."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config import SimulationConfig
from ..features import atr_or_default
from ..strategies import BaseStrategy
from ..types import (
    Candle,
    Direction,
    ExitReason,
    Position,
    StrategyStats,
    StrategyWindow,
    TradeOutcome,
)
from .metrics import exit_reason_counts, summarize_outcomes, total_profit_loss

logger = logging.getLogger(__name__)

NO_TRADE_INDEX = -999


def risk_levels(
    entry_price: float,
    direction: Direction,
    atr: float,
    stop_factor: float = 0.7,
    target_factor: float = 1.1,
) -> Tuple[float, float]:
    """Stop and target prices for a new position.

    Args:
        entry_price: Entry price
        direction: Trade direction
        atr: Volatility at entry
        stop_factor: Stop distance in ATRs
        target_factor: Target distance in ATRs

    Returns:
        Tuple of (stop, target)
    """
    stop_distance = atr * stop_factor
    target_distance = atr * target_factor

    if direction == Direction.LONG:
        return entry_price - stop_distance, entry_price + target_distance
    return entry_price + stop_distance, entry_price - target_distance


def position_size(
    balance: float,
    entry_price: float,
    stop_distance: float,
    risk_fraction: float = 0.15,
    min_risk_amount: float = 30.0,
    min_stop_distance: float = 0.0001,
) -> float:
    """Units to buy or sell short.

    The risk budget is ``max(balance * risk_fraction, min_risk_amount)``;
    the size risks that budget over the stop distance, capped by what the
    balance can pay for at ``entry_price``.

    Args:
        balance: Cash available
        entry_price: Entry price, must be positive
        stop_distance: Distance between entry and stop
        risk_fraction: Share of balance put at risk
        min_risk_amount: Floor of the risk budget
        min_stop_distance: Floor of the stop distance

    Returns:
        Position size in units, never negative
    """
    if entry_price <= 0:
        raise ValueError("entry_price must be positive")

    risk_budget = max(balance * risk_fraction, min_risk_amount)
    distance = max(abs(stop_distance), min_stop_distance)
    return max(min(risk_budget / distance, balance / entry_price), 0.0)


@dataclass
class SimulationRun:
    """Everything one simulated series produced."""

    outcomes: List[TradeOutcome] = field(default_factory=list)
    final_balance: float = 0.0
    ruined: bool = False
    ruined_at: Optional[int] = None

    @property
    def stats(self) -> StrategyStats:
        return summarize_outcomes(self.outcomes)


class TradeSimulator:
    """Replays a candle series against one strategy.

    The simulator is flat or holds exactly one position. Entries happen at
    the signal bar's close, exits are evaluated on subsequent closes. The
    account starts at ``initial_balance``; once it is wiped out no further
    positions are opened for the rest of the series.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        """Initialize simulator.

        Args:
            config: Simulation constants, defaults when None
        """
        self.config = config or SimulationConfig()

    def simulate(
        self,
        series: List[Candle],
        higher_series: List[Candle],
        strategy: BaseStrategy,
    ) -> StrategyStats:
        """Simulate and summarize.

        Args:
            series: Candles ascending by timestamp
            higher_series: Higher-timeframe candles of the same symbol
            strategy: Strategy to replay

        Returns:
            Summary statistics
        """
        run = self.run(series, higher_series, strategy)
        logger.debug(
            "%s: %d trades, exits %s, P/L %.2f",
            strategy.name, len(run.outcomes),
            exit_reason_counts(run.outcomes), total_profit_loss(run.outcomes),
        )
        return run.stats

    def simulate_safely(
        self,
        series: List[Candle],
        higher_series: List[Candle],
        strategy: BaseStrategy,
        label: str = "",
    ) -> StrategyStats:
        """Like ``simulate`` but any error degrades to all-zero statistics."""
        try:
            return self.simulate(series, higher_series, strategy)
        except Exception as e:
            logger.error("Error backtesting %s with %s: %s", label or "series", strategy.name, e)
            return StrategyStats.empty()

    def run(
        self,
        series: List[Candle],
        higher_series: List[Candle],
        strategy: BaseStrategy,
    ) -> SimulationRun:
        """Walk the series bar by bar.

        Args:
            series: Candles ascending by timestamp
            higher_series: Higher-timeframe candles of the same symbol
            strategy: Strategy to replay

        Returns:
            Closed trades and account state
        """
        cfg = self.config
        result = SimulationRun(final_balance=cfg.initial_balance)
        start = cfg.warmup_bars
        if len(series) <= start:
            return result

        prices: deque = deque(maxlen=cfg.lookback)
        candles: deque = deque(maxlen=cfg.lookback)
        volumes: deque = deque(maxlen=cfg.lookback)

        # History ending just before the first evaluated bar
        for candle in series[max(0, start - cfg.lookback + 1):start]:
            self._append(candle, prices, candles, volumes)

        balance = cfg.initial_balance
        last_trade_index = NO_TRADE_INDEX
        busy_until = NO_TRADE_INDEX

        for i in range(start, len(series)):
            self._append(series[i], prices, candles, volumes)

            if result.ruined or i <= busy_until:
                continue

            window = StrategyWindow(
                prices=list(prices),
                candles=list(candles),
                volumes=list(volumes),
                higher=higher_series,
                index=i,
                last_trade_index=last_trade_index,
                cooldown=cfg.cooldown,
            )
            signal = strategy.evaluate(window)
            if signal is None or i - last_trade_index < cfg.cooldown:
                continue

            entry_price = series[i].close
            if entry_price <= 0:
                continue

            position = self._open_position(signal.direction, entry_price, window.candles, balance, i)
            balance -= position.size * position.entry_price

            outcome = self._scan_exit(series, position)
            balance += position.size * position.entry_price + outcome.profit_loss

            result.outcomes.append(outcome)
            last_trade_index = i
            busy_until = outcome.exit_index

            if balance <= 0:
                balance = 0.0
                result.ruined = True
                result.ruined_at = outcome.exit_index

        result.final_balance = balance
        return result

    @staticmethod
    def _append(candle: Candle, prices: deque, candles: deque, volumes: deque) -> None:
        prices.append(candle.close)
        candles.append(candle)
        volumes.append(candle.volume)

    def _open_position(
        self,
        direction: Direction,
        entry_price: float,
        window: List[Candle],
        balance: float,
        index: int,
    ) -> Position:
        cfg = self.config
        volatility = atr_or_default(window, entry_price, cfg.atr_period, cfg.atr_fallback_pct)
        stop, target = risk_levels(entry_price, direction, volatility, cfg.stop_factor, cfg.target_factor)
        size = position_size(
            balance,
            entry_price,
            abs(entry_price - stop),
            cfg.risk_fraction,
            cfg.min_risk_amount,
            cfg.min_stop_distance,
        )
        return Position(
            direction=direction,
            entry_price=entry_price,
            stop=stop,
            target=target,
            size=size,
            atr=volatility,
            entry_index=index,
        )

    def _scan_exit(self, series: List[Candle], position: Position) -> TradeOutcome:
        """Scan forward from the bar after entry until an exit triggers.

        Exit priority on the same bar: stop, target, profit lock. Without
        any trigger the trade closes at the last scanned close.
        """
        cfg = self.config
        entry = position.entry_price
        lock_threshold = position.size * position.atr * cfg.lock_factor
        end = min(position.entry_index + cfg.max_holding_bars, len(series))

        profit_loss = 0.0
        duration = 0
        worst = entry
        exit_price = entry
        exit_index = position.entry_index
        reason = ExitReason.HORIZON

        for j in range(position.entry_index + 1, end):
            price = series[j].close
            duration += 1
            if position.direction == Direction.LONG:
                worst = min(worst, price)
            else:
                worst = max(worst, price)
            profit_loss = position.profit_loss(price)
            exit_price = price
            exit_index = j

            if position.stop_hit(price):
                reason = ExitReason.STOP
                break
            if position.target_hit(price):
                reason = ExitReason.TARGET
                break
            if profit_loss >= lock_threshold:
                reason = ExitReason.PROFIT_LOCK
                break

        risk_pct = abs(entry - worst) / entry
        reward_pct = abs(exit_price - entry) / entry
        rr = reward_pct / max(risk_pct, cfg.rr_epsilon)

        return TradeOutcome(
            direction=position.direction,
            entry_index=position.entry_index,
            exit_index=exit_index,
            entry_price=entry,
            exit_price=exit_price,
            size=position.size,
            profit_loss=profit_loss,
            duration=duration,
            risk_pct=risk_pct,
            reward_pct=reward_pct,
            rr=rr,
            exit_reason=reason,
        )
