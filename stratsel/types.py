"""Core types and dataclasses for STRATSEL."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass(frozen=True)
class Candle:
    """OHLCV bar data."""

    timestamp: pd.Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float


class Direction(str, Enum):
    """Trade direction."""

    LONG = "long"
    SHORT = "short"


class ExitReason(str, Enum):
    """Why a simulated position was closed."""

    STOP = "stop"
    TARGET = "target"
    PROFIT_LOCK = "profit_lock"
    HORIZON = "horizon"


@dataclass(frozen=True)
class Signal:
    """Trading signal produced by a strategy."""

    direction: Direction
    strategy: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StrategyWindow:
    """Everything a strategy sees at one bar.

    The rolling windows are ordered oldest first and end at the current bar.
    ``higher`` is the full higher-timeframe series of the same symbol.
    """

    prices: List[float]
    candles: List[Candle]
    volumes: List[float]
    higher: List[Candle]
    index: int
    last_trade_index: int
    cooldown: int

    @property
    def bars_since_trade(self) -> int:
        return self.index - self.last_trade_index

    def frame(self) -> pd.DataFrame:
        """Candle window as an OHLCV DataFrame indexed by timestamp."""
        return candles_to_frame(self.candles)


@dataclass
class Position:
    """Open simulated position."""

    direction: Direction
    entry_price: float
    stop: float
    target: float
    size: float
    atr: float
    entry_index: int

    def profit_loss(self, price: float) -> float:
        """Unrealized P/L at ``price``."""
        if self.direction == Direction.LONG:
            return self.size * (price - self.entry_price)
        return self.size * (self.entry_price - price)

    def stop_hit(self, price: float) -> bool:
        if self.direction == Direction.LONG:
            return price <= self.stop
        return price >= self.stop

    def target_hit(self, price: float) -> bool:
        if self.direction == Direction.LONG:
            return price >= self.target
        return price <= self.target


@dataclass(frozen=True)
class TradeOutcome:
    """Closed trade result."""

    direction: Direction
    entry_index: int
    exit_index: int
    entry_price: float
    exit_price: float
    size: float
    profit_loss: float
    duration: int
    risk_pct: float
    reward_pct: float
    rr: float
    exit_reason: ExitReason

    @property
    def is_winner(self) -> bool:
        """Break-even trades count as wins."""
        return self.profit_loss >= 0


@dataclass(frozen=True)
class StrategyStats:
    """Summary statistics of one simulated series."""

    trades: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    avg_duration: float = 0.0
    avg_rr: float = 0.0

    @classmethod
    def empty(cls) -> StrategyStats:
        return cls()


@dataclass(frozen=True)
class TimeframeResult:
    """Best strategy's statistics for one (symbol, timeframe) pair."""

    strategy: str = ""
    trades: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    avg_duration: float = 0.0
    avg_rr: float = 0.0

    @classmethod
    def from_stats(cls, strategy: str, stats: StrategyStats) -> TimeframeResult:
        return cls(
            strategy=strategy,
            trades=stats.trades,
            wins=stats.wins,
            losses=stats.losses,
            win_rate=stats.win_rate,
            avg_duration=stats.avg_duration,
            avg_rr=stats.avg_rr,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "trades": self.trades,
            "wins": self.wins,
            "losses": self.losses,
            "winRate": self.win_rate,
            "avgDuration": self.avg_duration,
            "avgRR": self.avg_rr,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TimeframeResult:
        return cls(
            strategy=str(data.get("strategy", "") or ""),
            trades=int(data.get("trades", 0) or 0),
            wins=int(data.get("wins", 0) or 0),
            losses=int(data.get("losses", 0) or 0),
            win_rate=float(data.get("winRate", 0.0) or 0.0),
            avg_duration=float(data.get("avgDuration", 0.0) or 0.0),
            avg_rr=float(data.get("avgRR", 0.0) or 0.0),
        )


@dataclass(frozen=True)
class SymbolResult:
    """Persisted per-symbol backtest record."""

    symbol: str
    name: str = ""
    overall_win_rate: float = 0.0
    timeframes: Dict[str, TimeframeResult] = field(default_factory=dict)
    retested: str = "no"

    @property
    def is_retested(self) -> bool:
        return self.retested == "yes"

    def best_strategy(self, timeframe: str) -> Optional[str]:
        """Winning strategy for ``timeframe`` or None if nothing won."""
        result = self.timeframes.get(timeframe)
        if result is None or not result.strategy:
            return None
        return result.strategy

    def to_dict(self, replaced: str = "new") -> Dict[str, Any]:
        """JSON layout shared with downstream monitors."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "overallWinRate": self.overall_win_rate,
            "timeframes": {tf: r.to_dict() for tf, r in self.timeframes.items()},
            "replaced": replaced,
            "retested": self.retested,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SymbolResult:
        timeframes = data.get("timeframes") or {}
        return cls(
            symbol=str(data["symbol"]),
            name=str(data.get("name", "") or ""),
            overall_win_rate=float(data.get("overallWinRate", 0.0) or 0.0),
            timeframes={
                str(tf): TimeframeResult.from_dict(r or {})
                for tf, r in timeframes.items()
            },
            retested=str(data.get("retested", "no") or "no"),
        )


@dataclass(frozen=True)
class Asset:
    """Tradable symbol from the universe."""

    symbol: str
    name: str = ""


def candles_to_frame(candles: List[Candle]) -> pd.DataFrame:
    """Convert candles to an OHLCV DataFrame indexed by timestamp."""
    if not candles:
        return pd.DataFrame(columns=["Open", "High", "Low", "Close", "Volume"], dtype=float)

    return pd.DataFrame(
        {
            "Open": [c.open for c in candles],
            "High": [c.high for c in candles],
            "Low": [c.low for c in candles],
            "Close": [c.close for c in candles],
            "Volume": [c.volume for c in candles],
        },
        index=pd.DatetimeIndex([c.timestamp for c in candles], name="timestamp"),
    )


# Type aliases
Bars = pd.DataFrame
