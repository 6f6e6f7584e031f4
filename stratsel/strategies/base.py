"""Base strategy class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Union

import pandas as pd

from ..types import Candle, Direction, Signal, StrategyWindow


class BaseStrategy(ABC):
    """Abstract base class for trading strategies.

    A strategy looks at one ``StrategyWindow`` and answers with a
    ``Signal`` or ``None``. It must be pure: the same window always gives
    the same answer.
    """

    def __init__(self, name: str, **kwargs):
        """Initialize strategy.

        Args:
            name: Strategy name
            **kwargs: Strategy-specific parameters
        """
        self.name = name
        self.parameters = kwargs

    @abstractmethod
    def evaluate(self, window: StrategyWindow) -> Optional[Signal]:
        """Evaluate the current bar.

        Args:
            window: Rolling windows and bookkeeping for the current bar

        Returns:
            Trading signal or None
        """
        pass

    def validate_parameters(self) -> bool:
        """Validate strategy parameters.

        Returns:
            True if parameters are valid
        """
        return True

    def get_parameter(self, key: str, default=None):
        """Get a strategy parameter.

        Args:
            key: Parameter key
            default: Default value if parameter not found

        Returns:
            Parameter value
        """
        return self.parameters.get(key, default)

    def set_parameter(self, key: str, value) -> None:
        """Set a strategy parameter.

        Args:
            key: Parameter key
            value: Parameter value
        """
        self.parameters[key] = value

    def signal(self, direction: Union[Direction, str], **metadata) -> Signal:
        """Build a signal tagged with this strategy's name."""
        return Signal(direction=Direction(direction), strategy=self.name, metadata=metadata)

    @staticmethod
    def in_cooldown(window: StrategyWindow) -> bool:
        return window.bars_since_trade < window.cooldown

    @staticmethod
    def higher_context(window: StrategyWindow) -> List[Candle]:
        """Higher-timeframe candles that have closed by the end of the current bar.

        Timestamps mark bar opens, so a daily bar stamped today is still
        forming during today's intraday bars and is left out.
        """
        if not window.candles:
            return []
        now = window.candles[-1].timestamp
        cutoff = min(now, now + _bar_step(window.candles) - _bar_step(window.higher))
        return [c for c in window.higher if c.timestamp <= cutoff]

    def get_description(self) -> str:
        """Get strategy description.

        Returns:
            Strategy description
        """
        return f"{self.name} strategy"

    def get_metadata(self) -> dict:
        """Get strategy metadata.

        Returns:
            Dictionary with strategy metadata
        """
        return {
            'name': self.name,
            'parameters': self.parameters,
            'description': self.get_description(),
        }

    def __repr__(self) -> str:
        """String representation of strategy."""
        return f"{self.__class__.__name__}(name='{self.name}', parameters={self.parameters})"


SignalFunction = Callable[[StrategyWindow], Optional[Union[Signal, Direction, str]]]


class FunctionStrategy(BaseStrategy):
    """Adapts a plain function to the strategy interface.

    The function may return a ``Signal``, a ``Direction``, a direction
    string (``"long"``/``"short"``) or None.
    """

    def __init__(self, name: str, func: SignalFunction, **kwargs):
        super().__init__(name, **kwargs)
        self.func = func

    def evaluate(self, window: StrategyWindow) -> Optional[Signal]:
        result = self.func(window)
        if result is None:
            return None
        if isinstance(result, Signal):
            return result
        return self.signal(result)

    def get_description(self) -> str:
        doc = (self.func.__doc__ or "").strip()
        return doc.splitlines()[0] if doc else super().get_description()


def _bar_step(candles: List[Candle], sample: int = 20) -> pd.Timedelta:
    """Typical spacing between bars, zero when it cannot be measured."""
    if len(candles) < 2:
        return pd.Timedelta(0)
    stamps = pd.Series([c.timestamp for c in candles[-(sample + 1):]])
    return stamps.diff().dropna().median()
