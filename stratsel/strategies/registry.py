"""Strategy registry."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple, Type

from .base import BaseStrategy, FunctionStrategy, SignalFunction


class StrategyRegistry:
    """Ordered registry of trading strategies.

    Iteration follows registration order, which makes tie-breaks between
    equally good strategies reproducible.
    """

    def __init__(self):
        """Initialize strategy registry."""
        self._strategies: Dict[str, Type[BaseStrategy]] = {}
        self._parameters: Dict[str, dict] = {}
        self._instances: Dict[str, BaseStrategy] = {}

    def register(self, name: str, strategy_class: Type[BaseStrategy], **params) -> None:
        """Register a strategy class.

        Args:
            name: Strategy name
            strategy_class: Strategy class
            **params: Parameters used when instantiating the class
        """
        self._strategies[name] = strategy_class
        self._parameters[name] = params
        self._instances.pop(name, None)

    def register_function(self, name: str, func: SignalFunction) -> None:
        """Register a plain signal function under ``name``."""
        self._strategies[name] = FunctionStrategy
        self._parameters[name] = {}
        self._instances[name] = FunctionStrategy(name, func)

    def unregister(self, name: str) -> None:
        """Unregister a strategy.

        Args:
            name: Strategy name
        """
        self._strategies.pop(name, None)
        self._parameters.pop(name, None)
        self._instances.pop(name, None)

    def get_strategy(self, name: str) -> BaseStrategy:
        """Get a strategy instance.

        Args:
            name: Strategy name

        Returns:
            Strategy instance

        Raises:
            KeyError: If strategy is not registered
            ValueError: If the strategy rejects its parameters
        """
        if name not in self._strategies:
            raise KeyError(f"Strategy '{name}' not registered")

        if name not in self._instances:
            strategy = self._strategies[name](name, **self._parameters[name])
            if not strategy.validate_parameters():
                raise ValueError(f"Invalid parameters for strategy '{name}': {strategy.parameters}")
            self._instances[name] = strategy

        return self._instances[name]

    def list_strategies(self) -> List[str]:
        """List all registered strategies in registration order.

        Returns:
            List of strategy names
        """
        return list(self._strategies.keys())

    def has_strategy(self, name: str) -> bool:
        return name in self._strategies

    def get_strategy_info(self, name: str) -> Optional[dict]:
        """Get strategy information.

        Args:
            name: Strategy name

        Returns:
            Strategy information or None if not found
        """
        if name not in self._strategies:
            return None

        strategy_class = self._strategies[name]
        return {
            'name': name,
            'class': strategy_class.__name__,
            'module': strategy_class.__module__,
            'parameters': dict(self._parameters[name]),
            'doc': strategy_class.__doc__,
        }

    def select(self, names: List[str]) -> StrategyRegistry:
        """Sub-registry holding ``names`` in the order given.

        Raises:
            KeyError: If any name is not registered
        """
        subset = StrategyRegistry()
        for name in names:
            if name not in self._strategies:
                raise KeyError(f"Strategy '{name}' not registered")
            subset._strategies[name] = self._strategies[name]
            subset._parameters[name] = self._parameters[name]
            if name in self._instances:
                subset._instances[name] = self._instances[name]
        return subset

    def items(self) -> Iterator[Tuple[str, BaseStrategy]]:
        """Iterate (name, instance) pairs in registration order."""
        for name in self.list_strategies():
            yield name, self.get_strategy(name)

    def clear(self) -> None:
        """Clear all registered strategies."""
        self._strategies.clear()
        self._parameters.clear()
        self._instances.clear()

    def __len__(self) -> int:
        return len(self._strategies)

    def __contains__(self, name: str) -> bool:
        return name in self._strategies


def default_registry() -> StrategyRegistry:
    """Registry with the built-in strategies."""
    from .builtin import BreakoutMomentum, RsiReversal, SmaCrossover

    registry = StrategyRegistry()
    registry.register('sma_crossover', SmaCrossover)
    registry.register('rsi_reversal', RsiReversal)
    registry.register('breakout_momentum', BreakoutMomentum)
    return registry
