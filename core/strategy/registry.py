"""Strategy registry for discovering and running classifiers by name.

Usage:
    @register_strategy("my_indicator")
    def my_strategy(bars):
        ...

    result = backtest_strategy(bars, "my_indicator")
    strategies = list_strategies()
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.models.bar import PriceBar
from core.models.signal import Signal
from core.strategy.protocol import Strategy, StrategyResult

logger = logging.getLogger(__name__)

# Global registry: indicator name -> classifier function
_REGISTRY: dict[str, Strategy] = {}


def register_strategy(name: str):
    """Decorator to register a classifier function under a given name.

    Args:
        name: Unique indicator name (e.g., 'sma').

    Returns:
        Decorator that registers the function and returns it unchanged.

    Raises:
        ValueError: If a strategy with the same name is already registered.
    """

    def decorator(func):
        if name in _REGISTRY:
            raise ValueError(
                f"Strategy '{name}' is already registered by {_REGISTRY[name].__name__}"
            )
        _REGISTRY[name] = func
        logger.debug("Registered strategy: %s -> %s", name, func.__name__)
        return func

    return decorator


def get_strategy(name: str) -> Strategy:
    """Get the classifier function by name.

    Args:
        name: Registered indicator name.

    Returns:
        The classifier function.

    Raises:
        KeyError: If no strategy is registered under the given name.
    """
    func = _REGISTRY.get(name)
    if func is None:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none)"
        raise KeyError(
            f"Unknown strategy '{name}'. Available: {available}"
        )
    return func


def list_strategies() -> list[str]:
    """Return a sorted list of registered strategy names."""
    return sorted(_REGISTRY.keys())


def backtest_strategy(bars: Sequence[PriceBar], indicator: str) -> StrategyResult:
    """Classify every bar with the strategy registered for ``indicator``.

    An unknown indicator yields an all-hold stream with empty context
    rather than an error.
    """
    try:
        strategy = get_strategy(indicator)
    except KeyError:
        logger.warning("Unknown indicator %r, emitting hold signals", indicator)
        return StrategyResult(signals=[Signal.hold() for _ in bars])

    result = strategy(bars)
    logger.debug(
        "Strategy %s produced %d signals for %d bars",
        indicator, len(result.signals), len(bars),
    )
    return result
