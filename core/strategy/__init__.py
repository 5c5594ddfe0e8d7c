"""Strategy plugin system.

Public API:
- Strategy: Protocol that all classifiers must satisfy
- StrategyResult: Standard return type from a classifier run
- register_strategy: Decorator to register a classifier function
- get_strategy: Look up a classifier by indicator name
- list_strategies: Discover all registered strategies
- backtest_strategy: Run the classifier for an indicator (unknown => all hold)

Importing this package auto-registers all built-in classifiers.
"""

from core.strategy.protocol import Strategy, StrategyResult
from core.strategy.registry import (
    register_strategy,
    get_strategy,
    list_strategies,
    backtest_strategy,
)
from core.strategy.classifiers import grade

# Import built-in strategies to trigger auto-registration
import core.strategy.classifiers  # noqa: F401

__all__ = [
    "Strategy",
    "StrategyResult",
    "register_strategy",
    "get_strategy",
    "list_strategies",
    "backtest_strategy",
    "grade",
]
