"""Strategy protocol defining the interface all classifiers must implement.

This module provides:
- StrategyResult: Standard return type from a classifier run
- Strategy: Protocol for the plain functions held by the registry
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from core.models.bar import PriceBar
from core.models.signal import Signal


# ---------------------------------------------------------------------------
# StrategyResult: standard return value from a classifier
# ---------------------------------------------------------------------------
@dataclass
class StrategyResult:
    """Result of classifying a bar sequence.

    Attributes:
        signals: Exactly one Signal per input bar, positionally aligned.
        context: Indicator series the strategy used (e.g. ``{"sma": [...]}``).
    """

    signals: list[Signal]
    context: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Strategy Protocol
# ---------------------------------------------------------------------------
class Strategy(Protocol):
    """A classifier maps ordered bars to a per-bar signal stream.

    Implementations must return one signal per bar and default to hold
    wherever no qualifying event occurs.
    """

    def __call__(self, bars: Sequence[PriceBar]) -> StrategyResult:
        ...
