"""Statistics for simulated equity curves and trade logs.

Drawdown convention: a negative fraction of the running peak, so a 25%
peak-to-trough fall is -0.25 and a curve that never falls scores 0.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from core.models.results import SimulationPoint, SimulationSummary
from core.models.signal import Trade, TradeType

logger = logging.getLogger(__name__)

# Trade types that close a position and carry a realised change_pct
EXIT_TYPES = (TradeType.SELL, TradeType.STOP, TradeType.TARGET, TradeType.LIQUIDATE)


def max_drawdown(values: Sequence[float | SimulationPoint]) -> float:
    """
    Most negative peak-to-trough ratio of an equity curve.

    Args:
        values: Equity values or SimulationPoints in time order

    Returns:
        Drawdown as a fraction <= 0; 0 for empty or non-decreasing curves.
        Points where the running peak is non-positive are skipped.
    """
    peak = -math.inf
    worst = 0.0

    for item in values:
        value = item.value if isinstance(item, SimulationPoint) else item
        if value is None or not math.isfinite(value):
            continue
        if value > peak:
            peak = value
        if peak <= 0:
            continue
        drawdown = (value - peak) / peak
        if drawdown < worst:
            worst = drawdown

    return worst


def total_return_pct(final_value: float | None, initial_capital: float) -> float | None:
    """Percent return on starting capital, None when undefined."""
    if final_value is None or not initial_capital:
        return None
    return (final_value - initial_capital) / initial_capital * 100


def summarize_simulation(
    equity: Sequence[SimulationPoint], initial_capital: float
) -> SimulationSummary:
    """Headline numbers for a simulated equity curve."""
    final_value = equity[-1].value if equity else None
    return SimulationSummary(
        initial_capital=initial_capital,
        final_value=final_value,
        total_return=total_return_pct(final_value, initial_capital),
        max_drawdown=max_drawdown(equity),
    )


@dataclass
class ExitStats:
    """Closed trades of one exit type."""

    type: TradeType
    total: int = 0
    wins: int = 0
    losses: int = 0

    @property
    def win_rate(self) -> float:
        resolved = self.wins + self.losses
        return (self.wins / resolved * 100) if resolved > 0 else 0.0


@dataclass
class TradeStats:
    """Aggregate statistics over a trade log."""

    entries: int = 0
    exits: int = 0
    wins: int = 0
    losses: int = 0
    avg_change_pct: float = 0.0
    best_change_pct: float | None = None
    worst_change_pct: float | None = None
    by_exit_type: list[ExitStats] = field(default_factory=list)

    @property
    def win_rate(self) -> float:
        resolved = self.wins + self.losses
        return (self.wins / resolved * 100) if resolved > 0 else 0.0


def calculate_trade_stats(trades: Sequence[Trade]) -> TradeStats:
    """Count entries/exits and score exits by their realised change_pct.

    Exits without a change_pct (no recorded entry) count toward ``exits``
    but not toward wins or losses.
    """
    stats = TradeStats()
    groups: dict[TradeType, ExitStats] = {}
    changes: list[float] = []

    for trade in trades:
        if trade.type == TradeType.BUY:
            stats.entries += 1
            continue
        if trade.type not in EXIT_TYPES:
            continue

        stats.exits += 1
        group = groups.setdefault(trade.type, ExitStats(type=trade.type))
        group.total += 1

        if trade.change_pct is None:
            continue
        changes.append(trade.change_pct)
        if trade.change_pct > 0:
            stats.wins += 1
            group.wins += 1
        else:
            stats.losses += 1
            group.losses += 1

    if changes:
        stats.avg_change_pct = sum(changes) / len(changes)
        stats.best_change_pct = max(changes)
        stats.worst_change_pct = min(changes)

    order = {t: i for i, t in enumerate(EXIT_TYPES)}
    stats.by_exit_type = sorted(groups.values(), key=lambda g: order[g.type])
    return stats
