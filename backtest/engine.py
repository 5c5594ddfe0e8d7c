"""Portfolio simulation engine.

Replays a signal stream against price bars and marks the portfolio to
market on every bar. How signals turn into orders is delegated to an
execution policy:

- GraduatedPolicy: scales in/out by signal severity (insights backtest).
- StopTargetPolicy: all-in/all-out with stop-loss and take-profit exits
  (strategy lab).

Both share the same bookkeeping, so the invariants hold for either:
one equity point per bar, cash and shares never negative, and a Trade
recorded for every open and close. A bar without a usable close (missing
or non-positive) is marked at the last usable close and never traded.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from core.models.bar import PriceBar
from core.models.results import SimulationPoint
from core.models.signal import Severity, Signal, Trade, TradeType

logger = logging.getLogger(__name__)

# Share residue below this is treated as a closed position
DUST_SHARES = 1e-6

SEVERITY_WEIGHTS: dict[Severity, float] = {
    Severity.STRONG: 0.5,
    Severity.MEDIUM: 0.3,
    Severity.WEAK: 0.1,
}


@dataclass
class PortfolioState:
    """Mutable cash/position book for one simulation run."""

    cash: float
    shares: float = 0.0
    entry_price: float | None = None
    trades: list[Trade] = field(default_factory=list)

    @property
    def holding(self) -> bool:
        return self.shares > 0

    def value(self, price: float | None) -> float:
        if price is None:
            return self.cash
        return self.cash + self.shares * price

    def change_pct(self, price: float) -> float | None:
        """Percent move from the entry price, None when flat."""
        if not self.entry_price:
            return None
        return (price - self.entry_price) / self.entry_price * 100

    def record(self, trade_type: TradeType, date: datetime, price: float,
               change_pct: float | None = None) -> None:
        self.trades.append(
            Trade(type=trade_type, date=date, price=price, change_pct=change_pct)
        )

    def close_all(self, trade_type: TradeType, date: datetime, price: float) -> None:
        """Sell every share at ``price`` and log the exit."""
        change = self.change_pct(price)
        self.cash += self.shares * price
        self.shares = 0.0
        self.entry_price = None
        self.record(trade_type, date, price, change)


@dataclass
class SimulationResult:
    """Outcome of one simulation run."""

    equity: list[SimulationPoint]
    trades: list[Trade]
    cash: float
    shares: float

    @property
    def final_value(self) -> float | None:
        return self.equity[-1].value if self.equity else None


class ExecutionPolicy:
    """Turns a bar's signal into orders against a PortfolioState."""

    # When True, bar 0 is booked at starting capital and ignored for trading
    skip_first_bar: bool = False

    def on_bar(self, state: PortfolioState, signal: Signal,
               price: float, date: datetime) -> None:
        raise NotImplementedError

    def on_finish(self, state: PortfolioState, last_bar: PriceBar) -> None:
        """Hook run once after the last bar (default: leave positions open)."""


class GraduatedPolicy(ExecutionPolicy):
    """Scale in and out by signal severity.

    A buy while flat invests ``weight * cash``; a sell while holding
    liquidates ``weight * shares``, where weight is 0.5 / 0.3 / 0.1 for
    strong / medium / weak. Open positions are left open at the end.
    """

    skip_first_bar = True

    @staticmethod
    def weight(signal: Signal) -> float:
        return SEVERITY_WEIGHTS.get(signal.label.severity, 1.0)

    def on_bar(self, state, signal, price, date):
        if signal.is_buy and not state.holding:
            to_invest = state.cash * self.weight(signal)
            state.shares += to_invest / price
            state.cash -= to_invest
            if state.holding:
                state.entry_price = price
                state.record(TradeType.BUY, date, price)

        elif signal.is_sell and state.holding:
            change = state.change_pct(price)
            to_sell = state.shares * self.weight(signal)
            state.cash += to_sell * price
            state.shares -= to_sell
            if state.shares <= DUST_SHARES:
                state.shares = 0.0
                state.entry_price = None
            state.record(TradeType.SELL, date, price, change)


class StopTargetPolicy(ExecutionPolicy):
    """All-in/all-out with stop-loss and take-profit exits.

    While holding, the move from entry is checked before the bar's signal:
    ``<= -stop_loss_pct`` exits as STOP, ``>= take_profit_pct`` exits as
    TARGET. A percentage of 0 disables that rule. An open position is
    liquidated at the final bar's close.
    """

    def __init__(self, stop_loss_pct: float = 0.0, take_profit_pct: float = 0.0):
        if stop_loss_pct < 0 or take_profit_pct < 0:
            raise ValueError("stop_loss_pct and take_profit_pct must be >= 0")
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct

    def on_bar(self, state, signal, price, date):
        if state.holding and state.entry_price:
            change = state.change_pct(price)
            if self.stop_loss_pct and change <= -self.stop_loss_pct:
                state.close_all(TradeType.STOP, date, price)
            elif self.take_profit_pct and change >= self.take_profit_pct:
                state.close_all(TradeType.TARGET, date, price)

        if signal.numeric_signal > 0 and not state.holding:
            if state.cash > 0:
                state.shares = state.cash / price
                state.cash = 0.0
                state.entry_price = price
                state.record(TradeType.BUY, date, price)
        elif signal.numeric_signal < 0 and state.holding:
            state.close_all(TradeType.SELL, date, price)

    def on_finish(self, state, last_bar):
        if state.holding and last_bar.close is not None and last_bar.close > 0:
            state.close_all(TradeType.LIQUIDATE, last_bar.date, last_bar.close)


def simulate(
    bars: Sequence[PriceBar],
    signals: Sequence[Signal],
    initial_capital: float,
    policy: ExecutionPolicy,
) -> SimulationResult:
    """
    Replay signals over bars and mark the portfolio to market.

    Args:
        bars: Ordered price bars
        signals: One signal per bar; missing trailing signals count as hold
        initial_capital: Starting cash
        policy: Execution policy deciding orders per bar

    Returns:
        SimulationResult with one equity point per bar
    """
    if initial_capital < 0:
        raise ValueError(f"initial_capital must be >= 0, got {initial_capital}")

    state = PortfolioState(cash=float(initial_capital))
    equity: list[SimulationPoint] = []
    last_price: float | None = None

    for index, bar in enumerate(bars):
        if index == 0 and policy.skip_first_bar:
            equity.append(SimulationPoint(date=bar.date, value=float(initial_capital)))
            if bar.close is not None and bar.close > 0:
                last_price = bar.close
            continue

        price = bar.close
        if price is not None and price > 0:
            last_price = price
            signal = signals[index] if index < len(signals) else Signal.hold()
            policy.on_bar(state, signal, price, bar.date)

        equity.append(SimulationPoint(date=bar.date, value=state.value(last_price)))

    if bars:
        policy.on_finish(state, bars[-1])

    logger.debug(
        "Simulated %d bars with %s: %d trades, final cash %.2f, shares %.6f",
        len(bars), type(policy).__name__, len(state.trades), state.cash, state.shares,
    )

    return SimulationResult(
        equity=equity, trades=state.trades, cash=state.cash, shares=state.shares
    )
