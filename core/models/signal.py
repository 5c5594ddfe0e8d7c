"""Signal and trade data models."""

from collections.abc import Sequence
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class Direction(int, Enum):
    """Signal direction, doubling as the numeric signal value."""

    BUY = 1
    HOLD = 0
    SELL = -1


class Severity(str, Enum):
    """Confidence grade attached to a buy/sell label."""

    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


class SignalLabel(str, Enum):
    """Per-bar classification emitted by a strategy."""

    HOLD = "hold"
    BUY_WEAK = "buy_weak"
    BUY_MEDIUM = "buy_medium"
    BUY_STRONG = "buy_strong"
    SELL_WEAK = "sell_weak"
    SELL_MEDIUM = "sell_medium"
    SELL_STRONG = "sell_strong"

    @classmethod
    def graded(cls, direction: Direction, severity: Severity) -> "SignalLabel":
        """Build a label such as ``buy_strong`` from its two parts."""
        if direction == Direction.HOLD:
            return cls.HOLD
        prefix = "buy" if direction == Direction.BUY else "sell"
        return cls(f"{prefix}_{severity.value}")

    @property
    def direction(self) -> Direction:
        if self.value.startswith("buy"):
            return Direction.BUY
        if self.value.startswith("sell"):
            return Direction.SELL
        return Direction.HOLD

    @property
    def severity(self) -> Severity | None:
        if self == SignalLabel.HOLD:
            return None
        return Severity(self.value.split("_", 1)[1])


class Signal(BaseModel):
    """One bar's trading signal."""

    model_config = ConfigDict(frozen=True)

    label: SignalLabel = SignalLabel.HOLD
    numeric_signal: int = 0

    @model_validator(mode="after")
    def _numeric_matches_label(self) -> "Signal":
        if self.numeric_signal != self.label.direction.value:
            raise ValueError(
                f"numeric_signal {self.numeric_signal} does not match label {self.label.value}"
            )
        return self

    @classmethod
    def hold(cls) -> "Signal":
        return cls()

    @classmethod
    def of(cls, direction: Direction, severity: Severity) -> "Signal":
        return cls(
            label=SignalLabel.graded(direction, severity),
            numeric_signal=direction.value,
        )

    @property
    def is_buy(self) -> bool:
        return self.label.direction == Direction.BUY

    @property
    def is_sell(self) -> bool:
        return self.label.direction == Direction.SELL


class SignalSummary(BaseModel):
    """Counts of buy/sell/hold bars in a signal stream."""

    buy: int = 0
    sell: int = 0
    hold: int = 0

    @classmethod
    def from_signals(cls, signals: Sequence[Signal]) -> "SignalSummary":
        summary = cls()
        for signal in signals:
            if signal.numeric_signal > 0:
                summary.buy += 1
            elif signal.numeric_signal < 0:
                summary.sell += 1
            else:
                summary.hold += 1
        return summary

    @property
    def bias(self) -> str:
        """'bullish', 'bearish' or 'balanced' from the buy/sell balance."""
        if self.buy == self.sell:
            return "balanced"
        return "bullish" if self.buy > self.sell else "bearish"


class TradeType(str, Enum):
    """Simulated position event."""

    BUY = "BUY"
    SELL = "SELL"
    STOP = "STOP"  # Stop loss hit
    TARGET = "TARGET"  # Take profit hit
    LIQUIDATE = "LIQUIDATE"  # Forced exit at end of series


class Trade(BaseModel):
    """A position open/close event recorded by the simulator."""

    model_config = ConfigDict(frozen=True)

    type: TradeType
    date: datetime
    price: float
    change_pct: float | None = None
