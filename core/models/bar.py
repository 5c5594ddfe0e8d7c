"""Price bar (OHLCV) data model."""

import math
from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


def finite_or_none(value) -> float | None:
    """Coerce a raw numeric input to float, or None if it is not finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class PriceBar(BaseModel):
    """One period of OHLCV data.

    Prices and volume are optional: upstream feeds leave holes on halted
    sessions, and non-finite values are stored as None rather than NaN.
    """

    model_config = ConfigDict(frozen=True)

    date: datetime
    open: float | None = None
    high: float | None = None
    low: float | None = None
    close: float | None = None
    volume: float | None = None
    source: str | None = None

    @field_validator("open", "high", "low", "close", "volume", mode="before")
    @classmethod
    def _coerce_finite(cls, value):
        return finite_or_none(value)

    @property
    def typical_price(self) -> float | None:
        """(high + low + close) / 3, or None if any leg is missing."""
        if self.high is None or self.low is None or self.close is None:
            return None
        return (self.high + self.low + self.close) / 3


def get_closes(bars: Sequence[PriceBar]) -> list[float | None]:
    """Get list of close prices."""
    return [b.close for b in bars]


def get_highs(bars: Sequence[PriceBar]) -> list[float | None]:
    """Get list of high prices."""
    return [b.high for b in bars]


def get_lows(bars: Sequence[PriceBar]) -> list[float | None]:
    """Get list of low prices."""
    return [b.low for b in bars]

