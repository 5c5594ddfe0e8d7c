"""Deterministic synthetic price history.

Used when the history provider is down or returns nothing, so the
dashboard still renders. The series depends only on the symbol and the
end date: the generator is a Park-Miller LCG seeded from the symbol's
character codes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, datetime, time, timedelta, timezone

from core.models.bar import PriceBar

logger = logging.getLogger(__name__)

MODULUS = 2147483647  # 2^31 - 1
MULTIPLIER = 16807
MIN_PRICE = 5.0


def park_miller(seed: int) -> Iterator[float]:
    """Yield floats in [0, 1) from the Park-Miller minimal standard LCG."""
    value = seed or 1
    while True:
        value = (value * MULTIPLIER) % MODULUS
        yield (value - 1) / (MODULUS - 1)


def symbol_seed(symbol: str) -> int:
    return sum(ord(ch) for ch in symbol) % MODULUS


def generate_synthetic_history(
    symbol: str,
    periods: int = 200,
    end: date | None = None,
) -> list[PriceBar]:
    """
    Build a random-walk daily series for ``symbol``.

    Args:
        symbol: Ticker used to seed the generator
        periods: Calendar days to span back from ``end`` (inclusive)
        end: Last calendar day (default: today, UTC)

    Returns:
        Weekday-only PriceBars tagged ``source="synthetic"``; each step
        moves at most 1% and prices never fall below 5
    """
    end = end or datetime.now(timezone.utc).date()
    rand = park_miller(symbol_seed(symbol))

    price = 100 + next(rand) * 20
    bars: list[PriceBar] = []

    for offset in range(periods - 1, -1, -1):
        day = end - timedelta(days=offset)
        if day.weekday() >= 5:
            continue

        change = (next(rand) - 0.5) * 2  # [-1, 1)
        price = max(MIN_PRICE, price * (1 + change * 0.01))
        high = price * (1 + next(rand) * 0.01)
        low = price * (1 - next(rand) * 0.01)
        open_ = price * (1 + (next(rand) - 0.5) * 0.01)
        volume = round(2_000_000 + next(rand) * 4_000_000)

        bars.append(
            PriceBar(
                date=datetime.combine(day, time.min, tzinfo=timezone.utc),
                open=open_,
                high=max(open_, high, price),
                low=min(open_, low, price),
                close=price,
                volume=volume,
                source="synthetic",
            )
        )

    logger.debug("Generated %d synthetic bars for %s", len(bars), symbol)
    return bars
