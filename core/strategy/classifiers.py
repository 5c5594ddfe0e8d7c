"""Single-indicator signal classifiers.

Each classifier turns one indicator into a buy/sell/hold stream graded
weak/medium/strong by how far the triggering value sits past its threshold.
Thresholds:

| indicator  | event                               | strong   | medium     |
|------------|-------------------------------------|----------|------------|
| sma        | close crosses SMA(20)               | gap > 2% | gap > 0.5% |
| rsi        | RSI(14) < 30 / > 70                 | > 10     | > 5        |
| macd       | MACD crosses its signal line        | > 0.5    | > 0.1      |
| bollinger  | close outside the bands             | > 1%     | > 0.2%     |
| stochastic | %K/%D crossover while %K < 20 / >80 | > 10     | > 5        |

Percentage thresholds are fractions of the bar's close.
"""

from __future__ import annotations

from collections.abc import Sequence

from core.indicators.indicators import bollinger_bands, macd, rsi, sma, stochastic
from core.models.bar import PriceBar, get_closes
from core.models.signal import Direction, Severity, Signal
from core.strategy.protocol import StrategyResult
from core.strategy.registry import register_strategy

RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
STOCH_OVERSOLD = 20.0
STOCH_OVERBOUGHT = 80.0


def grade(direction: Direction, distance: float, strong: float, medium: float) -> Signal:
    """Build a signal whose severity depends on distance past the trigger.

    Args:
        direction: BUY or SELL
        distance: How far past the threshold the value sits (>= 0)
        strong: Distance above which the signal is strong
        medium: Distance above which the signal is medium

    Returns:
        Graded Signal
    """
    if distance > strong:
        severity = Severity.STRONG
    elif distance > medium:
        severity = Severity.MEDIUM
    else:
        severity = Severity.WEAK
    return Signal.of(direction, severity)


def _holds(count: int) -> list[Signal]:
    return [Signal.hold() for _ in range(count)]


@register_strategy("sma")
def sma_crossover(bars: Sequence[PriceBar]) -> StrategyResult:
    """Close vs SMA(20) crossover.

    Sell when the SMA moves from below the close to at/above it, buy on
    the mirror move.
    """
    closes = get_closes(bars)
    line = sma(bars)
    signals = _holds(len(bars))

    for i in range(1, len(bars)):
        prev_sma, cur_sma = line[i - 1], line[i]
        if prev_sma is None or cur_sma is None:
            continue
        prev_close, close = closes[i - 1], closes[i]

        if prev_sma < prev_close and cur_sma >= close:
            signals[i] = grade(
                Direction.SELL, cur_sma - close, close * 0.02, close * 0.005
            )
        elif prev_sma > prev_close and cur_sma <= close:
            signals[i] = grade(
                Direction.BUY, close - cur_sma, close * 0.02, close * 0.005
            )

    return StrategyResult(signals=signals, context={"sma": line})


@register_strategy("rsi")
def rsi_zones(bars: Sequence[PriceBar]) -> StrategyResult:
    """Buy while RSI is oversold, sell while overbought."""
    line = rsi(bars)
    signals = _holds(len(bars))

    for i, value in enumerate(line):
        if value is None:
            continue
        if value < RSI_OVERSOLD:
            signals[i] = grade(Direction.BUY, RSI_OVERSOLD - value, 10, 5)
        elif value > RSI_OVERBOUGHT:
            signals[i] = grade(Direction.SELL, value - RSI_OVERBOUGHT, 10, 5)

    return StrategyResult(signals=signals, context={"rsi": line})


@register_strategy("macd")
def macd_crossover(bars: Sequence[PriceBar]) -> StrategyResult:
    """MACD line crossing its signal line."""
    result = macd(bars)
    macd_line, signal_line = result.macd, result.signal
    signals = _holds(len(bars))

    for i in range(1, len(bars)):
        prev_m, prev_s = macd_line[i - 1], signal_line[i - 1]
        cur_m, cur_s = macd_line[i], signal_line[i]
        if None in (prev_m, prev_s, cur_m, cur_s):
            continue

        if prev_m < prev_s and cur_m >= cur_s:
            signals[i] = grade(Direction.BUY, cur_m - cur_s, 0.5, 0.1)
        elif prev_m > prev_s and cur_m <= cur_s:
            signals[i] = grade(Direction.SELL, cur_s - cur_m, 0.5, 0.1)

    return StrategyResult(
        signals=signals, context={"macd": macd_line, "signal": signal_line}
    )


@register_strategy("bollinger")
def bollinger_breakout(bars: Sequence[PriceBar]) -> StrategyResult:
    """Close outside the Bollinger envelope (mean reversion)."""
    closes = get_closes(bars)
    bands = bollinger_bands(bars)
    signals = _holds(len(bars))

    for i, close in enumerate(closes):
        upper, lower = bands.upper[i], bands.lower[i]
        if upper is None or lower is None or close is None:
            continue

        if close < lower:
            signals[i] = grade(Direction.BUY, lower - close, close * 0.01, close * 0.002)
        elif close > upper:
            signals[i] = grade(Direction.SELL, close - upper, close * 0.01, close * 0.002)

    return StrategyResult(
        signals=signals,
        context={"upper": bands.upper, "middle": bands.middle, "lower": bands.lower},
    )


@register_strategy("stochastic")
def stochastic_crossover(bars: Sequence[PriceBar]) -> StrategyResult:
    """%K/%D crossover confirmed by the oversold/overbought zone."""
    result = stochastic(bars)
    percent_k, percent_d = result.percent_k, result.percent_d
    signals = _holds(len(bars))

    for i in range(1, len(bars)):
        prev_k, prev_d = percent_k[i - 1], percent_d[i - 1]
        cur_k, cur_d = percent_k[i], percent_d[i]
        if None in (prev_k, prev_d, cur_k, cur_d):
            continue

        if prev_k < prev_d and cur_k >= cur_d and cur_k < STOCH_OVERSOLD:
            signals[i] = grade(Direction.BUY, STOCH_OVERSOLD - cur_k, 10, 5)
        elif prev_k > prev_d and cur_k <= cur_d and cur_k > STOCH_OVERBOUGHT:
            signals[i] = grade(Direction.SELL, cur_k - STOCH_OVERBOUGHT, 10, 5)

    return StrategyResult(
        signals=signals, context={"percent_k": percent_k, "percent_d": percent_d}
    )
