"""Momentum snapshot, quote fallback and the plain-English technical summary."""

from __future__ import annotations

from collections.abc import Sequence

from core.models.bar import PriceBar
from core.models.insights import IndicatorSnapshots, Momentum
from core.models.market import Quote
from core.models.results import PriceTargets
from core.models.signal import SignalSummary

RSI_OVERBOUGHT = 70
RSI_OVERSOLD = 30
ADX_TRENDING = 25


def calculate_momentum(bars: Sequence[PriceBar]) -> Momentum | None:
    """Change between the last two closes; None with fewer than two usable closes."""
    if len(bars) < 2:
        return None
    latest, previous = bars[-1].close, bars[-2].close
    if latest is None or previous is None:
        return None
    return Momentum(
        change=latest - previous,
        change_percent=(latest - previous) / previous * 100 if previous else None,
    )


def quote_from_history(symbol: str, bars: Sequence[PriceBar]) -> Quote | None:
    """Synthesise a quote from the last two bars and a 10-bar average volume."""
    if not bars:
        return None
    latest = bars[-1].close
    previous = bars[-2].close if len(bars) >= 2 else None
    recent = bars[-10:]

    return Quote(
        symbol=symbol,
        regular_market_price=latest,
        regular_market_previous_close=previous,
        regular_market_change_percent=(
            (latest - previous) / previous * 100 if latest and previous else None
        ),
        market_cap=None,
        average_daily_volume_10day=sum(b.volume or 0 for b in recent) / len(recent),
        synthetic=True,
    )


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def build_technical_summary(
    snapshots: IndicatorSnapshots,
    momentum: Momentum | None,
    signal_summary: SignalSummary,
    price_targets: PriceTargets | None,
    latest_close: float | None = None,
) -> str:
    """Join one sentence per available reading into a short narrative."""
    parts: list[str] = []

    if momentum and momentum.change_percent is not None:
        direction = "up" if momentum.change_percent >= 0 else "down"
        parts.append(
            f"Price momentum is {direction} {abs(momentum.change_percent):.2f}% on the latest bar."
        )

    rsi = snapshots.rsi
    if rsi is not None:
        if rsi >= RSI_OVERBOUGHT:
            parts.append(f"RSI sits at {_fmt(rsi)}, in overbought territory.")
        elif rsi <= RSI_OVERSOLD:
            parts.append(f"RSI sits at {_fmt(rsi)}, in oversold territory.")
        else:
            parts.append(f"RSI is neutral at {_fmt(rsi)}.")

    divergence = snapshots.macd.divergence
    if divergence is not None:
        bias = "bullish" if divergence >= 0 else "bearish"
        parts.append(f"MACD divergence is {_fmt(divergence)} ({bias}).")

    adx = snapshots.adx
    if adx.adx is not None:
        if adx.adx >= ADX_TRENDING:
            parts.append(f"ADX {_fmt(adx.adx)} indicates a trending market.")
        else:
            parts.append(f"ADX {_fmt(adx.adx)} suggests weak trend strength.")
        if adx.plus_di is not None and adx.minus_di is not None:
            dominance = "buyers" if adx.plus_di > adx.minus_di else "sellers"
            parts.append(
                f"Directional movement favours {dominance} "
                f"(+DI {_fmt(adx.plus_di)} vs -DI {_fmt(adx.minus_di)})."
            )

    bands = snapshots.bollinger
    if bands.upper is not None and bands.lower is not None and latest_close is not None:
        if latest_close > bands.upper:
            parts.append("Price is trading above the upper Bollinger band.")
        elif latest_close < bands.lower:
            parts.append("Price is trading below the lower Bollinger band.")
        else:
            parts.append("Price is inside the Bollinger envelope.")

    parts.append(
        f"Backtest bias: {signal_summary.bias} "
        f"({signal_summary.buy} buy vs {signal_summary.sell} sell signals)."
    )

    if price_targets is not None:
        parts.append(
            f"Model targets: base {_fmt(price_targets.base)}, "
            f"conservative {_fmt(price_targets.conservative)}, "
            f"optimistic {_fmt(price_targets.optimistic)}."
        )

    return " ".join(parts)
