"""Technical indicators over price bar sequences.

Every function returns series aligned 1:1 with the input bars. Positions
without enough history hold None, and NaN/inf never leak into the output:
work is done on float64 arrays where NaN marks a missing value, and the
arrays are converted back to ``list[float | None]`` on the way out.

Two behaviours differ from the usual "missing propagates" convention and
are relied on by the signal classifier:

- ``ema`` seeds from the first non-null value (no warm-up window) and
  carries its last value across null inputs.
- ``vwap`` carries its last value across bars with no volume.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from core.models.bar import PriceBar, get_closes, get_highs, get_lows
from core.models.insights import (
    AdxSnapshot,
    BollingerSnapshot,
    IchimokuSnapshot,
    IndicatorSnapshots,
    MacdSnapshot,
    OffsetPoint,
    StochasticSnapshot,
)

Series = list[float | None]

# Ichimoku (traditional settings)
ICHIMOKU_CONVERSION = 9
ICHIMOKU_BASE = 26
ICHIMOKU_SPAN_B = 52
ICHIMOKU_DISPLACEMENT = 26


# =============================================================================
# Result containers
# =============================================================================

@dataclass
class MacdResult:
    macd: Series
    signal: Series
    histogram: Series


@dataclass
class BollingerBands:
    upper: Series
    middle: Series
    lower: Series


@dataclass
class StochasticResult:
    percent_k: Series
    percent_d: Series


@dataclass
class AdxResult:
    adx: Series
    plus_di: Series
    minus_di: Series


@dataclass
class IchimokuResult:
    """Ichimoku lines.

    ``conversion_line`` and ``base_line`` are positional like every other
    series. The spans are lists of OffsetPoint, one per input bar, whose
    ``offset_index`` is the bar index shifted by the displacement:
    +26 for the leading spans, -26 for the lagging span. Consumers must
    place them by ``offset_index``, not by list position.
    """

    conversion_line: Series
    base_line: Series
    leading_span_a: list[OffsetPoint]
    leading_span_b: list[OffsetPoint]
    lagging_span: list[OffsetPoint]


# =============================================================================
# Array helpers
# =============================================================================

def _to_array(values: Sequence[float | None]) -> np.ndarray:
    return np.array(
        [np.nan if v is None else float(v) for v in values], dtype=np.float64
    )


def _to_series(arr: np.ndarray) -> Series:
    return [float(v) if np.isfinite(v) else None for v in arr]


def _rolling(
    arr: np.ndarray, window: int, reducer: Callable[[np.ndarray], float]
) -> np.ndarray:
    """Apply reducer over each trailing window; NaN before the window fills.

    A window containing NaN reduces to NaN (numpy propagates it).
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    result = np.full(len(arr), np.nan)
    for i in range(window - 1, len(arr)):
        result[i] = reducer(arr[i - window + 1 : i + 1])
    return result


def _last(series: Sequence) -> float | OffsetPoint | None:
    return series[-1] if series else None


# =============================================================================
# Moving averages
# =============================================================================

def sma(bars: Sequence[PriceBar], window: int = 20) -> Series:
    """
    Calculate Simple Moving Average of closes.

    Args:
        bars: Ordered price bars
        window: Lookback period

    Returns:
        List of SMA values, None before index ``window - 1``
    """
    return sma_values(get_closes(bars), window)


def sma_values(values: Sequence[float | None], window: int) -> Series:
    """SMA over an arbitrary value series (e.g. %K)."""
    return _to_series(_rolling(_to_array(values), window, np.mean))


def ema(values: Sequence[float | None], period: int) -> Series:
    """
    Calculate Exponential Moving Average.

    The first non-null value seeds the average as-is. A null (or
    non-finite) input repeats the previous output instead of emitting null.

    Args:
        values: Sequence of values, may contain None
        period: EMA period, multiplier is 2 / (period + 1)

    Returns:
        List of EMA values (same length as input)
    """
    multiplier = 2.0 / (period + 1)
    result: Series = []
    previous: float | None = None

    for value in values:
        if value is None or not math.isfinite(value):
            result.append(previous)
            continue
        if previous is None:
            previous = float(value)
        else:
            previous = (value - previous) * multiplier + previous
        result.append(previous)

    return result


# =============================================================================
# Momentum
# =============================================================================

def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def rsi(bars: Sequence[PriceBar], window: int = 14) -> Series:
    """
    Calculate Relative Strength Index with Wilder's smoothing.

    The first ``window`` changes are summed and averaged to seed the value
    at index ``window``; after that each average is smoothed as
    ``(avg * (window - 1) + current) / window``. A change touching a missing
    close counts as neither gain nor loss.

    Args:
        bars: Ordered price bars
        window: Lookback period

    Returns:
        List of RSI values in [0, 100]; exactly 100 when average loss is 0
    """
    closes = _to_array(get_closes(bars))
    result = np.full(len(closes), np.nan)
    avg_gain = 0.0
    avg_loss = 0.0

    for i in range(1, len(closes)):
        change = closes[i] - closes[i - 1]
        if not np.isfinite(change):
            change = 0.0
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0

        if i <= window:
            avg_gain += gain
            avg_loss += loss
            if i == window:
                avg_gain /= window
                avg_loss /= window
                result[i] = _rsi_value(avg_gain, avg_loss)
            continue

        avg_gain = (avg_gain * (window - 1) + gain) / window
        avg_loss = (avg_loss * (window - 1) + loss) / window
        result[i] = _rsi_value(avg_gain, avg_loss)

    return _to_series(result)


def macd(
    bars: Sequence[PriceBar],
    short_window: int = 12,
    long_window: int = 26,
    signal_window: int = 9,
) -> MacdResult:
    """
    Calculate MACD line, signal line and histogram.

    MACD = EMA(short) - EMA(long), signal = EMA(MACD, signal_window).
    """
    closes = get_closes(bars)
    ema_short = ema(closes, short_window)
    ema_long = ema(closes, long_window)

    macd_line: Series = [
        s - l if s is not None and l is not None else None
        for s, l in zip(ema_short, ema_long)
    ]
    signal_line = ema(macd_line, signal_window)
    histogram: Series = [
        m - s if m is not None and s is not None else None
        for m, s in zip(macd_line, signal_line)
    ]
    return MacdResult(macd=macd_line, signal=signal_line, histogram=histogram)


def stochastic(
    bars: Sequence[PriceBar],
    k_window: int = 14,
    d_window: int = 3,
) -> StochasticResult:
    """
    Calculate Stochastic Oscillator.

    %K = 100 * (close - lowest low) / (highest high - lowest low)
    %D = SMA(%K, d_window)

    A flat window (zero range) gives %K = 0. %K is clipped into [0, 100]
    so a close printed outside its own bar's range cannot escape the scale.
    """
    highs = _to_array(get_highs(bars))
    lows = _to_array(get_lows(bars))
    closes = _to_array(get_closes(bars))

    highest = _rolling(highs, k_window, np.max)
    lowest = _rolling(lows, k_window, np.min)

    percent_k = np.full(len(closes), np.nan)
    for i in range(len(closes)):
        hh, ll, close = highest[i], lowest[i], closes[i]
        if not (np.isfinite(hh) and np.isfinite(ll) and np.isfinite(close)):
            continue
        if hh == ll:
            percent_k[i] = 0.0
        else:
            percent_k[i] = np.clip((close - ll) / (hh - ll) * 100.0, 0.0, 100.0)

    percent_d = _rolling(percent_k, d_window, np.mean)
    return StochasticResult(
        percent_k=_to_series(percent_k), percent_d=_to_series(percent_d)
    )


# =============================================================================
# Volatility
# =============================================================================

def bollinger_bands(
    bars: Sequence[PriceBar],
    window: int = 20,
    num_std: float = 2.0,
) -> BollingerBands:
    """
    Calculate Bollinger Bands.

    middle = SMA(window), upper/lower = middle +/- num_std * population
    standard deviation of the same window.
    """
    closes = _to_array(get_closes(bars))
    middle = _rolling(closes, window, np.mean)
    std = _rolling(closes, window, np.std)  # ddof=0

    return BollingerBands(
        upper=_to_series(middle + num_std * std),
        middle=_to_series(middle),
        lower=_to_series(middle - num_std * std),
    )


def bollinger_bandwidth(
    bars: Sequence[PriceBar],
    window: int = 20,
    num_std: float = 2.0,
) -> Series:
    """(upper - lower) / middle * 100; None where undefined or middle is 0."""
    bands = bollinger_bands(bars, window, num_std)
    result: Series = []
    for upper, middle, lower in zip(bands.upper, bands.middle, bands.lower):
        if upper is None or middle is None or lower is None or middle == 0:
            result.append(None)
            continue
        bandwidth = (upper - lower) / middle * 100.0
        result.append(bandwidth if math.isfinite(bandwidth) else None)
    return result


# =============================================================================
# Volume
# =============================================================================

def vwap(bars: Sequence[PriceBar]) -> Series:
    """
    Calculate Volume Weighted Average Price.

    Cumulative from the first supplied bar, never reset. Bars with no
    volume (or no typical price) leave the running value unchanged.
    """
    result: Series = []
    cum_volume = 0.0
    cum_pv = 0.0
    current: float | None = None

    for bar in bars:
        typical = bar.typical_price
        volume = bar.volume
        if typical is not None and volume is not None and volume > 0:
            cum_volume += volume
            cum_pv += typical * volume
            current = cum_pv / cum_volume
        result.append(current)

    return result


# =============================================================================
# Trend
# =============================================================================

def true_range(bars: Sequence[PriceBar]) -> Series:
    """
    Calculate True Range against the previous close.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))
    Index 0 has no previous bar and is None.
    """
    result: Series = [None] * len(bars)
    for i in range(1, len(bars)):
        cur, prev = bars[i], bars[i - 1]
        if cur.high is None or cur.low is None or prev.close is None:
            continue
        result[i] = max(
            cur.high - cur.low,
            abs(cur.high - prev.close),
            abs(cur.low - prev.close),
        )
    return result


def adx(bars: Sequence[PriceBar], period: int = 14) -> AdxResult:
    """
    Calculate ADX with +DI / -DI.

    TR, +DM and -DM are smoothed with ``ema(period)``; DI = DM / TR * 100;
    DX = |+DI - -DI| / (+DI + -DI) * 100 with the denominator floored to 1
    when both DIs are zero; ADX = ema(DX, period).
    """
    n = len(bars)
    plus_dm: Series = [None] * n
    minus_dm: Series = [None] * n

    for i in range(1, n):
        cur, prev = bars[i], bars[i - 1]
        if None in (cur.high, cur.low, prev.high, prev.low):
            continue
        up_move = cur.high - prev.high
        down_move = prev.low - cur.low
        plus_dm[i] = up_move if up_move > down_move and up_move > 0 else 0.0
        minus_dm[i] = down_move if down_move > up_move and down_move > 0 else 0.0

    smoothed_tr = ema(true_range(bars), period)
    smoothed_plus = ema(plus_dm, period)
    smoothed_minus = ema(minus_dm, period)

    plus_di: Series = [None] * n
    minus_di: Series = [None] * n
    dx: Series = [None] * n

    for i in range(n):
        tr = smoothed_tr[i]
        if not tr or smoothed_plus[i] is None or smoothed_minus[i] is None:
            continue
        p_di = smoothed_plus[i] / tr * 100.0
        m_di = smoothed_minus[i] / tr * 100.0
        plus_di[i] = p_di
        minus_di[i] = m_di
        dx[i] = abs(p_di - m_di) / ((p_di + m_di) or 1.0) * 100.0

    return AdxResult(adx=ema(dx, period), plus_di=plus_di, minus_di=minus_di)


def _midpoint(highs: np.ndarray, lows: np.ndarray, period: int) -> np.ndarray:
    return (_rolling(highs, period, np.max) + _rolling(lows, period, np.min)) / 2.0


def ichimoku(bars: Sequence[PriceBar]) -> IchimokuResult:
    """
    Calculate Ichimoku Kinko Hyo lines (9 / 26 / 52, displacement 26).

    See IchimokuResult for the offset addressing of the spans.
    """
    highs = _to_array(get_highs(bars))
    lows = _to_array(get_lows(bars))

    conversion = _midpoint(highs, lows, ICHIMOKU_CONVERSION)
    base = _midpoint(highs, lows, ICHIMOKU_BASE)
    span_a = (conversion + base) / 2.0
    span_b = _midpoint(highs, lows, ICHIMOKU_SPAN_B)

    span_a_values = _to_series(span_a)
    span_b_values = _to_series(span_b)

    return IchimokuResult(
        conversion_line=_to_series(conversion),
        base_line=_to_series(base),
        leading_span_a=[
            OffsetPoint(offset_index=i + ICHIMOKU_DISPLACEMENT, value=v)
            for i, v in enumerate(span_a_values)
        ],
        leading_span_b=[
            OffsetPoint(offset_index=i + ICHIMOKU_DISPLACEMENT, value=v)
            for i, v in enumerate(span_b_values)
        ],
        lagging_span=[
            OffsetPoint(offset_index=i - ICHIMOKU_DISPLACEMENT, value=bar.close)
            for i, bar in enumerate(bars)
        ],
    )


# =============================================================================
# IndicatorCalculator class
# =============================================================================

class IndicatorCalculator:
    """Calculator for every indicator shown in the insights payload."""

    def __init__(
        self,
        sma_window: int = 20,
        ema_period: int = 20,
        rsi_window: int = 14,
        bollinger_window: int = 20,
        bollinger_std: float = 2.0,
        stoch_k_window: int = 14,
        stoch_d_window: int = 3,
        adx_period: int = 14,
    ):
        self.sma_window = sma_window
        self.ema_period = ema_period
        self.rsi_window = rsi_window
        self.bollinger_window = bollinger_window
        self.bollinger_std = bollinger_std
        self.stoch_k_window = stoch_k_window
        self.stoch_d_window = stoch_d_window
        self.adx_period = adx_period

    def calculate_all(self, bars: Sequence[PriceBar]) -> dict:
        """
        Calculate all indicators for the given bars.

        Returns:
            Dict of indicator name -> series or result container
        """
        return {
            "sma": sma(bars, self.sma_window),
            "ema": ema(get_closes(bars), self.ema_period),
            "rsi": rsi(bars, self.rsi_window),
            "macd": macd(bars),
            "bollinger": bollinger_bands(bars, self.bollinger_window, self.bollinger_std),
            "bandwidth": bollinger_bandwidth(
                bars, self.bollinger_window, self.bollinger_std
            ),
            "stochastic": stochastic(bars, self.stoch_k_window, self.stoch_d_window),
            "vwap": vwap(bars),
            "adx": adx(bars, self.adx_period),
            "ichimoku": ichimoku(bars),
        }

    def calculate_latest(self, bars: Sequence[PriceBar]) -> IndicatorSnapshots:
        """
        Snapshot the latest value of every indicator.

        Always returns a snapshot; fields stay None when there is not enough
        history for that indicator.
        """
        if not bars:
            return IndicatorSnapshots()

        data = self.calculate_all(bars)
        macd_result: MacdResult = data["macd"]
        bands: BollingerBands = data["bollinger"]
        stoch: StochasticResult = data["stochastic"]
        adx_result: AdxResult = data["adx"]
        cloud: IchimokuResult = data["ichimoku"]

        macd_value = _last(macd_result.macd)
        signal_value = _last(macd_result.signal)

        return IndicatorSnapshots(
            sma=_last(data["sma"]),
            ema=_last(data["ema"]),
            rsi=_last(data["rsi"]),
            macd=MacdSnapshot(
                macd=macd_value,
                signal=signal_value,
                divergence=(
                    macd_value - signal_value
                    if macd_value is not None and signal_value is not None
                    else None
                ),
            ),
            bollinger=BollingerSnapshot(
                upper=_last(bands.upper),
                middle=_last(bands.middle),
                lower=_last(bands.lower),
                bandwidth=_last(data["bandwidth"]),
            ),
            stochastic=StochasticSnapshot(
                percent_k=_last(stoch.percent_k),
                percent_d=_last(stoch.percent_d),
            ),
            vwap=_last(data["vwap"]),
            adx=AdxSnapshot(
                adx=_last(adx_result.adx),
                plus_di=_last(adx_result.plus_di),
                minus_di=_last(adx_result.minus_di),
            ),
            ichimoku=IchimokuSnapshot(
                conversion_line=_last(cloud.conversion_line),
                base_line=_last(cloud.base_line),
                leading_span_a=_last(cloud.leading_span_a),
                leading_span_b=_last(cloud.leading_span_b),
            ),
        )
