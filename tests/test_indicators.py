"""Tests for technical indicators."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from core.indicators import (
    IndicatorCalculator,
    adx,
    bollinger_bandwidth,
    bollinger_bands,
    ema,
    ichimoku,
    macd,
    rsi,
    sma,
    sma_values,
    stochastic,
    true_range,
    vwap,
)
from core.models.bar import PriceBar


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_bar(
    index: int,
    close: float | None,
    high: float | None = None,
    low: float | None = None,
    volume: float | None = 1000.0,
) -> PriceBar:
    """Build a daily bar; high/low default to close +/- 1."""
    if high is None and close is not None:
        high = close + 1
    if low is None and close is not None:
        low = close - 1
    return PriceBar(
        date=START + timedelta(days=index),
        open=close,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def make_bars(closes) -> list[PriceBar]:
    return [make_bar(i, c) for i, c in enumerate(closes)]


def zigzag(count: int, base: float = 100.0) -> list[float]:
    """Closes alternating +3 / -2 around a drifting base."""
    closes = [base]
    for i in range(1, count):
        closes.append(closes[-1] + (3 if i % 2 else -2))
    return closes


# ---------------------------------------------------------------------------
# Moving averages
# ---------------------------------------------------------------------------

class TestSMA:
    """Tests for SMA calculation."""

    def test_short_input_is_all_none(self):
        bars = make_bars([1, 2, 3])
        result = sma(bars, 20)

        assert len(result) == 3
        assert all(v is None for v in result)

    def test_rising_closes_scenario(self):
        """25 closes 100..124: SMA(20) at the end is the mean of 105..124."""
        bars = make_bars(range(100, 125))
        result = sma(bars, 20)

        assert len(result) == 25
        assert result[18] is None
        assert result[19] == pytest.approx(109.5)
        assert result[-1] == pytest.approx(114.5)

    def test_matches_window_mean(self):
        closes = zigzag(40)
        result = sma(make_bars(closes), 5)

        for i in range(4, 40):
            assert result[i] == pytest.approx(sum(closes[i - 4 : i + 1]) / 5)

    def test_none_close_poisons_window(self):
        closes = [1.0, 2.0, None, 4.0, 5.0, 6.0]
        result = sma(make_bars(closes), 3)

        assert result[2] is None
        assert result[3] is None
        assert result[4] is None
        assert result[5] == pytest.approx(5.0)

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            sma(make_bars([1, 2, 3]), 0)

    def test_sma_values_over_raw_series(self):
        assert sma_values([None, 2.0, 4.0, 6.0], 2) == [None, None, 3.0, 5.0]


class TestEMA:
    """Tests for EMA calculation."""

    def test_seeded_by_first_value(self):
        result = ema([10.0, 20.0], 3)

        # multiplier = 2 / (3 + 1) = 0.5
        assert result == [10.0, 15.0]

    def test_none_carries_previous_value(self):
        result = ema([None, 10.0, None, 20.0], 3)

        assert result == [None, 10.0, 10.0, 15.0]

    def test_non_finite_input_carries_forward(self):
        result = ema([10.0, math.nan, math.inf], 5)

        assert result == [10.0, 10.0, 10.0]

    def test_length_preserved(self):
        assert len(ema([], 10)) == 0
        assert len(ema([1.0] * 7, 10)) == 7


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------

class TestRSI:
    """Tests for RSI with Wilder smoothing."""

    def test_rising_bars_scenario(self):
        """15 strictly rising bars: no losses, RSI is exactly 100."""
        bars = make_bars(range(100, 115))
        result = rsi(bars, 14)

        assert len(result) == 15
        assert all(v is None for v in result[:14])
        assert result[14] == 100.0

    def test_balanced_changes_give_50(self):
        closes = [10.0 if i % 2 == 0 else 11.0 for i in range(15)]
        result = rsi(make_bars(closes), 14)

        assert result[14] == pytest.approx(50.0)

    def test_falling_bars_give_zero(self):
        result = rsi(make_bars(range(130, 100, -1)), 14)

        assert result[-1] == pytest.approx(0.0)

    def test_wilder_smoothing_after_seed(self):
        closes = [10.0 if i % 2 == 0 else 11.0 for i in range(15)] + [12.0]
        result = rsi(make_bars(closes), 14)

        # seed: avg_gain = avg_loss = 0.5; next change is +2
        avg_gain = (0.5 * 13 + 2) / 14
        avg_loss = (0.5 * 13) / 14
        expected = 100 - 100 / (1 + avg_gain / avg_loss)
        assert result[15] == pytest.approx(expected)

    def test_range_bounds(self):
        result = rsi(make_bars(zigzag(80)), 14)

        values = [v for v in result if v is not None]
        assert values
        assert all(0.0 <= v <= 100.0 for v in values)

    def test_none_close_counts_as_no_change(self):
        closes = list(range(100, 115))
        closes[5] = None
        result = rsi(make_bars(closes), 14)

        # Only gains or zero changes, so still 100
        assert result[14] == 100.0

    def test_short_input(self):
        assert rsi(make_bars([1, 2, 3]), 14) == [None, None, None]


class TestMACD:
    """Tests for MACD."""

    def test_lengths_and_seed(self):
        bars = make_bars(zigzag(50))
        result = macd(bars)

        assert len(result.macd) == len(result.signal) == len(result.histogram) == 50
        # Both EMAs seed from the first close
        assert result.macd[0] == 0.0
        assert result.signal[0] == 0.0

    def test_rising_trend_is_positive(self):
        result = macd(make_bars(range(100, 160)))

        assert result.macd[-1] > 0
        assert result.histogram[-1] == pytest.approx(result.macd[-1] - result.signal[-1])

    def test_leading_none_closes(self):
        result = macd(make_bars([None, None, 10.0, 11.0]))

        assert result.macd[:2] == [None, None]
        assert result.macd[2] == 0.0


class TestStochastic:
    """Tests for the stochastic oscillator."""

    def test_zero_range_gives_zero(self):
        bars = [make_bar(i, 50.0, high=50.0, low=50.0) for i in range(20)]
        result = stochastic(bars)

        assert all(v is None for v in result.percent_k[:13])
        assert all(v == 0.0 for v in result.percent_k[13:])
        assert result.percent_d[15] == 0.0

    def test_percent_k_bounds(self):
        bars = make_bars(zigzag(40))
        # Close printed above its own high
        bars.append(make_bar(40, 500.0, high=120.0, low=100.0))
        result = stochastic(bars)

        values = [v for v in result.percent_k if v is not None]
        assert all(0.0 <= v <= 100.0 for v in values)
        assert result.percent_k[-1] == 100.0

    def test_percent_d_is_mean_of_k(self):
        result = stochastic(make_bars(zigzag(30)))

        k = result.percent_k
        assert result.percent_d[20] == pytest.approx((k[18] + k[19] + k[20]) / 3)


# ---------------------------------------------------------------------------
# Volatility
# ---------------------------------------------------------------------------

class TestBollinger:
    """Tests for Bollinger Bands and bandwidth."""

    def test_population_std(self):
        bands = bollinger_bands(make_bars([1.0, 3.0]), window=2, num_std=2)

        assert bands.middle == [None, 2.0]
        assert bands.upper[1] == pytest.approx(4.0)
        assert bands.lower[1] == pytest.approx(0.0)

    def test_constant_closes_collapse_bands(self):
        bands = bollinger_bands(make_bars([100.0] * 25))

        assert bands.upper[-1] == bands.middle[-1] == bands.lower[-1] == 100.0
        assert bollinger_bandwidth(make_bars([100.0] * 25))[-1] == 0.0

    def test_bandwidth_zero_middle_is_none(self):
        result = bollinger_bandwidth(make_bars([0.0] * 25))

        assert result[-1] is None

    def test_bandwidth_formula(self):
        bars = make_bars(zigzag(30))
        bands = bollinger_bands(bars)
        width = bollinger_bandwidth(bars)

        i = 25
        expected = (bands.upper[i] - bands.lower[i]) / bands.middle[i] * 100
        assert width[i] == pytest.approx(expected)
        assert width[18] is None


# ---------------------------------------------------------------------------
# Volume
# ---------------------------------------------------------------------------

class TestVWAP:
    """Tests for cumulative VWAP."""

    def test_cumulative_average(self):
        bars = [
            make_bar(0, 10.0, high=10.0, low=10.0, volume=100),
            make_bar(1, 20.0, high=20.0, low=20.0, volume=300),
        ]
        result = vwap(bars)

        assert result[0] == pytest.approx(10.0)
        assert result[1] == pytest.approx((10 * 100 + 20 * 300) / 400)

    def test_zero_volume_carries_forward(self):
        bars = [
            make_bar(0, 10.0, high=10.0, low=10.0, volume=0),
            make_bar(1, 12.0, high=12.0, low=12.0, volume=50),
            make_bar(2, 99.0, high=99.0, low=99.0, volume=0),
            make_bar(3, 99.0, high=99.0, low=99.0, volume=None),
        ]
        result = vwap(bars)

        assert result == [None, 12.0, 12.0, 12.0]


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------

class TestADX:
    """Tests for ADX / DI."""

    def test_true_range_uses_previous_close(self):
        bars = [
            make_bar(0, 100.0, high=101.0, low=99.0),
            make_bar(1, 110.0, high=111.0, low=108.0),
        ]
        assert true_range(bars) == [None, 11.0]

    def test_uptrend_favours_plus_di(self):
        bars = make_bars(range(100, 160))
        result = adx(bars)

        assert len(result.adx) == len(result.plus_di) == len(result.minus_di) == 60
        assert result.plus_di[0] is None
        assert result.plus_di[-1] > result.minus_di[-1]
        assert 0.0 <= result.adx[-1] <= 100.0

    def test_flat_market_dx_denominator(self):
        bars = [make_bar(i, 100.0) for i in range(30)]
        result = adx(bars)

        # No directional movement: both DIs 0, DX falls back to 0
        assert result.plus_di[-1] == 0.0
        assert result.minus_di[-1] == 0.0
        assert result.adx[-1] == 0.0


class TestIchimoku:
    """Tests for Ichimoku lines and offset spans."""

    def test_positional_lines(self):
        result = ichimoku(make_bars(zigzag(60)))

        assert len(result.conversion_line) == 60
        assert result.conversion_line[7] is None
        assert result.conversion_line[8] is not None
        assert result.base_line[24] is None
        assert result.base_line[25] is not None

    def test_offsets(self):
        result = ichimoku(make_bars(zigzag(60)))

        assert result.leading_span_a[0].offset_index == 26
        assert result.leading_span_a[-1].offset_index == 59 + 26
        assert result.lagging_span[0].offset_index == -26
        assert result.lagging_span[30].value == zigzag(60)[30]
        assert result.leading_span_b[50].value is None
        assert result.leading_span_b[51].value is not None

    def test_span_a_is_mean_of_lines(self):
        result = ichimoku(make_bars(zigzag(60)))

        i = 40
        expected = (result.conversion_line[i] + result.base_line[i]) / 2
        assert result.leading_span_a[i].value == pytest.approx(expected)


class TestIndicatorCalculator:
    """Tests for the latest-value snapshot."""

    def test_empty_bars(self):
        snapshot = IndicatorCalculator().calculate_latest([])

        assert snapshot.sma is None
        assert snapshot.macd.divergence is None

    def test_full_snapshot(self):
        bars = make_bars(zigzag(80))
        snapshot = IndicatorCalculator().calculate_latest(bars)

        assert snapshot.sma == pytest.approx(sma(bars)[-1])
        assert snapshot.rsi is not None
        assert snapshot.macd.divergence == pytest.approx(
            snapshot.macd.macd - snapshot.macd.signal
        )
        assert snapshot.bollinger.bandwidth is not None
        assert snapshot.stochastic.percent_k is not None
        assert snapshot.vwap is not None
        assert snapshot.adx.adx is not None
        assert snapshot.ichimoku.leading_span_b.offset_index == 79 + 26

    def test_short_history_leaves_gaps(self):
        snapshot = IndicatorCalculator().calculate_latest(make_bars([100.0, 101.0]))

        assert snapshot.sma is None
        assert snapshot.rsi is None
        # EMA and VWAP have no warm-up
        assert snapshot.ema is not None
        assert snapshot.vwap is not None
