"""Technical indicators (pure math, no I/O)."""

from core.indicators.indicators import (
    sma,
    sma_values,
    ema,
    rsi,
    macd,
    bollinger_bands,
    bollinger_bandwidth,
    stochastic,
    vwap,
    true_range,
    adx,
    ichimoku,
    MacdResult,
    BollingerBands,
    StochasticResult,
    AdxResult,
    IchimokuResult,
    IndicatorCalculator,
)

__all__ = [
    "sma",
    "sma_values",
    "ema",
    "rsi",
    "macd",
    "bollinger_bands",
    "bollinger_bandwidth",
    "stochastic",
    "vwap",
    "true_range",
    "adx",
    "ichimoku",
    "MacdResult",
    "BollingerBands",
    "StochasticResult",
    "AdxResult",
    "IchimokuResult",
    "IndicatorCalculator",
]
