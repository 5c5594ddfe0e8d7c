"""Aggregated insights payload."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.models.bar import PriceBar
from core.models.market import NewsItem, Quote
from core.models.results import (
    ForecastPoint,
    PriceTargets,
    SimulationPoint,
    SimulationSummary,
)
from core.models.signal import Signal, SignalSummary, Trade


class OffsetPoint(BaseModel):
    """Indicator value addressed by a shifted bar index.

    Used by the Ichimoku leading/lagging spans: ``offset_index`` may lie
    past the last bar (leading) or before the first one (lagging).
    """

    model_config = ConfigDict(frozen=True)

    offset_index: int
    value: float | None = None


class Momentum(BaseModel):
    """Change over the latest bar."""

    change: float
    change_percent: float | None = None


class MacdSnapshot(BaseModel):
    macd: float | None = None
    signal: float | None = None
    divergence: float | None = None


class BollingerSnapshot(BaseModel):
    upper: float | None = None
    middle: float | None = None
    lower: float | None = None
    bandwidth: float | None = None


class StochasticSnapshot(BaseModel):
    percent_k: float | None = None
    percent_d: float | None = None


class AdxSnapshot(BaseModel):
    adx: float | None = None
    plus_di: float | None = None
    minus_di: float | None = None


class IchimokuSnapshot(BaseModel):
    conversion_line: float | None = None
    base_line: float | None = None
    leading_span_a: OffsetPoint | None = None
    leading_span_b: OffsetPoint | None = None


class IndicatorSnapshots(BaseModel):
    """Latest value of every indicator."""

    sma: float | None = None
    ema: float | None = None
    rsi: float | None = None
    macd: MacdSnapshot = Field(default_factory=MacdSnapshot)
    bollinger: BollingerSnapshot = Field(default_factory=BollingerSnapshot)
    stochastic: StochasticSnapshot = Field(default_factory=StochasticSnapshot)
    vwap: float | None = None
    adx: AdxSnapshot = Field(default_factory=AdxSnapshot)
    ichimoku: IchimokuSnapshot = Field(default_factory=IchimokuSnapshot)


class InsightsResult(BaseModel):
    """Everything computed for one symbol/range request."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    generated_at: datetime
    range: str
    interval: str
    quote: Quote | None = None
    latest_close: float | None = None
    history: list[PriceBar] = Field(default_factory=list)
    news: list[NewsItem] = Field(default_factory=list)
    indicator: str
    indicator_snapshots: IndicatorSnapshots
    momentum: Momentum | None = None
    signals: list[Signal] = Field(default_factory=list)
    signal_summary: SignalSummary
    simulation: list[SimulationPoint] = Field(default_factory=list)
    trades: list[Trade] = Field(default_factory=list)
    simulation_summary: SimulationSummary
    forecast_model: str
    forecast: list[ForecastPoint] = Field(default_factory=list)
    price_targets: PriceTargets | None = None
    technical_summary: str = ""
    data_source: str = "unknown"
    metadata: dict[str, Any] | None = None
