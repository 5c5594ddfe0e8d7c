"""Simulation, forecast and strategy-lab result models."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from core.models.signal import Trade


class SimulationPoint(BaseModel):
    """Mark-to-market portfolio value at one bar."""

    model_config = ConfigDict(frozen=True)

    date: dt.datetime
    value: float


class SimulationSummary(BaseModel):
    """Headline numbers for an equity curve."""

    initial_capital: float
    final_value: float | None = None
    total_return: float | None = None  # percent
    max_drawdown: float = 0.0  # fraction, <= 0


class ForecastPoint(BaseModel):
    """Projected close for a future calendar day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    value: float


class PriceTargets(BaseModel):
    """Base / optimistic / conservative levels derived from a forecast."""

    base: float
    optimistic: float
    conservative: float


class LabMetrics(BaseModel):
    """Strategy vs benchmark headline metrics (returns and drawdown in percent)."""

    final_value: float
    benchmark_final: float
    total_return: float
    benchmark_return: float
    max_drawdown: float


class ChartPoint(BaseModel):
    """Strategy and benchmark equity on the same date."""

    date: dt.datetime
    strategy: float
    benchmark: float | None = None


class LabResult(BaseModel):
    """Output of a strategy-vs-benchmark lab run."""

    metrics: LabMetrics
    trades: list[Trade] = Field(default_factory=list)
    chart: list[ChartPoint] = Field(default_factory=list)
