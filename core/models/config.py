"""Request option models."""

from __future__ import annotations

from pydantic import BaseModel

# Names accepted by the strategy registry and the forecaster.
# Anything else degrades to an all-hold stream / empty forecast.
INDICATORS: tuple[str, ...] = ("sma", "rsi", "macd", "bollinger", "stochastic")
FORECAST_MODELS: tuple[str, ...] = ("simple", "arima", "prophet")

DEFAULT_FORECAST_HORIZON = 60
DEFAULT_INITIAL_CAPITAL = 10000.0


class InsightsOptions(BaseModel):
    """Parameters for one insights computation."""

    range: str = "1y"
    interval: str = "1d"
    indicator: str = "sma"
    forecast_model: str = "simple"
    forecast_horizon: int = DEFAULT_FORECAST_HORIZON
    initial_capital: float = DEFAULT_INITIAL_CAPITAL
    include_news: bool = True


class LabOptions(BaseModel):
    """Parameters for a strategy-vs-benchmark lab run."""

    range: str = "1y"
    interval: str = "1d"
    indicator: str = "sma"
    benchmark_indicator: str = "sma"
    initial_capital: float = DEFAULT_INITIAL_CAPITAL

    # Percent moves from entry; 0 disables the rule
    stop_loss_pct: float = 5.0
    take_profit_pct: float = 10.0
