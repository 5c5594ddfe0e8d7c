"""Short-horizon price projection heuristics.

The model names follow the dashboard's options, but none of them is a
fitted time-series model:

- ``simple``: average per-bar change across the history, extended linearly.
- ``arima``: OLS line of close against bar index.
- ``prophet``: the same OLS line fitted to a 7-bar trailing mean.

Projected dates step one calendar day at a time from the last bar, so a
60-day horizon spans weekends even though history is business days only.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import timedelta

import numpy as np
import pandas as pd
import statsmodels.api as sm

from core.models.bar import PriceBar
from core.models.config import DEFAULT_FORECAST_HORIZON
from core.models.results import ForecastPoint, PriceTargets

logger = logging.getLogger(__name__)

PROPHET_SMOOTHING_WINDOW = 7
OPTIMISTIC_FACTOR = 1.08
CONSERVATIVE_FACTOR = 0.92


def _linear_fit(values: Sequence[float]) -> tuple[float, float]:
    """Fit ``value = slope * index + intercept`` by ordinary least squares.

    Returns:
        (slope, intercept); a single point gives a flat line through it.
    """
    y = np.asarray(values, dtype=np.float64)
    if len(y) < 2:
        return 0.0, float(y.mean()) if len(y) else 0.0

    x = sm.add_constant(np.arange(len(y), dtype=np.float64))
    intercept, slope = sm.OLS(y, x).fit().params
    return float(slope), float(intercept)


def _smooth(values: Sequence[float], window: int) -> list[float]:
    """Trailing mean; the first ``window - 1`` points average what exists."""
    return pd.Series(values, dtype="float64").rolling(window, min_periods=1).mean().tolist()


def predict_future_prices(
    bars: Sequence[PriceBar],
    model: str = "simple",
    days: int = DEFAULT_FORECAST_HORIZON,
) -> list[ForecastPoint]:
    """
    Project closes ``days`` calendar days past the last bar.

    Args:
        bars: Ordered price bars; bars without a close are ignored
        model: 'simple', 'arima' or 'prophet'
        days: Number of points to project

    Returns:
        ForecastPoints dated last+1 .. last+days, or [] for empty input
        or an unknown model
    """
    closes = [b.close for b in bars if b.close is not None and math.isfinite(b.close)]
    if not closes or days <= 0:
        return []

    last_date = bars[-1].date.date()
    count = len(closes)

    if model == "simple":
        trend = (closes[-1] - closes[0]) / count
        last_price = closes[-1]

        def project(i: int) -> float:
            return last_price + trend * i

    elif model in ("arima", "prophet"):
        series = closes if model == "arima" else _smooth(closes, PROPHET_SMOOTHING_WINDOW)
        slope, intercept = _linear_fit(series)

        def project(i: int) -> float:
            return slope * (count + i) + intercept

    else:
        logger.warning("Unknown forecast model %r, returning empty forecast", model)
        return []

    return [
        ForecastPoint(date=last_date + timedelta(days=i), value=project(i))
        for i in range(1, days + 1)
    ]


def price_targets(forecast: Sequence[ForecastPoint]) -> PriceTargets | None:
    """Base / optimistic / conservative levels from the final forecast point."""
    if not forecast:
        return None
    base = forecast[-1].value
    return PriceTargets(
        base=base,
        optimistic=max(base * OPTIMISTIC_FACTOR, 0.0),
        conservative=max(base * CONSERVATIVE_FACTOR, 0.0),
    )
