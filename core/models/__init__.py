"""Domain models shared by the indicator, strategy and simulation layers."""

from core.models.bar import PriceBar, finite_or_none, get_closes, get_highs, get_lows
from core.models.config import (
    DEFAULT_FORECAST_HORIZON,
    DEFAULT_INITIAL_CAPITAL,
    FORECAST_MODELS,
    INDICATORS,
    InsightsOptions,
    LabOptions,
)
from core.models.insights import IndicatorSnapshots, InsightsResult, Momentum, OffsetPoint
from core.models.market import NewsItem, Quote
from core.models.results import (
    ChartPoint,
    ForecastPoint,
    LabMetrics,
    LabResult,
    PriceTargets,
    SimulationPoint,
    SimulationSummary,
)
from core.models.signal import (
    Direction,
    Severity,
    Signal,
    SignalLabel,
    SignalSummary,
    Trade,
    TradeType,
)

__all__ = [
    "PriceBar",
    "finite_or_none",
    "get_closes",
    "get_highs",
    "get_lows",
    "DEFAULT_FORECAST_HORIZON",
    "DEFAULT_INITIAL_CAPITAL",
    "FORECAST_MODELS",
    "INDICATORS",
    "InsightsOptions",
    "LabOptions",
    "IndicatorSnapshots",
    "InsightsResult",
    "Momentum",
    "OffsetPoint",
    "NewsItem",
    "Quote",
    "ChartPoint",
    "ForecastPoint",
    "LabMetrics",
    "LabResult",
    "PriceTargets",
    "SimulationPoint",
    "SimulationSummary",
    "Direction",
    "Severity",
    "Signal",
    "SignalLabel",
    "SignalSummary",
    "Trade",
    "TradeType",
]
