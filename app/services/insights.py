"""Insights aggregator.

Fetches market data for a symbol, degrades gracefully when providers
fail, and runs the full pipeline: indicators -> signals -> {simulation,
forecast} -> technical summary.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import Any, TypeVar

from backtest.engine import GraduatedPolicy, simulate
from backtest.stats import summarize_simulation
from core.errors import InvalidRequestError, NoHistoricalDataError
from core.forecast import predict_future_prices, price_targets
from core.indicators import IndicatorCalculator
from core.models.config import InsightsOptions
from core.models.insights import InsightsResult
from core.models.signal import SignalSummary
from core.strategy import backtest_strategy

from app.clients import HistoryProvider, NewsProvider, ProfileProvider, QuoteProvider
from app.services.summary import build_technical_summary, calculate_momentum, quote_from_history
from app.services.synthetic import generate_synthetic_history

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _contained(label: str, symbol: str, call: Awaitable[T], default: T) -> T:
    """Await a provider call, logging and substituting ``default`` on failure."""
    try:
        return await call
    except Exception as e:
        logger.warning("%s fetch failed for %s: %s", label, symbol, e)
        return default


async def _constant(value: T) -> T:
    return value


def validate_options(symbol: str, options: InsightsOptions) -> str:
    """Normalise the symbol and reject unusable parameters."""
    symbol = (symbol or "").strip()
    if not symbol:
        raise InvalidRequestError('Query parameter "symbol" is required.')
    if options.initial_capital <= 0:
        raise InvalidRequestError("Initial capital must be greater than zero.")
    if options.forecast_horizon < 0:
        raise InvalidRequestError("Forecast horizon must not be negative.")
    return symbol


class InsightsService:
    """Compute the insights payload for one symbol."""

    def __init__(
        self,
        history: HistoryProvider,
        quotes: QuoteProvider | None = None,
        news: NewsProvider | None = None,
        profiles: ProfileProvider | None = None,
        synthetic_fallback: bool = True,
        synthetic_periods: int = 200,
        calculator: IndicatorCalculator | None = None,
    ):
        self.history = history
        self.quotes = quotes
        self.news = news
        self.profiles = profiles
        self.synthetic_fallback = synthetic_fallback
        self.synthetic_periods = synthetic_periods
        self.calculator = calculator or IndicatorCalculator()

    async def compute(
        self, symbol: str, options: InsightsOptions | None = None
    ) -> InsightsResult:
        """
        Fetch data and run every analysis for ``symbol``.

        Args:
            symbol: Ticker to analyse
            options: Range, indicator, forecast and capital settings

        Returns:
            A freshly built InsightsResult

        Raises:
            InvalidRequestError: Missing symbol or invalid numeric options
            NoHistoricalDataError: No history from the provider and the
                synthetic fallback is disabled
        """
        options = options or InsightsOptions()
        symbol = validate_options(symbol, options)
        start_time = time.time()

        history, quote, news, profile = await asyncio.gather(
            _contained(
                "History", symbol,
                self.history.get_history(symbol, options.range, options.interval), [],
            ),
            _contained("Quote", symbol, self.quotes.get_quote(symbol), None)
            if self.quotes else _constant(None),
            _contained("News", symbol, self.news.get_news(symbol), [])
            if self.news and options.include_news else _constant([]),
            _contained("Profile", symbol, self.profiles.get_profile(symbol), None)
            if self.profiles else _constant(None),
        )

        if not history and self.synthetic_fallback:
            logger.warning("No history for %s, using synthetic series", symbol)
            history = generate_synthetic_history(symbol, self.synthetic_periods)

        if not history:
            raise NoHistoricalDataError()

        if quote is None:
            logger.warning("No quote for %s, deriving it from history", symbol)
            quote = quote_from_history(symbol, history)

        result = self._analyse(symbol, options, history, quote, news, profile)
        logger.info(
            "Insights for %s (%s, %d bars, %s) computed in %.3fs",
            symbol, options.indicator, len(history), result.data_source,
            time.time() - start_time,
        )
        return result

    def _analyse(
        self,
        symbol: str,
        options: InsightsOptions,
        history: list,
        quote: Any,
        news: list,
        profile: dict | None,
    ) -> InsightsResult:
        signals = backtest_strategy(history, options.indicator).signals
        signal_summary = SignalSummary.from_signals(signals)

        simulation = simulate(history, signals, options.initial_capital, GraduatedPolicy())
        simulation_summary = summarize_simulation(simulation.equity, options.initial_capital)

        forecast = predict_future_prices(
            history, options.forecast_model, options.forecast_horizon
        )
        targets = price_targets(forecast)

        snapshots = self.calculator.calculate_latest(history)
        momentum = calculate_momentum(history)
        latest_close = history[-1].close

        return InsightsResult(
            symbol=symbol,
            generated_at=datetime.now(timezone.utc),
            range=options.range,
            interval=options.interval,
            quote=quote,
            latest_close=latest_close,
            history=history,
            news=news,
            indicator=options.indicator,
            indicator_snapshots=snapshots,
            momentum=momentum,
            signals=signals,
            signal_summary=signal_summary,
            simulation=simulation.equity,
            trades=simulation.trades,
            simulation_summary=simulation_summary,
            forecast_model=options.forecast_model,
            forecast=forecast,
            price_targets=targets,
            technical_summary=build_technical_summary(
                snapshots, momentum, signal_summary, targets, latest_close
            ),
            data_source=history[0].source or "unknown",
            metadata=profile,
        )
