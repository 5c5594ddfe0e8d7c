"""Tests for the insights and strategy-lab services."""

import math
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from app.errors import InvalidRequestError, MarketDataError, NoHistoricalDataError
from app.services.insights import InsightsService, validate_options
from app.services.lab import LabService
from core.models.bar import PriceBar
from core.models.config import InsightsOptions, LabOptions
from core.models.market import NewsItem, Quote


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_bars(count: int = 80, source: str = "yahoo", base: float = 100.0) -> list[PriceBar]:
    bars = []
    for i in range(count):
        close = base + 10 * math.sin(i / 5) + i * 0.1
        bars.append(
            PriceBar(
                date=START + timedelta(days=i),
                open=close - 0.5,
                high=close + 1,
                low=close - 1,
                close=close,
                volume=1_000_000 + i,
                source=source,
            )
        )
    return bars


def make_providers(bars=None):
    history = AsyncMock()
    history.get_history.return_value = make_bars() if bars is None else bars
    quotes = AsyncMock()
    quotes.get_quote.return_value = Quote(symbol="AAPL", regular_market_price=101.0)
    news = AsyncMock()
    news.get_news.return_value = [NewsItem(title="Earnings beat")]
    profiles = AsyncMock()
    profiles.get_profile.return_value = {"price": {}, "profile": {"sector": "Technology"}}
    return history, quotes, news, profiles


def make_service(**overrides) -> tuple[InsightsService, tuple]:
    providers = make_providers()
    history, quotes, news, profiles = providers
    kwargs = dict(history=history, quotes=quotes, news=news, profiles=profiles)
    kwargs.update(overrides)
    return InsightsService(**kwargs), providers


# ---------------------------------------------------------------------------
# InsightsService
# ---------------------------------------------------------------------------

class TestInsightsService:
    """End-to-end insights computation with mocked providers."""

    @pytest.mark.asyncio
    async def test_full_payload(self):
        service, (history, quotes, news, profiles) = make_service()

        result = await service.compute(" AAPL ", InsightsOptions(indicator="rsi"))

        assert result.symbol == "AAPL"
        assert result.indicator == "rsi"
        assert result.data_source == "yahoo"
        assert len(result.history) == 80
        assert len(result.signals) == 80
        assert len(result.simulation) == 80
        assert len(result.forecast) == 60
        assert result.quote.regular_market_price == 101.0
        assert result.quote.synthetic is False
        assert result.news[0].title == "Earnings beat"
        assert result.metadata["profile"]["sector"] == "Technology"
        assert result.latest_close == result.history[-1].close
        assert result.price_targets is not None
        assert result.technical_summary
        assert result.simulation_summary.initial_capital == 10000
        history.get_history.assert_awaited_once_with("AAPL", "1y", "1d")

    @pytest.mark.asyncio
    async def test_signal_summary_matches_signals(self):
        service, _ = make_service()

        result = await service.compute("AAPL")

        summary = result.signal_summary
        assert summary.buy + summary.sell + summary.hold == len(result.signals)
        assert summary.buy == sum(1 for s in result.signals if s.numeric_signal > 0)

    @pytest.mark.asyncio
    async def test_synthetic_fallback_on_history_failure(self):
        service, (history, *_rest) = make_service(quotes=None)
        history.get_history.side_effect = MarketDataError("yahoo", "boom")

        result = await service.compute("AAPL")

        assert result.data_source == "synthetic"
        assert result.history
        assert result.quote.synthetic is True

    @pytest.mark.asyncio
    async def test_synthetic_fallback_on_empty_history(self):
        history = AsyncMock()
        history.get_history.return_value = []
        service = InsightsService(history=history, synthetic_periods=30)

        result = await service.compute("MSFT")

        assert result.data_source == "synthetic"
        assert 0 < len(result.history) <= 30

    @pytest.mark.asyncio
    async def test_no_history_without_fallback(self):
        history = AsyncMock()
        history.get_history.return_value = []
        service = InsightsService(history=history, synthetic_fallback=False)

        with pytest.raises(NoHistoricalDataError):
            await service.compute("AAPL")

    @pytest.mark.asyncio
    async def test_quote_failure_derives_quote(self):
        service, (_, quotes, _, _) = make_service()
        quotes.get_quote.side_effect = MarketDataError("yahoo", "quote down")

        result = await service.compute("AAPL")

        assert result.quote.synthetic is True
        assert result.quote.regular_market_price == result.latest_close

    @pytest.mark.asyncio
    async def test_news_and_profile_failures_degrade(self):
        service, (_, _, news, profiles) = make_service()
        news.get_news.side_effect = MarketDataError("alphavantage", "down")
        profiles.get_profile.side_effect = RuntimeError("unexpected")

        result = await service.compute("AAPL")

        assert result.news == []
        assert result.metadata is None

    @pytest.mark.asyncio
    async def test_news_skipped_when_excluded(self):
        service, (_, _, news, _) = make_service()

        result = await service.compute("AAPL", InsightsOptions(include_news=False))

        assert result.news == []
        news.get_news.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_indicator_holds(self):
        service, _ = make_service()

        result = await service.compute("AAPL", InsightsOptions(indicator="wavelet"))

        assert all(s.numeric_signal == 0 for s in result.signals)
        assert result.trades == []
        assert result.signal_summary.bias == "balanced"

    @pytest.mark.asyncio
    async def test_zero_horizon(self):
        service, _ = make_service()

        result = await service.compute("AAPL", InsightsOptions(forecast_horizon=0))

        assert result.forecast == []
        assert result.price_targets is None

    @pytest.mark.asyncio
    async def test_blank_symbol_rejected_before_fetch(self):
        service, (history, *_rest) = make_service()

        with pytest.raises(InvalidRequestError):
            await service.compute("   ")
        history.get_history.assert_not_called()


class TestValidateOptions:

    def test_strips_symbol(self):
        assert validate_options("  TSLA ", InsightsOptions()) == "TSLA"

    @pytest.mark.parametrize(
        "options",
        [InsightsOptions(initial_capital=0), InsightsOptions(forecast_horizon=-1)],
    )
    def test_rejects_bad_numbers(self, options):
        with pytest.raises(InvalidRequestError):
            validate_options("AAPL", options)


# ---------------------------------------------------------------------------
# LabService
# ---------------------------------------------------------------------------

class TestLabService:
    """Strategy lab over provider history."""

    @pytest.mark.asyncio
    async def test_runs_against_benchmark(self):
        history = AsyncMock()
        history.get_history.side_effect = [make_bars(), make_bars(base=400.0, source="yahoo")]
        service = LabService(history)

        result = await service.run("AAPL", "SPY", LabOptions(indicator="macd"))

        assert len(result.chart) == 80
        assert all(p.benchmark is not None for p in result.chart)
        assert result.metrics.benchmark_final > 0

    @pytest.mark.asyncio
    async def test_benchmark_failure_degrades(self):
        history = AsyncMock()
        history.get_history.side_effect = [make_bars(), MarketDataError("yahoo", "down")]
        service = LabService(history)

        result = await service.run("AAPL", "SPY")

        assert result.metrics.benchmark_final == 0
        assert all(p.benchmark is None for p in result.chart)

    @pytest.mark.asyncio
    async def test_target_failure_propagates(self):
        history = AsyncMock()
        history.get_history.side_effect = [MarketDataError("yahoo", "down"), make_bars()]
        service = LabService(history)

        with pytest.raises(MarketDataError):
            await service.run("AAPL", "SPY")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "options",
        [
            LabOptions(initial_capital=0),
            LabOptions(stop_loss_pct=-1),
            LabOptions(take_profit_pct=-0.5),
        ],
    )
    async def test_invalid_options_rejected_before_fetch(self, options):
        history = AsyncMock()
        history.get_history.side_effect = MarketDataError("yahoo", "down")
        service = LabService(history)

        with pytest.raises(InvalidRequestError):
            await service.run("AAPL", "SPY", options)
        history.get_history.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_benchmark_rejected(self):
        service = LabService(AsyncMock())

        with pytest.raises(InvalidRequestError):
            await service.run("AAPL", " ")
