"""Tests for the REST API routes."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.api.routes import (
    get_insights_service,
    get_lab_service,
    get_news_client,
    get_yahoo_client,
)
from app.errors import MarketDataError
from app.main import app
from app.services import InsightsService, LabService
from core.models.bar import PriceBar
from core.models.market import NewsItem, Quote


START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_bars(count: int = 40) -> list[PriceBar]:
    return [
        PriceBar(
            date=START + timedelta(days=i),
            open=100 + (i % 7),
            high=102 + (i % 7),
            low=98 + (i % 7),
            close=100 + (i % 7),
            volume=1000,
            source="yahoo",
        )
        for i in range(count)
    ]


@pytest.fixture
def yahoo():
    client = AsyncMock()
    client.get_history.return_value = make_bars()
    client.get_quote.return_value = Quote(symbol="AAPL", regular_market_price=106.0)
    client.get_profile.return_value = {"price": {}, "profile": {}}
    return client


@pytest.fixture
def api(yahoo):
    news = AsyncMock()
    news.get_news.return_value = [NewsItem(title="Headline")]

    app.dependency_overrides[get_yahoo_client] = lambda: yahoo
    app.dependency_overrides[get_news_client] = lambda: news
    app.dependency_overrides[get_insights_service] = lambda: InsightsService(
        history=yahoo, quotes=yahoo, news=news, profiles=yahoo, synthetic_fallback=False
    )
    app.dependency_overrides[get_lab_service] = lambda: LabService(history=yahoo)
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, api):
        assert api.get("/api/health").json() == {"status": "ok", "service": "api"}

    def test_analytics_health(self, api):
        response = api.get("/api/analytics/health")
        assert response.json()["service"] == "analytics"


class TestPassThrough:
    """History, quote and news endpoints."""

    def test_history(self, api):
        response = api.get("/api/analytics/history", params={"symbol": "AAPL", "range": "6mo"})

        assert response.status_code == 200
        body = response.json()
        assert body["range"] == "6mo"
        assert body["interval"] == "1d"
        assert len(body["history"]) == 40

    def test_missing_symbol(self, api):
        response = api.get("/api/analytics/history")

        assert response.status_code == 400
        assert response.json()["detail"] == 'Query parameter "symbol" is required.'

    def test_upstream_failure(self, api, yahoo):
        yahoo.get_quote.side_effect = MarketDataError("yahoo", "HTTP 503")

        response = api.get("/api/analytics/quote", params={"symbol": "AAPL"})

        assert response.status_code == 502

    def test_quote(self, api):
        response = api.get("/api/analytics/quote", params={"symbol": "AAPL"})

        assert response.json()["quote"]["regular_market_price"] == 106.0

    def test_news(self, api):
        response = api.get("/api/analytics/news", params={"symbol": "AAPL"})

        assert response.json()["news"][0]["title"] == "Headline"


class TestInsightsRoute:

    def test_insights(self, api):
        response = api.get(
            "/api/analytics/insights",
            params={"symbol": "AAPL", "indicator": "bollinger", "forecast_horizon": 5},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["symbol"] == "AAPL"
        assert body["indicator"] == "bollinger"
        assert len(body["forecast"]) == 5
        assert len(body["simulation"]) == 40
        assert body["data_source"] == "yahoo"

    def test_blank_symbol(self, api):
        response = api.get("/api/analytics/insights", params={"symbol": "  "})

        assert response.status_code == 400

    def test_bad_capital(self, api):
        response = api.get(
            "/api/analytics/insights", params={"symbol": "AAPL", "initial_capital": 0}
        )

        assert response.status_code == 400

    def test_no_history(self, api, yahoo):
        yahoo.get_history.return_value = []

        response = api.get("/api/analytics/insights", params={"symbol": "AAPL"})

        assert response.status_code == 404


class TestBacktestRoute:

    def test_backtest(self, api):
        response = api.post(
            "/api/analytics/backtest",
            json={"symbol": "AAPL", "benchmark": "SPY", "indicator": "rsi"},
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body["metrics"]) == {
            "final_value", "benchmark_final", "total_return",
            "benchmark_return", "max_drawdown",
        }
        assert len(body["chart"]) == 40

    def test_negative_stop_rejected(self, api):
        response = api.post(
            "/api/analytics/backtest", json={"symbol": "AAPL", "stop_loss_pct": -1}
        )

        assert response.status_code == 422

    def test_zero_capital(self, api, yahoo):
        yahoo.get_history.side_effect = MarketDataError("yahoo", "down")

        response = api.post(
            "/api/analytics/backtest", json={"symbol": "AAPL", "initial_capital": 0}
        )

        assert response.status_code == 422
        yahoo.get_history.assert_not_called()

    def test_target_upstream_failure(self, api, yahoo):
        yahoo.get_history.side_effect = MarketDataError("yahoo", "HTTP 404")

        response = api.post("/api/analytics/backtest", json={"symbol": "NOPE"})

        assert response.status_code == 502
