"""REST API routes."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.clients import AlphaVantageNewsClient, RateLimiter, YahooFinanceClient
from app.config import Settings, get_settings
from app.errors import InvalidRequestError, MarketDataError, NoHistoricalDataError
from app.services import InsightsService, LabService
from core.models.bar import PriceBar
from core.models.config import FORECAST_MODELS, INDICATORS, InsightsOptions, LabOptions
from core.models.insights import InsightsResult
from core.models.market import NewsItem, Quote
from core.models.results import LabResult

logger = logging.getLogger(__name__)

router = APIRouter()

SYMBOL_REQUIRED = 'Query parameter "symbol" is required.'


# Response models
class HealthResponse(BaseModel):
    status: str
    service: str


class HistoryResponse(BaseModel):
    symbol: str
    range: str
    interval: str
    history: list[PriceBar]


class QuoteResponse(BaseModel):
    symbol: str
    quote: Quote


class NewsResponse(BaseModel):
    symbol: str
    news: list[NewsItem]


class BacktestRequest(BaseModel):
    """Strategy lab request body."""

    symbol: str
    benchmark: str = "SPY"
    range: str = "1y"
    interval: str = "1d"
    indicator: str = "sma"
    initial_capital: float = Field(10000.0, gt=0)
    stop_loss_pct: float = Field(5.0, ge=0)
    take_profit_pct: float = Field(10.0, ge=0)


# Dependencies (one client per provider, closed by app lifespan)
_clients: dict[str, Any] = {}


def get_yahoo_client() -> YahooFinanceClient:
    if "yahoo" not in _clients:
        settings = get_settings()
        _clients["yahoo"] = YahooFinanceClient(
            base_url=settings.yahoo_finance_api_base,
            timeout=settings.http_timeout,
            rate_limiter=RateLimiter(settings.requests_per_minute),
        )
    return _clients["yahoo"]


def get_news_client() -> AlphaVantageNewsClient:
    if "news" not in _clients:
        settings = get_settings()
        _clients["news"] = AlphaVantageNewsClient(
            api_key=settings.alpha_vantage_key,
            limit=settings.news_limit,
            base_url=settings.alpha_vantage_api_base,
            timeout=settings.http_timeout,
            rate_limiter=RateLimiter(settings.requests_per_minute),
        )
    return _clients["news"]


async def close_clients() -> None:
    """Close every client created by the dependencies."""
    for client in list(_clients.values()):
        await client.close()
    _clients.clear()


def get_insights_service(
    yahoo: YahooFinanceClient = Depends(get_yahoo_client),
    news: AlphaVantageNewsClient = Depends(get_news_client),
    settings: Settings = Depends(get_settings),
) -> InsightsService:
    return InsightsService(
        history=yahoo,
        quotes=yahoo,
        news=news,
        profiles=yahoo,
        synthetic_fallback=settings.synthetic_fallback,
        synthetic_periods=settings.synthetic_periods,
    )


def get_lab_service(yahoo: YahooFinanceClient = Depends(get_yahoo_client)) -> LabService:
    return LabService(history=yahoo)


def _require_symbol(symbol: Optional[str]) -> str:
    symbol = (symbol or "").strip()
    if not symbol:
        raise HTTPException(status_code=400, detail=SYMBOL_REQUIRED)
    return symbol


def _upstream_error(e: MarketDataError) -> HTTPException:
    logger.warning(f"Upstream failure: {e}")
    return HTTPException(status_code=502, detail=str(e))


@router.get("/health", response_model=HealthResponse)
async def health():
    """Liveness probe."""
    return HealthResponse(status="ok", service="api")


@router.get("/analytics/health", response_model=HealthResponse)
async def analytics_health():
    """Analytics liveness probe."""
    return HealthResponse(status="ok", service="analytics")


@router.get("/analytics/history", response_model=HistoryResponse)
async def get_history(
    symbol: Optional[str] = Query(None, description="Ticker symbol"),
    range: Optional[str] = Query(None, description="Lookback range (e.g. 6mo, 1y)"),
    interval: Optional[str] = Query(None, description="Bar interval (e.g. 1d)"),
    yahoo: YahooFinanceClient = Depends(get_yahoo_client),
    settings: Settings = Depends(get_settings),
):
    """Get raw price history from the provider."""
    symbol = _require_symbol(symbol)
    range = range or settings.default_range
    interval = interval or settings.default_interval
    try:
        history = await yahoo.get_history(symbol, range, interval)
    except MarketDataError as e:
        raise _upstream_error(e)
    return HistoryResponse(symbol=symbol, range=range, interval=interval, history=history)


@router.get("/analytics/quote", response_model=QuoteResponse)
async def get_quote(
    symbol: Optional[str] = Query(None, description="Ticker symbol"),
    yahoo: YahooFinanceClient = Depends(get_yahoo_client),
):
    """Get the latest quote from the provider."""
    symbol = _require_symbol(symbol)
    try:
        quote = await yahoo.get_quote(symbol)
    except MarketDataError as e:
        raise _upstream_error(e)
    return QuoteResponse(symbol=symbol, quote=quote)


@router.get("/analytics/news", response_model=NewsResponse)
async def get_news(
    symbol: Optional[str] = Query(None, description="Ticker symbol"),
    news: AlphaVantageNewsClient = Depends(get_news_client),
):
    """Get the latest headlines (empty when no news API key is configured)."""
    symbol = _require_symbol(symbol)
    try:
        items = await news.get_news(symbol)
    except MarketDataError as e:
        raise _upstream_error(e)
    return NewsResponse(symbol=symbol, news=items)


@router.get("/analytics/insights", response_model=InsightsResult)
async def get_insights(
    symbol: Optional[str] = Query(None, description="Ticker symbol"),
    range: Optional[str] = Query(None),
    interval: Optional[str] = Query(None),
    indicator: Optional[str] = Query(None, description=", ".join(INDICATORS)),
    forecast_model: Optional[str] = Query(None, description=", ".join(FORECAST_MODELS)),
    forecast_horizon: Optional[int] = Query(None),
    initial_capital: Optional[float] = Query(None),
    service: InsightsService = Depends(get_insights_service),
    settings: Settings = Depends(get_settings),
):
    """Compute indicators, signals, backtest, forecast and summary for a symbol."""
    symbol = _require_symbol(symbol)
    options = InsightsOptions(
        range=range or settings.default_range,
        interval=interval or settings.default_interval,
        indicator=indicator or settings.default_indicator,
        forecast_model=forecast_model or settings.default_forecast_model,
        forecast_horizon=(
            forecast_horizon if forecast_horizon is not None
            else settings.default_forecast_horizon
        ),
        initial_capital=(
            initial_capital if initial_capital is not None
            else settings.default_initial_capital
        ),
    )
    try:
        return await service.compute(symbol, options)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoHistoricalDataError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/analytics/backtest", response_model=LabResult)
async def run_backtest(
    request: BacktestRequest,
    service: LabService = Depends(get_lab_service),
):
    """Backtest an indicator strategy with stop-loss/take-profit against a benchmark."""
    options = LabOptions(
        range=request.range,
        interval=request.interval,
        indicator=request.indicator,
        initial_capital=request.initial_capital,
        stop_loss_pct=request.stop_loss_pct,
        take_profit_pct=request.take_profit_pct,
    )
    try:
        return await service.run(request.symbol, request.benchmark, options)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MarketDataError as e:
        raise _upstream_error(e)
