"""Market data models supplied by quote/news providers."""

from pydantic import BaseModel


class Quote(BaseModel):
    """Latest quote for a symbol.

    Provider quotes carry many more fields; only the ones the insights
    payload uses are kept.
    """

    symbol: str
    regular_market_price: float | None = None
    regular_market_previous_close: float | None = None
    regular_market_change_percent: float | None = None
    market_cap: float | None = None
    average_daily_volume_10day: float | None = None
    currency: str | None = None
    exchange: str | None = None
    short_name: str | None = None
    synthetic: bool = False


class NewsItem(BaseModel):
    """One headline from the news feed."""

    title: str
    summary: str | None = None
    url: str | None = None
    time_published: str | None = None
    overall_sentiment_score: float | None = None
