"""Market data clients.

The services depend on these protocols, not on the concrete clients, so
tests can substitute AsyncMock providers.
"""

from typing import Any, Protocol

from core.models.bar import PriceBar
from core.models.market import NewsItem, Quote

from app.clients.http import RateLimiter, RestClient
from app.clients.news_rest import AlphaVantageNewsClient
from app.clients.yahoo_rest import YahooFinanceClient


class HistoryProvider(Protocol):
    async def get_history(self, symbol: str, range: str, interval: str) -> list[PriceBar]: ...


class QuoteProvider(Protocol):
    async def get_quote(self, symbol: str) -> Quote: ...


class NewsProvider(Protocol):
    async def get_news(self, symbol: str) -> list[NewsItem]: ...


class ProfileProvider(Protocol):
    async def get_profile(self, symbol: str) -> dict[str, Any]: ...


__all__ = [
    "HistoryProvider",
    "QuoteProvider",
    "NewsProvider",
    "ProfileProvider",
    "RateLimiter",
    "RestClient",
    "AlphaVantageNewsClient",
    "YahooFinanceClient",
]
