"""Alpha Vantage news sentiment client."""

import logging

from app.clients.http import RestClient
from core.models.bar import finite_or_none
from core.models.market import NewsItem

logger = logging.getLogger(__name__)


class AlphaVantageNewsClient(RestClient):
    """Latest headlines from the NEWS_SENTIMENT function.

    Without an API key the client returns no news instead of calling out.
    """

    provider = "alphavantage"

    def __init__(self, api_key: str = "", limit: int = 6, **kwargs):
        kwargs.setdefault("base_url", "https://www.alphavantage.co")
        super().__init__(**kwargs)
        self.api_key = api_key
        self.limit = limit

    async def get_news(self, symbol: str) -> list[NewsItem]:
        """Fetch up to ``limit`` of the latest headlines for a ticker."""
        if not self.api_key:
            logger.debug("No Alpha Vantage key configured, skipping news for %s", symbol)
            return []

        data = await self._request(
            "GET",
            "/query",
            {
                "function": "NEWS_SENTIMENT",
                "tickers": symbol,
                "sort": "LATEST",
                "apikey": self.api_key,
            },
        )

        feed = (data or {}).get("feed") or []
        return [
            NewsItem(
                title=item.get("title") or "",
                summary=item.get("summary"),
                url=item.get("url"),
                time_published=item.get("time_published"),
                overall_sentiment_score=finite_or_none(item.get("overall_sentiment_score")),
            )
            for item in feed[: self.limit]
            if isinstance(item, dict)
        ]
