"""Yahoo Finance REST client for history, quotes and company profiles."""

import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote as url_quote

from app.clients.http import RestClient
from app.errors import MarketDataError
from core.models.bar import PriceBar, finite_or_none
from core.models.market import Quote

logger = logging.getLogger(__name__)


def _safe_date(timestamp: Any) -> datetime | None:
    """Unix seconds -> aware UTC datetime, None if unusable."""
    if not timestamp:
        return None
    try:
        return datetime.fromtimestamp(float(timestamp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _pick(values: list | None, index: int) -> Any:
    if not values or index >= len(values):
        return None
    return values[index]


class YahooFinanceClient(RestClient):
    """Yahoo Finance chart / quote / quoteSummary client."""

    provider = "yahoo"

    async def get_history(
        self, symbol: str, range: str = "1y", interval: str = "1d"
    ) -> list[PriceBar]:
        """
        Fetch OHLCV history from the v8 chart endpoint.

        Args:
            symbol: Ticker (e.g., "AAPL")
            range: Lookback such as "6mo", "1y"
            interval: Bar size such as "1d", "1h"

        Returns:
            List of PriceBar in ascending date order; rows without a
            usable timestamp are dropped

        Raises:
            MarketDataError: On transport failure or a payload without bars
        """
        data = await self._request(
            "GET",
            f"/v8/finance/chart/{url_quote(symbol, safe='')}",
            {"range": range, "interval": interval, "events": "div,split"},
        )

        results = ((data or {}).get("chart") or {}).get("result") or []
        result = results[0] if results else None
        quotes = ((result or {}).get("indicators") or {}).get("quote") or []
        if not result or not result.get("timestamp") or not quotes:
            raise MarketDataError(self.provider, f"history unavailable for {symbol}")

        quote = quotes[0] or {}
        bars = []
        for index, timestamp in enumerate(result["timestamp"]):
            date = _safe_date(timestamp)
            if date is None:
                continue
            bars.append(
                PriceBar(
                    date=date,
                    open=_pick(quote.get("open"), index),
                    high=_pick(quote.get("high"), index),
                    low=_pick(quote.get("low"), index),
                    close=_pick(quote.get("close"), index),
                    volume=_pick(quote.get("volume"), index),
                    source="yahoo",
                )
            )

        logger.debug("Fetched %d bars for %s (%s/%s)", len(bars), symbol, range, interval)
        return bars

    async def get_quote(self, symbol: str) -> Quote:
        """Fetch the latest quote from the v7 quote endpoint."""
        data = await self._request("GET", "/v7/finance/quote", {"symbols": symbol})

        results = ((data or {}).get("quoteResponse") or {}).get("result") or []
        if not results:
            raise MarketDataError(self.provider, f"quote not available for {symbol}")

        raw = results[0]
        return Quote(
            symbol=raw.get("symbol") or symbol,
            regular_market_price=finite_or_none(raw.get("regularMarketPrice")),
            regular_market_previous_close=finite_or_none(
                raw.get("regularMarketPreviousClose")
            ),
            regular_market_change_percent=finite_or_none(
                raw.get("regularMarketChangePercent")
            ),
            market_cap=finite_or_none(raw.get("marketCap")),
            average_daily_volume_10day=finite_or_none(raw.get("averageDailyVolume10Day")),
            currency=raw.get("currency"),
            exchange=raw.get("fullExchangeName") or raw.get("exchange"),
            short_name=raw.get("shortName"),
        )

    async def get_profile(self, symbol: str) -> dict[str, Any]:
        """Fetch price and company profile modules from v10 quoteSummary.

        Returns:
            ``{"price": {...}, "profile": {...}}``
        """
        data = await self._request(
            "GET",
            f"/v10/finance/quoteSummary/{url_quote(symbol, safe='')}",
            {"modules": "price,summaryProfile"},
        )

        results = ((data or {}).get("quoteSummary") or {}).get("result") or []
        if not results:
            raise MarketDataError(self.provider, f"profile unavailable for {symbol}")

        summary = results[0] or {}
        return {
            "price": summary.get("price") or {},
            "profile": summary.get("summaryProfile") or {},
        }
