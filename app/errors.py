"""Application error taxonomy.

Computation errors come from core/; clients add MarketDataError for
upstream failures. Routes map them to HTTP status codes:

- InvalidRequestError   -> 400
- NoHistoricalDataError -> 404
- MarketDataError       -> 502 (pass-through endpoints only)
"""

from core.errors import InsightsError, InvalidRequestError, NoHistoricalDataError


class MarketDataError(InsightsError):
    """An upstream market data provider failed or returned an unusable payload."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


__all__ = [
    "InsightsError",
    "InvalidRequestError",
    "NoHistoricalDataError",
    "MarketDataError",
]
