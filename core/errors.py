"""Exceptions raised by the computation layer.

HTTP mapping lives in app/api/routes.py.
"""


class InsightsError(Exception):
    """Base class for errors raised while computing insights."""


class InvalidRequestError(InsightsError, ValueError):
    """Caller supplied an unusable parameter (missing symbol, capital <= 0, ...)."""


class NoHistoricalDataError(InsightsError):
    """No price history could be obtained, even from the fallbacks."""

    def __init__(self, message: str = "No historical data available for the requested symbol."):
        super().__init__(message)
