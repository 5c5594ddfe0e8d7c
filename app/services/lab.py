"""Strategy lab service: fetch target and benchmark, then run the lab."""

from __future__ import annotations

import asyncio
import logging

from backtest.runner import run_strategy_lab, validate_lab_parameters
from core.errors import InvalidRequestError
from core.models.config import LabOptions
from core.models.results import LabResult

from app.clients import HistoryProvider

logger = logging.getLogger(__name__)


class LabService:
    """Run a strategy-vs-benchmark backtest on provider history.

    No synthetic fallback: a failed target fetch raises MarketDataError.
    A failed benchmark fetch is logged and the chart carries no benchmark.
    """

    def __init__(self, history: HistoryProvider):
        self.history = history

    async def run(
        self, symbol: str, benchmark: str, options: LabOptions | None = None
    ) -> LabResult:
        options = options or LabOptions()
        symbol = (symbol or "").strip()
        benchmark = (benchmark or "").strip()
        if not symbol or not benchmark:
            raise InvalidRequestError("Both symbol and benchmark are required.")
        validate_lab_parameters(
            options.initial_capital, options.stop_loss_pct, options.take_profit_pct
        )

        target_bars, benchmark_bars = await asyncio.gather(
            self.history.get_history(symbol, options.range, options.interval),
            self.history.get_history(benchmark, options.range, options.interval),
            return_exceptions=True,
        )
        if isinstance(target_bars, BaseException):
            raise target_bars
        if isinstance(benchmark_bars, BaseException):
            logger.warning("Benchmark %s fetch failed: %s", benchmark, benchmark_bars)
            benchmark_bars = []

        return run_strategy_lab(
            target_bars,
            benchmark_bars,
            indicator=options.indicator,
            initial_capital=options.initial_capital,
            stop_loss_pct=options.stop_loss_pct,
            take_profit_pct=options.take_profit_pct,
            benchmark_indicator=options.benchmark_indicator,
        )
