"""Strategy lab: one indicator strategy against a benchmark.

Completely independent of app/. The target series runs the chosen
indicator through the stop/target policy; the benchmark series runs the
SMA crossover with both exit rules disabled. Histories are supplied by
the caller (HTTP service or CSV files).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from core.errors import InvalidRequestError
from core.models.bar import PriceBar
from core.models.results import ChartPoint, LabMetrics, LabResult, SimulationPoint
from core.strategy import backtest_strategy

from backtest.engine import StopTargetPolicy, simulate
from backtest.stats import max_drawdown

logger = logging.getLogger(__name__)


def _return_pct(final_value: float, capital: float) -> float:
    return (final_value / capital - 1) * 100


def _join_chart(
    strategy: Sequence[SimulationPoint], benchmark: Sequence[SimulationPoint]
) -> list[ChartPoint]:
    """Align benchmark equity onto strategy dates; None where it has no bar."""
    by_date: dict = {}
    for point in benchmark:
        # First occurrence wins for duplicated dates
        by_date.setdefault(point.date, point.value)
    return [
        ChartPoint(date=p.date, strategy=p.value, benchmark=by_date.get(p.date))
        for p in strategy
    ]


def validate_lab_parameters(
    initial_capital: float, stop_loss_pct: float, take_profit_pct: float
) -> None:
    """Reject non-positive capital and negative stop/target percentages."""
    if initial_capital <= 0:
        raise InvalidRequestError("Initial capital must be greater than zero.")
    if stop_loss_pct < 0 or take_profit_pct < 0:
        raise InvalidRequestError("Stop-loss and take-profit must not be negative.")


def run_strategy_lab(
    target_bars: Sequence[PriceBar],
    benchmark_bars: Sequence[PriceBar],
    indicator: str,
    initial_capital: float,
    stop_loss_pct: float,
    take_profit_pct: float,
    benchmark_indicator: str = "sma",
) -> LabResult:
    """
    Backtest ``indicator`` on the target and compare with the benchmark.

    Args:
        target_bars: Ordered bars of the traded symbol
        benchmark_bars: Ordered bars of the benchmark (may be empty)
        indicator: Strategy name for the target
        initial_capital: Starting cash for both runs, must be > 0
        stop_loss_pct: Stop-loss percent from entry, 0 disables
        take_profit_pct: Take-profit percent from entry, 0 disables
        benchmark_indicator: Strategy name for the benchmark

    Returns:
        LabResult with metrics, the target's trade log and a joined chart

    Raises:
        InvalidRequestError: Non-positive capital, negative percentages,
            or empty target history
    """
    validate_lab_parameters(initial_capital, stop_loss_pct, take_profit_pct)
    if not target_bars:
        raise InvalidRequestError("No price history returned for the selected symbol.")

    start_time = time.time()

    target_signals = backtest_strategy(target_bars, indicator).signals
    target = simulate(
        target_bars,
        target_signals,
        initial_capital,
        StopTargetPolicy(stop_loss_pct=stop_loss_pct, take_profit_pct=take_profit_pct),
    )

    benchmark_signals = backtest_strategy(benchmark_bars, benchmark_indicator).signals
    benchmark = simulate(
        benchmark_bars, benchmark_signals, initial_capital, StopTargetPolicy()
    )

    final_value = target.final_value or 0.0
    benchmark_final = benchmark.final_value or 0.0

    metrics = LabMetrics(
        final_value=final_value,
        benchmark_final=benchmark_final,
        total_return=_return_pct(final_value, initial_capital),
        benchmark_return=_return_pct(benchmark_final, initial_capital),
        max_drawdown=max_drawdown(target.equity) * 100,
    )

    logger.info(
        "Lab run %s vs %s over %d/%d bars in %.3fs: return %.2f%% (benchmark %.2f%%), "
        "%d trades",
        indicator, benchmark_indicator, len(target_bars), len(benchmark_bars),
        time.time() - start_time, metrics.total_return, metrics.benchmark_return,
        len(target.trades),
    )

    return LabResult(
        metrics=metrics,
        trades=target.trades,
        chart=_join_chart(target.equity, benchmark.equity),
    )
