"""Offline backtesting: portfolio simulation and the strategy lab.

Independent of app/; depends only on core/ for business logic.

Usage:
    python -m backtest --csv AAPL.csv --benchmark-csv SPY.csv --indicator macd
"""

from backtest.engine import (
    ExecutionPolicy,
    GraduatedPolicy,
    PortfolioState,
    SimulationResult,
    StopTargetPolicy,
    simulate,
)
from backtest.runner import run_strategy_lab, validate_lab_parameters
from backtest.stats import calculate_trade_stats, max_drawdown, summarize_simulation

__all__ = [
    "ExecutionPolicy",
    "GraduatedPolicy",
    "PortfolioState",
    "SimulationResult",
    "StopTargetPolicy",
    "simulate",
    "run_strategy_lab",
    "validate_lab_parameters",
    "calculate_trade_stats",
    "max_drawdown",
    "summarize_simulation",
]
