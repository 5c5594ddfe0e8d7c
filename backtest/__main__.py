"""CLI entry point for offline strategy lab runs.

Independent of app/: price history comes from CSV files.

Usage:
    python -m backtest --csv AAPL.csv
    python -m backtest --csv AAPL.csv --benchmark-csv SPY.csv --indicator macd
    python -m backtest --csv AAPL.csv --stop-loss 3 --take-profit 0 -o result.json
"""

import argparse
import logging
import sys
from pathlib import Path

from core.errors import InvalidRequestError
from core.models.config import DEFAULT_INITIAL_CAPITAL, INDICATORS

from backtest.bar_source import CsvBarSource
from backtest.report import ReportFormatter
from backtest.runner import run_strategy_lab


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Backtest a single-indicator strategy against a benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m backtest --csv AAPL.csv
  python -m backtest --csv AAPL.csv --benchmark-csv SPY.csv --indicator rsi
  python -m backtest --csv AAPL.csv --stop-loss 0 --take-profit 15 -o lab.json
        """,
    )
    parser.add_argument(
        "--csv",
        type=Path,
        required=True,
        help="CSV of the traded symbol (date, open, high, low, close, volume)",
    )
    parser.add_argument(
        "--benchmark-csv",
        type=Path,
        default=None,
        help="CSV of the benchmark (default: the traded symbol itself)",
    )
    parser.add_argument(
        "--indicator",
        choices=INDICATORS,
        default="sma",
        help="Strategy indicator (default: sma)",
    )
    parser.add_argument(
        "--capital",
        type=float,
        default=DEFAULT_INITIAL_CAPITAL,
        help=f"Initial capital (default: {DEFAULT_INITIAL_CAPITAL:g})",
    )
    parser.add_argument(
        "--stop-loss",
        type=float,
        default=5.0,
        help="Stop-loss percent from entry, 0 disables (default: 5)",
    )
    parser.add_argument(
        "--take-profit",
        type=float,
        default=10.0,
        help="Take-profit percent from entry, 0 disables (default: 10)",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path for JSON results",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    target_bars = CsvBarSource(args.csv).load()
    benchmark_path = args.benchmark_csv or args.csv
    benchmark_bars = (
        target_bars if benchmark_path == args.csv
        else CsvBarSource(benchmark_path).load()
    )

    try:
        result = run_strategy_lab(
            target_bars,
            benchmark_bars,
            indicator=args.indicator,
            initial_capital=args.capital,
            stop_loss_pct=args.stop_loss,
            take_profit_pct=args.take_profit,
        )
    except InvalidRequestError as e:
        print(f"Error: {e}")
        return 1

    ReportFormatter.print_console(
        result,
        indicator=args.indicator,
        symbol=args.csv.stem,
        benchmark=benchmark_path.stem,
    )

    # Optional: save JSON
    if args.output:
        ReportFormatter.save_json(result, args.indicator, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
