"""Report formatting for strategy lab results.

Outputs results to console (formatted tables) and JSON files.
"""

from __future__ import annotations

import json

from core.models.results import LabResult

from backtest.stats import TradeStats, calculate_trade_stats


class ReportFormatter:
    """Format lab results for display and export."""

    @staticmethod
    def print_console(
        result: LabResult,
        indicator: str,
        symbol: str = "target",
        benchmark: str = "benchmark",
    ) -> None:
        """Print formatted report to console."""
        m = result.metrics
        stats = calculate_trade_stats(result.trades)

        print("\n" + "=" * 70)
        print(f"  STRATEGY LAB: {indicator.upper()} on {symbol} vs {benchmark}")
        print("=" * 70)
        if result.chart:
            print(f"  Period: {result.chart[0].date:%Y-%m-%d} to {result.chart[-1].date:%Y-%m-%d}")
            print(f"  Bars:   {len(result.chart)}")

        # Performance
        print("\n" + "-" * 70)
        print("  PERFORMANCE")
        print("-" * 70)
        print(f"  {'':<14} {'Final value':>14} {'Return':>10}")
        print(f"  {'Strategy':<14} {m.final_value:>14,.2f} {m.total_return:>+9.2f}%")
        print(f"  {'Benchmark':<14} {m.benchmark_final:>14,.2f} {m.benchmark_return:>+9.2f}%")
        edge = m.total_return - m.benchmark_return
        print(f"  Excess return:  {edge:+.2f}%")
        print(f"  Max drawdown:   {m.max_drawdown:.2f}%")

        # Trades
        print("\n" + "-" * 70)
        print("  TRADES")
        print("-" * 70)
        print(f"  Entries:        {stats.entries}")
        print(f"  Exits:          {stats.exits}")
        print(f"  Win rate:       {stats.win_rate:.1f}% ({stats.wins}W / {stats.losses}L)")
        print(f"  Avg change:     {stats.avg_change_pct:+.2f}%")

        if stats.by_exit_type:
            print(f"\n  {'Exit':<12} {'Total':>6} {'Wins':>6} {'Losses':>6} {'Win%':>8}")
            for s in stats.by_exit_type:
                print(f"  {s.type.value:<12} {s.total:>6} {s.wins:>6} {s.losses:>6} {s.win_rate:>7.1f}%")

        # Trade log (last 10)
        if result.trades:
            print("\n" + "-" * 70)
            print("  TRADE LOG (last 10)")
            print("-" * 70)
            print(f"  {'Date':<12} {'Type':<10} {'Price':>12} {'Change':>9}")
            for t in result.trades[-10:]:
                change = f"{t.change_pct:+.2f}%" if t.change_pct is not None else "-"
                print(f"  {t.date:%Y-%m-%d}   {t.type.value:<10} {t.price:>12,.2f} {change:>9}")

        print("\n" + "=" * 70)

    @staticmethod
    def stats_to_dict(stats: TradeStats) -> dict:
        return {
            "entries": stats.entries,
            "exits": stats.exits,
            "wins": stats.wins,
            "losses": stats.losses,
            "win_rate": round(stats.win_rate, 2),
            "avg_change_pct": round(stats.avg_change_pct, 4),
            "best_change_pct": stats.best_change_pct,
            "worst_change_pct": stats.worst_change_pct,
            "by_exit_type": [
                {
                    "type": s.type.value,
                    "total": s.total,
                    "wins": s.wins,
                    "losses": s.losses,
                    "win_rate": round(s.win_rate, 2),
                }
                for s in stats.by_exit_type
            ],
        }

    @staticmethod
    def to_dict(result: LabResult, indicator: str) -> dict:
        """Convert results to JSON-serializable dict."""
        data = result.model_dump(mode="json")
        data["indicator"] = indicator
        data["trade_stats"] = ReportFormatter.stats_to_dict(
            calculate_trade_stats(result.trades)
        )
        return data

    @staticmethod
    def save_json(result: LabResult, indicator: str, filepath: str) -> None:
        """Save results to JSON file."""
        data = ReportFormatter.to_dict(result, indicator)
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)
        print(f"\nResults saved to {filepath}")
