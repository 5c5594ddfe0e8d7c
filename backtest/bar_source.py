"""Price bar sources for offline backtests.

Reads OHLCV CSV exports (Yahoo Finance downloads, broker exports) with
pandas. No app/ dependency.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import pandas as pd

from core.models.bar import PriceBar

logger = logging.getLogger(__name__)

# Accepted header spellings, matched case-insensitively
DATE_COLUMNS = ("date", "datetime", "timestamp", "time")
PRICE_COLUMNS = ("open", "high", "low", "close", "volume")


class BarSource(Protocol):
    """Protocol for price bar access."""

    def load(self) -> list[PriceBar]: ...


class CsvBarSource:
    """Load bars from a CSV file with a date column and OHLCV columns.

    Only ``date`` and ``close`` are required. Rows whose date cannot be
    parsed are dropped; unparsable prices become None. Bars are returned
    in ascending date order.
    """

    def __init__(self, path: str | Path, source: str = "csv"):
        self.path = Path(path)
        self.source = source

    def load(self) -> list[PriceBar]:
        df = pd.read_csv(self.path)
        df.columns = [str(c).strip().lower() for c in df.columns]

        date_col = next((c for c in DATE_COLUMNS if c in df.columns), None)
        if date_col is None:
            raise ValueError(f"{self.path}: no date column (expected one of {DATE_COLUMNS})")
        if "close" not in df.columns:
            raise ValueError(f"{self.path}: no close column")

        df["date"] = pd.to_datetime(df[date_col], errors="coerce", utc=True)
        dropped = int(df["date"].isna().sum())
        if dropped:
            logger.warning(f"{self.path}: dropped {dropped} rows with unparsable dates")
        df = df.dropna(subset=["date"]).sort_values("date", kind="stable")

        for col in PRICE_COLUMNS:
            if col in df.columns:
                df[col] = pd.to_numeric(df[col], errors="coerce")
            else:
                df[col] = None

        bars = [
            PriceBar(
                date=row.date.to_pydatetime(),
                open=row.open,
                high=row.high,
                low=row.low,
                close=row.close,
                volume=row.volume,
                source=self.source,
            )
            for row in df[["date", *PRICE_COLUMNS]].itertuples(index=False)
        ]
        logger.info(f"Loaded {len(bars):,} bars from {self.path}")
        return bars
