"""Core shared logic for indicators, signal classification, and forecasting.

This package contains pure business logic with no I/O dependencies
(no network or file access). It is shared between the insights service
(app/) and the offline backtesting tools (backtest/).
"""
