"""Ticker insights HTTP service."""
