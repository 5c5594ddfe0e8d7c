"""Business services."""

from app.services.insights import InsightsService
from app.services.lab import LabService
from app.services.summary import build_technical_summary, calculate_momentum, quote_from_history
from app.services.synthetic import generate_synthetic_history

__all__ = [
    "InsightsService",
    "LabService",
    "build_technical_summary",
    "calculate_momentum",
    "quote_from_history",
    "generate_synthetic_history",
]
