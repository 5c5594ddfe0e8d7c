"""API endpoints."""

from app.api.routes import router, close_clients

__all__ = [
    "router",
    "close_clients",
]
