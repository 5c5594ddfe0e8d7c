"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries (must be set before importing them)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import close_clients, router
from app.config import get_settings
from core.strategy import list_strategies

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting Ticker Insights service...")
    logger.info(f"Strategies: {', '.join(list_strategies())}")
    logger.info(f"News: {'Alpha Vantage' if settings.alpha_vantage_key else 'disabled (no API key)'}")
    logger.info(f"Synthetic fallback: {'on' if settings.synthetic_fallback else 'off'}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_clients()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Ticker Insights",
    description="Technical indicators, signals, backtests and forecasts for equities",
    version="0.1.0",
    lifespan=lifespan,
    debug=get_settings().debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include REST routes
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Ticker Insights",
        "version": "0.1.0",
        "docs": "/docs",
        "strategies": list_strategies(),
    }


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
