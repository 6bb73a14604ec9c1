"""
Lira Checker Main Application Entry Point

Rates are refreshed lazily by incoming requests; an optional interval job
keeps the cache warm for the status endpoint.
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lira import __version__
from lira.api import router
from lira.config import Settings, get_settings
from lira.converter import CurrencyConverter
from lira.currencies import CurrencyTable
from lira.models import ConfigError
from lira.providers import RateFetcher

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def build_converter(settings: Settings) -> CurrencyConverter:
    """
    Wire the fetcher, currency table and cache from settings.

    Raises:
        ConfigError: If the API key is missing or the currency file is unusable
    """
    if not settings.fastforex_api_key:
        raise ConfigError("Missing FASTFOREX_API_KEY")

    currencies = CurrencyTable.from_file(settings.currencies_file)

    for code in [settings.anchor_currency, settings.status_base, *settings.status_target_list]:
        if not currencies.is_supported(code):
            raise ConfigError(f"Configured currency {code} is not in {settings.currencies_file}")

    return CurrencyConverter(
        fetcher=RateFetcher(settings=settings),
        currencies=currencies,
        ttl_seconds=settings.cache_ttl_seconds,
        max_targets=settings.max_targets
    )


async def scheduled_refresh(converter: CurrencyConverter) -> None:
    """Interval job wrapper."""
    logger.debug("⏰ Scheduled refresh triggered")
    if not await converter.refresh():
        logger.error("⏰ Scheduled refresh failed, cache left unchanged")


def create_scheduler(settings: Settings, converter: CurrencyConverter) -> AsyncIOScheduler | None:
    if settings.status_refresh_seconds <= 0:
        return None

    scheduler = AsyncIOScheduler(timezone=timezone.utc)
    scheduler.add_job(
        scheduled_refresh,
        IntervalTrigger(seconds=settings.status_refresh_seconds),
        args=[converter],
        id="status_rate_refresh",
        name="Status Rate Refresh",
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,
        coalesce=True,
        replace_existing=True
    )
    return scheduler


def create_app(
    settings: Settings | None = None,
    converter: CurrencyConverter | None = None
) -> FastAPI:
    """
    Create FastAPI application.

    A prebuilt `converter` skips wiring from settings (used by tests).
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management."""
        logging.getLogger("lira").setLevel(settings.log_level.upper())
        logger.info(f"🚀 Starting Lira Checker v.{__version__}")

        if app.state.converter is None:
            app.state.converter = build_converter(settings)
        logger.info(
            f"✅ Rate cache ready: anchor {app.state.converter.anchor}, "
            f"TTL {app.state.converter.ttl_seconds:.0f}s"
        )

        scheduler = create_scheduler(settings, app.state.converter)
        if scheduler:
            scheduler.start()
            logger.info(
                f"⏰ Scheduler started: refreshing every {settings.status_refresh_seconds}s"
            )

        yield

        # Shutdown
        logger.info("🛑 Shutting down Lira Checker")

        if scheduler:
            scheduler.shutdown()
            logger.info("⏰ Scheduler stopped")

    app = FastAPI(
        title="Lira Checker",
        description="Exchange-rate status and currency conversion",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.converter = converter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Lira Checker",
            "version": __version__,
            "docs": "/docs",
            "api": {
                "status": "/status",
                "rates": "/convert/{base}",
                "convert": "/convert/{base}/{targets}",
                "health": "/health"
            }
        }

    return app


# Create application instance
app = create_app()


def main():
    """Main entry point for running the server."""
    settings = get_settings()

    logger.info(f"Starting Lira Checker server on {settings.api_host}:{settings.api_port}")

    uvicorn.run(
        "lira.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
