"""FastAPI application factory wiring the store, refresher and routes."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .coingecko import CoinGeckoClient
from .config import Settings
from .interface import PriceSource
from .refresher import PriceRefresher
from .routes import create_router
from .store import PriceStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    source: PriceSource | None = None,
    store: PriceStore | None = None,
) -> FastAPI:
    """Build the exporter application.

    - No ``source`` -> CoinGeckoClient pointed at ``settings.api_url``
    - No ``store`` -> PriceStore pre-populated with ``settings.identifiers``

    The refresher starts with the application lifespan and is stopped, and
    the source closed, on shutdown (uvicorn maps SIGINT/SIGTERM to that).
    """
    price_store = store if store is not None else PriceStore(settings.identifiers)
    price_source = source if source is not None else CoinGeckoClient(
        api_url=settings.api_url,
        timeout=settings.request_timeout,
    )
    refresher = PriceRefresher(
        source=price_source,
        store=price_store,
        identifiers=settings.identifiers,
        interval=settings.refresh_interval,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await refresher.start()
        try:
            yield
        finally:
            logger.info("Shutting down, stopping price refresh...")
            await refresher.stop()
            await price_source.aclose()

    app = FastAPI(
        title="Crypto Currency Exporter",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.price_store = price_store
    app.state.refresher = refresher
    app.include_router(create_router(price_store))
    return app
