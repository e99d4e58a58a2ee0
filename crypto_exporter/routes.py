"""HTTP endpoints: /metrics exposition and / liveness probe."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from .exposition import CONTENT_TYPE, render_metrics
from .store import PriceStore


def create_router(price_store: PriceStore) -> APIRouter:
    """Create the exporter router with a reference to the price store.

    This factory pattern lets us inject the PriceStore without globals.
    """
    router = APIRouter(tags=["exporter"])

    # Sync handler: served from the thread pool, waits only on the read lock
    @router.get("/metrics", response_class=PlainTextResponse)
    def metrics() -> PlainTextResponse:
        """Latest prices and last refresh time in text exposition format."""
        body = render_metrics(price_store.snapshot())
        return PlainTextResponse(body, media_type=CONTENT_TYPE)

    @router.get("/", response_class=PlainTextResponse)
    async def health() -> PlainTextResponse:
        """Liveness probe. Independent of the store and the refresher."""
        return PlainTextResponse("UP", media_type=CONTENT_TYPE)

    return router
