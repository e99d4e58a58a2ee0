"""Background refresh loop that polls a PriceSource into the PriceStore."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from .exceptions import FetchError
from .interface import PriceSource
from .store import PriceStore

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 30.0  # seconds


class PriceRefresher:
    """Polls ``source`` every ``interval`` seconds and merges into ``store``.

    Each cycle fetches all identifiers in one call. A failed fetch is logged
    and leaves the store untouched; the next attempt happens on the regular
    schedule, never sooner. Between cycles the loop waits on a stop event, so
    stop() takes effect at the next sleep boundary at the latest.

    Lifecycle:
        refresher = PriceRefresher(source, store, ["bitcoin", "ethereum"])
        await refresher.start()
        # ... app serves /metrics ...
        await refresher.stop()
    """

    def __init__(
        self,
        source: PriceSource,
        store: PriceStore,
        identifiers: Sequence[str],
        interval: float = DEFAULT_REFRESH_INTERVAL,
    ) -> None:
        if not identifiers:
            raise ValueError("at least one identifier is required")
        if interval <= 0:
            raise ValueError(f"refresh interval must be positive, got {interval}")
        self._source = source
        self._store = store
        self._identifiers: tuple[str, ...] = tuple(identifiers)
        self._wanted = frozenset(self._identifiers)
        self._interval = interval
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    @property
    def identifiers(self) -> tuple[str, ...]:
        return self._identifiers

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stopping(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    async def start(self) -> None:
        """Launch the background loop. The first fetch happens immediately."""
        if self._task is not None:
            raise RuntimeError("price refresher already started")
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(), name="price-refresher")
        logger.info(
            "Price refresher started: %d identifiers, %.1fs interval",
            len(self._identifiers),
            self._interval,
        )

    async def stop(self) -> None:
        """Signal the loop and wait for it to exit. Safe to call multiple times.

        A fetch already in flight is allowed to finish, but its result is
        discarded.
        """
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is None:
            return
        try:
            await self._task
        finally:
            self._task = None
        logger.info("Price refresher stopped")

    async def refresh_once(self) -> bool:
        """Run one fetch-and-merge cycle. Returns True if the store was updated."""
        try:
            prices = await self._source.fetch(self._identifiers)
        except FetchError as e:
            logger.warning("Price refresh failed, keeping previous values: %s", e)
            return False
        except Exception:
            # Anything else is a bug in the source; the loop must survive it
            logger.exception("Unexpected error during price refresh")
            return False

        if self.stopping:
            logger.debug("Stop requested during fetch; discarding %d prices", len(prices))
            return False

        unexpected = prices.keys() - self._wanted
        if unexpected:
            logger.debug("Ignoring unrequested identifiers: %s", ", ".join(sorted(unexpected)))
        batch = {ident: price for ident, price in prices.items() if ident in self._wanted}

        self._store.update(batch)
        logger.debug("Price refresh: updated %d/%d identifiers", len(batch), len(self._identifiers))
        return True

    # --- Internal ---

    async def _run_loop(self) -> None:
        """Fetching -> Sleeping -> Fetching ... until the stop event fires."""
        stop = self._stop_event
        assert stop is not None
        while not stop.is_set():
            await self.refresh_once()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
