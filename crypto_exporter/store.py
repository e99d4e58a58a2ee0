"""Thread-safe in-memory price store guarded by a reader-writer lock."""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from threading import Condition, Lock

from .models import PricePoint, StoreSnapshot


class ReadWriteLock:
    """Many concurrent readers or a single writer.

    Writers take precedence: once a writer is waiting, new readers queue
    behind it, so a steady stream of scrapes cannot starve the refresher.
    Not reentrant.
    """

    def __init__(self) -> None:
        self._cond = Condition(Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class PriceStore:
    """Latest USD price per identifier plus the time of the last refresh.

    Writer: PriceRefresher (one batch per successful fetch).
    Readers: the /metrics endpoint, any number at once.
    """

    def __init__(self, identifiers: Iterable[str] = ()) -> None:
        # Pre-populated with zeroes so /metrics is well-formed before the first fetch
        self._prices: dict[str, PricePoint] = {ident: PricePoint(0.0) for ident in identifiers}
        self._last_refresh: float = 0.0
        self._lock = ReadWriteLock()

    def update(self, prices: Mapping[str, PricePoint], timestamp: float | None = None) -> None:
        """Merge a fetched batch and stamp the refresh time.

        Keys absent from ``prices`` keep their previous value. Readers see
        either none or all of the batch.
        """
        with self._lock.write_locked():
            self._prices.update(prices)
            self._last_refresh = time.time() if timestamp is None else timestamp

    def snapshot(self) -> StoreSnapshot:
        """Consistent copy of all prices and the last refresh time."""
        with self._lock.read_locked():
            return StoreSnapshot(prices=tuple(self._prices.items()), last_refresh=self._last_refresh)

    def get(self, identifier: str) -> PricePoint | None:
        """Latest price for one identifier, or None if unknown."""
        with self._lock.read_locked():
            return self._prices.get(identifier)

    @property
    def last_refresh(self) -> float:
        """Unix seconds of the last successful refresh, 0.0 if none yet."""
        with self._lock.read_locked():
            return self._last_refresh

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._prices)

    def __contains__(self, identifier: str) -> bool:
        with self._lock.read_locked():
            return identifier in self._prices
