"""Abstract interface for upstream price providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from .models import PricePoint


class PriceSource(ABC):
    """Contract for price providers polled by the refresher.

    A source only fetches. It never touches the PriceStore; the refresher
    decides what gets merged.

    Lifecycle:
        source = CoinGeckoClient()
        prices = await source.fetch(["bitcoin", "ethereum"])
        # ... once per refresh cycle ...
        await source.aclose()
    """

    @abstractmethod
    async def fetch(self, identifiers: Sequence[str]) -> dict[str, PricePoint]:
        """Fetch the current USD price of every identifier in one request.

        Identifiers the upstream does not know are simply absent from the
        result. Raises FetchError on any failure, with no partial result.
        """

    async def aclose(self) -> None:
        """Release network resources. Safe to call multiple times."""
