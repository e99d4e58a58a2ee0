"""Data models for exported prices."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PricePoint:
    """Latest known USD price of a single identifier."""

    usd: float = 0.0


@dataclass(frozen=True, slots=True)
class StoreSnapshot:
    """Immutable view of the price store at one instant.

    ``prices`` keeps the store's insertion order, so configured identifiers
    come out in the order they were given on the command line.
    """

    prices: tuple[tuple[str, PricePoint], ...]
    last_refresh: float  # Unix seconds, 0.0 before the first refresh

    def as_dict(self) -> dict[str, PricePoint]:
        """Convenience: the prices as a fresh dict."""
        return dict(self.prices)
