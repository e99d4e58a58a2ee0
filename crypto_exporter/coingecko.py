"""CoinGecko ``simple/price`` API client."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

import httpx

from .exceptions import FetchError
from .interface import PriceSource
from .models import PricePoint

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.coingecko.com/api/v3/simple/price"
DEFAULT_TIMEOUT = 10.0  # seconds
QUOTE_CURRENCY = "USD"


class CoinGeckoClient(PriceSource):
    """PriceSource backed by the public CoinGecko REST API.

    Fetches every identifier in a single GET:
        <api_url>?ids=bitcoin,ethereum&vs_currencies=USD
    and expects ``{"bitcoin": {"usd": 67820.0}, ...}`` back.

    The status code is checked before the body is decoded, so an error page
    or a JSON error object never reaches the parser.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)

    @property
    def api_url(self) -> str:
        return self._api_url

    async def fetch(self, identifiers: Sequence[str]) -> dict[str, PricePoint]:
        if not identifiers:
            raise ValueError("at least one identifier is required")

        params = {"ids": ",".join(identifiers), "vs_currencies": QUOTE_CURRENCY}
        try:
            response = await self._client.get(self._api_url, params=params, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise FetchError(f"request to {self._api_url} failed: {e!r}") from e

        if not response.is_success:
            raise FetchError(
                f"{self._api_url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"undecodable response body: {e}", status_code=response.status_code) from e

        return parse_prices(payload)

    async def aclose(self) -> None:
        # Injected clients belong to the caller
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> CoinGeckoClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def parse_prices(payload: Any) -> dict[str, PricePoint]:
    """Convert a decoded ``{id: {"usd": number}}`` body into PricePoints.

    Entries without a ``usd`` quote are left out, like identifiers the
    upstream does not know. Anything else that does not fit the shape raises
    FetchError and nothing is returned.
    """
    if not isinstance(payload, dict):
        raise FetchError(f"expected a JSON object, got {type(payload).__name__}")

    prices: dict[str, PricePoint] = {}
    for identifier, quote in payload.items():
        if not isinstance(quote, dict):
            raise FetchError(f"malformed quote for {identifier!r}: {quote!r}")
        if "usd" not in quote:
            logger.debug("No USD quote for %s", identifier)
            continue

        value = quote["usd"]
        # bool is an int subclass; JSON true/false is never a price
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FetchError(f"non-numeric USD price for {identifier!r}: {value!r}")
        try:
            usd = float(value)
        except OverflowError as e:
            raise FetchError(f"USD price out of range for {identifier!r}") from e
        if not math.isfinite(usd) or usd < 0:
            raise FetchError(f"invalid USD price for {identifier!r}: {value!r}")
        prices[identifier] = PricePoint(usd=usd)

    return prices
