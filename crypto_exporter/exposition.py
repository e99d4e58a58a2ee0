"""Plain-text exposition of a price store snapshot."""

from __future__ import annotations

from .models import StoreSnapshot

CONTENT_TYPE = "text/plain"
PRICE_METRIC = "crypto_currency_price_usd"
LAST_REFRESH_METRIC = "crypto_currency_last_refresh_seconds"


def render_metrics(snapshot: StoreSnapshot) -> str:
    """Render one price line per identifier followed by the refresh time.

    Example:
        crypto_currency_price_usd{token="bitcoin"} 67820.000000
        crypto_currency_last_refresh_seconds 1707580800
    """
    lines = [f'{PRICE_METRIC}{{token="{ident}"}} {point.usd:.6f}' for ident, point in snapshot.prices]
    lines.append(f"{LAST_REFRESH_METRIC} {int(snapshot.last_refresh)}")
    return "\n".join(lines) + "\n"
