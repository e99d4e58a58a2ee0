"""Tests for the application factory and lifespan wiring."""

import time

from fakes import FakePriceSource
from fastapi.testclient import TestClient

from crypto_exporter.app import create_app
from crypto_exporter.coingecko import CoinGeckoClient
from crypto_exporter.config import Settings
from crypto_exporter.exceptions import FetchError
from crypto_exporter.models import PricePoint
from crypto_exporter.refresher import PriceRefresher
from crypto_exporter.store import PriceStore


def _wait_until(predicate, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        assert time.monotonic() < deadline, "condition not met in time"
        time.sleep(0.01)


class TestCreateApp:
    """Tests for create_app."""

    def test_builds_store_from_settings(self, identifiers):
        """Test that the default store is pre-populated with the identifiers."""
        app = create_app(Settings(identifiers=identifiers), source=FakePriceSource())
        store = app.state.price_store
        assert isinstance(store, PriceStore)
        assert [ident for ident, _ in store.snapshot().prices] == list(identifiers)

    def test_default_source_is_coingecko(self, identifiers):
        """Test that CoinGecko is used when no source is injected."""
        settings = Settings(identifiers=identifiers, api_url="https://api.test/simple/price")
        app = create_app(settings)
        refresher = app.state.refresher
        assert isinstance(refresher, PriceRefresher)
        assert isinstance(refresher._source, CoinGeckoClient)
        assert refresher._source.api_url == "https://api.test/simple/price"

    def test_refresher_uses_settings_interval(self, identifiers):
        """Test that the configured interval reaches the refresher."""
        app = create_app(Settings(identifiers=identifiers, refresh_interval=5.0), source=FakePriceSource())
        assert app.state.refresher.interval == 5.0


class TestLifespan:
    """Tests for startup/shutdown behaviour."""

    def test_refresh_runs_while_serving(self, identifiers):
        """Test that prices fetched in the background show up on /metrics."""
        source = FakePriceSource({"bitcoin": 67820.0, "ethereum": 2624.91, "iexec-rlc": 1.5})
        app = create_app(Settings(identifiers=identifiers, refresh_interval=60.0), source=source)
        store = app.state.price_store

        with TestClient(app) as client:
            _wait_until(lambda: store.last_refresh > 0)
            output = client.get("/metrics").text

        assert 'crypto_currency_price_usd{token="bitcoin"} 67820.000000' in output
        assert f"crypto_currency_last_refresh_seconds {int(store.last_refresh)}" in output

    def test_shutdown_stops_refresher_and_closes_source(self, identifiers):
        """Test that leaving the lifespan stops polling and closes the source."""
        source = FakePriceSource({"bitcoin": 1.0})
        app = create_app(Settings(identifiers=identifiers, refresh_interval=0.01), source=source)

        with TestClient(app):
            _wait_until(lambda: len(source.calls) >= 2)

        calls_at_shutdown = len(source.calls)
        time.sleep(0.05)
        assert len(source.calls) == calls_at_shutdown
        assert source.closed
        assert not app.state.refresher.running

    def test_serves_while_upstream_down(self, identifiers):
        """Test that both endpoints answer even if every fetch fails."""
        source = FakePriceSource(FetchError("down"))
        store = PriceStore(identifiers)
        app = create_app(Settings(identifiers=identifiers, refresh_interval=0.01), source=source, store=store)

        with TestClient(app) as client:
            _wait_until(lambda: len(source.calls) >= 2)
            health = client.get("/")
            metrics = client.get("/metrics")

        assert health.status_code == 200
        assert health.text == "UP"
        assert metrics.status_code == 200
        assert "crypto_currency_last_refresh_seconds 0" in metrics.text
        assert store.get("bitcoin") == PricePoint(0.0)
