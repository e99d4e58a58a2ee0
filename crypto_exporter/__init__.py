"""Crypto currency price exporter.

Public API:
    PricePoint          - Immutable USD price of one identifier
    PriceStore          - Reader-writer locked store of the latest prices
    PriceSource         - Abstract interface for upstream price providers
    CoinGeckoClient     - PriceSource for the CoinGecko simple/price API
    PriceRefresher      - Background loop polling a source into the store
    render_metrics      - Plain-text exposition of a store snapshot
    create_app          - FastAPI application factory
"""

from .app import create_app
from .coingecko import CoinGeckoClient
from .config import Settings
from .exceptions import ConfigError, ExporterError, FetchError
from .exposition import render_metrics
from .interface import PriceSource
from .models import PricePoint, StoreSnapshot
from .refresher import PriceRefresher
from .store import PriceStore

__all__ = [
    "PricePoint",
    "StoreSnapshot",
    "PriceStore",
    "PriceSource",
    "CoinGeckoClient",
    "PriceRefresher",
    "Settings",
    "render_metrics",
    "create_app",
    "ExporterError",
    "ConfigError",
    "FetchError",
]
