"""Pytest configuration and fixtures."""

import pytest

from crypto_exporter.store import PriceStore

IDENTIFIERS = ("bitcoin", "ethereum", "iexec-rlc")


@pytest.fixture
def identifiers() -> tuple[str, ...]:
    return IDENTIFIERS


@pytest.fixture
def store(identifiers) -> PriceStore:
    """Store pre-populated the way the application builds it."""
    return PriceStore(identifiers)
