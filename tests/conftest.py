"""Pytest configuration for crypto-portfolio-registry tests."""

from decimal import Decimal

import pytest

from crypto_portfolio_registry.core.models import Holding
from crypto_portfolio_registry.core.registry import AssetRegistry


def pytest_configure(config):
    """Disable ape plugin during tests."""
    # Unregister ape pytest plugin to avoid network connection issues
    config.pluginmanager.set_blocked("ape_test")


@pytest.fixture
def registry():
    """Empty in-process asset registry."""
    return AssetRegistry()


@pytest.fixture
def holdings():
    """Two priced-looking holdings."""
    return [
        Holding(id="coingecko:bitcoin", symbol="BTC", name="Bitcoin", amount=Decimal("0.5")),
        Holding(id="coingecko:ethereum", symbol="ETH", name="Ethereum", amount=Decimal("2")),
    ]
