"""Contract ABI and asset catalog."""

from crypto_portfolio_registry.data.abi import PORTFOLIO_REGISTRY_ABI, ZERO_ADDRESS
from crypto_portfolio_registry.data.loader import (
    get_asset_catalog,
    get_catalog_entry,
    get_default_holdings,
    get_default_price_ids,
    load_assets,
    search_assets,
)

__all__ = [
    "PORTFOLIO_REGISTRY_ABI",
    "ZERO_ADDRESS",
    "get_asset_catalog",
    "get_catalog_entry",
    "get_default_holdings",
    "get_default_price_ids",
    "load_assets",
    "search_assets",
]
