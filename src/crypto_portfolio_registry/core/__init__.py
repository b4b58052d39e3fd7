"""Core models, asset id derivation and the asset registry."""

from crypto_portfolio_registry.core.identifiers import DEFAULT_SCHEME, derive_asset_id, derive_asset_ids
from crypto_portfolio_registry.core.models import (
    AssetUpdated,
    BatchUpdated,
    Holding,
    HoldingValuation,
    PortfolioValuation,
    PriceQuote,
    PricesResponse,
    SaveResult,
)
from crypto_portfolio_registry.core.registry import AssetRegistry, AssetStore
from crypto_portfolio_registry.core.units import AMOUNT_DECIMALS, from_scaled, to_scaled

__all__ = [
    "AMOUNT_DECIMALS",
    "DEFAULT_SCHEME",
    "AssetRegistry",
    "AssetStore",
    "AssetUpdated",
    "BatchUpdated",
    "Holding",
    "HoldingValuation",
    "PortfolioValuation",
    "PriceQuote",
    "PricesResponse",
    "SaveResult",
    "derive_asset_id",
    "derive_asset_ids",
    "from_scaled",
    "to_scaled",
]
