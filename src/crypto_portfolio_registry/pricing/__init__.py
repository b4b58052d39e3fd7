"""Pricing services: DeFiLlama upstream and price proxy client."""

from crypto_portfolio_registry.pricing.defillama import DeFiLlamaPricing
from crypto_portfolio_registry.pricing.proxy_client import PriceProxyClient

__all__ = [
    "DeFiLlamaPricing",
    "PriceProxyClient",
]
