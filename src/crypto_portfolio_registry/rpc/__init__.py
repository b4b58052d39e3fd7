"""RPC layer: Ape provider, retry logic and the registry contract client."""

from crypto_portfolio_registry.rpc.provider import ApeRPCProvider
from crypto_portfolio_registry.rpc.registry_contract import PortfolioRegistryContract
from crypto_portfolio_registry.rpc.retry import RetryConfig, with_retry

__all__ = [
    "ApeRPCProvider",
    "PortfolioRegistryContract",
    "RetryConfig",
    "with_retry",
]
