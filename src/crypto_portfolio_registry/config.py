"""Application settings read from environment variables and an optional .env file."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crypto_portfolio_registry.core.identifiers import DEFAULT_SCHEME
from crypto_portfolio_registry.data.abi import ZERO_ADDRESS


class Settings(BaseSettings):
    """
    Runtime configuration.

    Every field can be set through a ``PORTFOLIO_``-prefixed environment
    variable, e.g. ``PORTFOLIO_REGISTRY_ADDRESS``.

    """

    model_config = SettingsConfigDict(env_prefix="PORTFOLIO_", env_file=".env", extra="ignore")

    # On-chain registry
    registry_address: str = ZERO_ADDRESS
    chain: str = "base"
    network: str = "mainnet"
    account_alias: str | None = None
    asset_id_scheme: str = DEFAULT_SCHEME

    # Pricing
    defillama_url: str = "https://coins.llama.fi"
    search_width: str = "8h"
    http_timeout: float = Field(default=10.0, gt=0)
    poll_interval: float = Field(default=5.0, gt=0)
    price_api_url: str = "http://127.0.0.1:8000"

    # Price proxy server
    host: str = "127.0.0.1"
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
