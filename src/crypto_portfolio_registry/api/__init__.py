"""HTTP price proxy."""

from crypto_portfolio_registry.api.app import create_app, parse_ids

__all__ = ["create_app", "parse_ids"]
