"""Manual crypto portfolio tracking with DeFiLlama pricing and an on-chain balance registry."""

__version__ = "0.1.0"
