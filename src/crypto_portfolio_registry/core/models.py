"""Data models for holdings, price quotes, valuations and registry events."""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from crypto_portfolio_registry.core.units import MAX_AMOUNT
from crypto_portfolio_registry.exceptions import SaveErrorKind


def coerce_amount(value: Any) -> Decimal:
    """
    Coerce user input into a non-negative finite amount.

    Non-finite, negative or unparseable values become zero instead of being
    rejected, as do amounts too large to store on-chain.

    Parameters
    ----------
    value : Any
        Raw amount (number, string, Decimal or None)

    Returns
    -------
    Decimal
        Sanitised amount

    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite() or amount < 0 or amount > MAX_AMOUNT:
        return Decimal("0")
    return amount


class Holding(BaseModel):
    """
    A locally tracked quantity of one asset.

    Attributes
    ----------
    id : str
        Asset identifier (e.g., 'coingecko:bitcoin', 'base:0x...')
    symbol : str, optional
        Display symbol
    name : str, optional
        Display name
    amount : Decimal
        User-entered balance, never negative

    """

    id: str
    symbol: str | None = None
    name: str | None = None
    amount: Decimal = Decimal("0")

    @field_validator("amount", mode="before")
    @classmethod
    def _sanitise_amount(cls, value: Any) -> Decimal:
        return coerce_amount(value)


class PriceQuote(BaseModel):
    """
    Symbol/price pair returned by the aggregator for one identifier.

    Attributes
    ----------
    symbol : str, optional
        Ticker symbol reported upstream
    price : Decimal
        USD price, zero when unknown

    """

    symbol: str | None = None
    price: Decimal = Decimal("0")

    @field_serializer("price", when_used="json")
    def _price_as_number(self, price: Decimal) -> float:
        return float(price)


class PricesResponse(BaseModel):
    """Body of a successful price proxy response."""

    prices: dict[str, PriceQuote] = Field(default_factory=dict)
    ts: int


class HoldingValuation(BaseModel):
    """
    Valuation of a single holding.

    Attributes
    ----------
    holding : Holding
        The valued holding
    symbol : str
        Holding symbol, falling back to the quote symbol
    price : Decimal
        Unit price used (zero when no quote was received yet)
    value : Decimal
        amount x price

    """

    holding: Holding
    symbol: str = ""
    price: Decimal
    value: Decimal


class PortfolioValuation(BaseModel):
    """Per-holding values and their total."""

    holdings: list[HoldingValuation] = Field(default_factory=list)
    total_value: Decimal = Decimal("0")


class SaveResult(BaseModel):
    """
    Outcome of an on-chain save.

    Attributes
    ----------
    ok : bool
        Whether the batch write went through
    error_kind : SaveErrorKind, optional
        Failure category when not ok
    message : str, optional
        Human readable failure message
    transaction_hash : str, optional
        Hash of the submitted transaction, when known

    """

    ok: bool
    error_kind: SaveErrorKind | None = None
    message: str | None = None
    transaction_hash: str | None = None


class AssetUpdated(BaseModel):
    """Event emitted for every stored amount change."""

    model_config = ConfigDict(frozen=True)

    owner: str
    asset_id: bytes
    amount: int


class BatchUpdated(BaseModel):
    """Event emitted once per successful batch write."""

    model_config = ConfigDict(frozen=True)

    owner: str
    count: int
