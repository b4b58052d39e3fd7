"""Portfolio view: holdings, valuation and reconciliation with the on-chain registry."""

import logging
from collections.abc import AsyncIterator, Callable, Iterable, Sequence
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

from crypto_portfolio_registry.core.identifiers import DEFAULT_SCHEME, derive_asset_ids
from crypto_portfolio_registry.core.models import (
    Holding,
    HoldingValuation,
    PortfolioValuation,
    PriceQuote,
    SaveResult,
    coerce_amount,
)
from crypto_portfolio_registry.core.poller import PricePoller, PriceSource
from crypto_portfolio_registry.core.registry import AssetStore, sender_address
from crypto_portfolio_registry.core.units import from_scaled, to_scaled
from crypto_portfolio_registry.data.loader import get_default_holdings
from crypto_portfolio_registry.exceptions import (
    LengthMismatchError,
    PortfolioRegistryError,
    SaveErrorKind,
    TransactionError,
)

logger = logging.getLogger(__name__)

IdentifiersListener = Callable[[list[str]], None]


class PortfolioView:
    """
    In-memory portfolio kept priced and reconciled against the registry.

    The view owns the holdings list and the price mapping; both are changed
    only through its methods. Duplicate identifiers are allowed, each one
    occupies its own position.

    Parameters
    ----------
    holdings : Iterable[Holding] | None
        Initial holdings. Uses the default seed list if None.
    asset_id_scheme : str
        Scheme used to derive on-chain asset ids

    """

    def __init__(
        self,
        holdings: Iterable[Holding] | None = None,
        asset_id_scheme: str = DEFAULT_SCHEME,
    ) -> None:
        self._holdings: list[Holding] = list(holdings) if holdings is not None else get_default_holdings()
        self.asset_id_scheme = asset_id_scheme
        self.prices: dict[str, PriceQuote] = {}
        self.loading = False
        self.error: str | None = None
        self.chain_error: str | None = None
        self.last_save: SaveResult | None = None
        self.owner: str | None = None
        self._store: AssetStore | None = None
        self._listeners: list[IdentifiersListener] = []

    @property
    def holdings(self) -> tuple[Holding, ...]:
        """Current holdings in display order."""
        return tuple(self._holdings)

    @property
    def identifiers(self) -> list[str]:
        """Asset identifiers of all holdings, in order."""
        return [holding.id for holding in self._holdings]

    @property
    def asset_ids(self) -> list[bytes]:
        """On-chain asset ids aligned with the holdings."""
        return derive_asset_ids(self.identifiers, self.asset_id_scheme)

    def subscribe(self, listener: IdentifiersListener) -> Callable[[], None]:
        """
        Register a callback fired whenever the ordered identifier list changes.

        Parameters
        ----------
        listener : Callable[[list[str]], None]
            Receives the new identifier list

        Returns
        -------
        Callable[[], None]
            Function removing the listener

        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _mutate(self, holdings: list[Holding]) -> None:
        before = self.identifiers
        self._holdings = holdings
        after = self.identifiers
        if after != before:
            for listener in list(self._listeners):
                listener(after)
            if self.connected:
                self.load_from_chain(self._store, self.owner)

    # Mutations

    def add_holding(self, holding: Holding) -> None:
        """Append a holding. No duplicate check is made."""
        self._mutate([*self._holdings, holding])

    def update_amount(self, index: int, amount: Any) -> None:
        """
        Set the amount of the holding at index.

        Non-finite or otherwise invalid amounts are stored as zero.

        Raises
        ------
        IndexError
            If index is out of range

        """
        holdings = list(self._holdings)
        holdings[index] = holdings[index].model_copy(update={"amount": coerce_amount(amount)})
        self._mutate(holdings)

    def remove_holding(self, index: int) -> Holding:
        """
        Remove the holding at index, shifting later holdings down.

        Raises
        ------
        IndexError
            If index is out of range

        """
        holdings = list(self._holdings)
        removed = holdings.pop(index)
        self._mutate(holdings)
        return removed

    # Prices

    def begin_price_refresh(self) -> None:
        """Mark a price request as in flight."""
        self.loading = True
        self.error = None

    def replace_prices(self, quotes: dict[str, PriceQuote]) -> None:
        """Replace the whole price mapping with a fresh response."""
        self.prices = dict(quotes)

    def record_price_error(self, message: str) -> None:
        """Surface a price failure, keeping the previous prices."""
        self.error = message

    def end_price_refresh(self) -> None:
        """Mark the in-flight price request as finished."""
        self.loading = False

    # Valuation

    def price_of(self, identifier: str) -> Decimal:
        """Return the latest price for identifier, zero if none was received."""
        quote = self.prices.get(identifier)
        return quote.price if quote else Decimal("0")

    def valuation(self) -> PortfolioValuation:
        """
        Value every holding at the current prices.

        Returns
        -------
        PortfolioValuation
            Per-holding price and value plus the total

        """
        rows = []
        total = Decimal("0")
        for holding in self._holdings:
            quote = self.prices.get(holding.id)
            price = quote.price if quote else Decimal("0")
            value = coerce_amount(holding.amount) * price
            total += value
            rows.append(
                HoldingValuation(
                    holding=holding,
                    symbol=holding.symbol or (quote.symbol if quote else None) or "",
                    price=price,
                    value=value,
                )
            )
        return PortfolioValuation(holdings=rows, total_value=total)

    @property
    def total_value(self) -> Decimal:
        """Sum of all holding values."""
        return self.valuation().total_value

    # On-chain reconciliation

    @property
    def connected(self) -> bool:
        """Whether an owner and a registry are bound to the view."""
        return self._store is not None and self.owner is not None

    def connect(self, store: AssetStore, owner: Any) -> bool:
        """
        Bind the view to an owner's entries in a registry and load them.

        While connected, every change of the identifier list reloads the
        stored amounts, overwriting the local ones.

        Parameters
        ----------
        store : AssetStore
            Registry to read from
        owner : Any
            Owner address, or an account exposing ``address``

        Returns
        -------
        bool
            True if amounts were loaded

        """
        self._store = store
        self.owner = sender_address(owner)
        return self.load_from_chain(store, self.owner)

    def disconnect(self) -> None:
        """Unbind the owner; holdings keep their current amounts."""
        self._store = None
        self.owner = None

    def apply_chain_amounts(self, amounts: Sequence[int]) -> None:
        """
        Overwrite every holding amount with the stored on-chain amount.

        Amounts are aligned by position; holdings past the end of amounts get
        zero.

        Parameters
        ----------
        amounts : Sequence[int]
            Scaled (18-decimal) amounts as returned by ``get_many``

        """
        holdings = [
            holding.model_copy(update={"amount": from_scaled(amounts[i] if i < len(amounts) else 0)})
            for i, holding in enumerate(self._holdings)
        ]
        self._mutate(holdings)

    def load_from_chain(self, store: AssetStore, owner: str | None) -> bool:
        """
        Read stored amounts for owner and merge them into the holdings.

        Parameters
        ----------
        store : AssetStore
            Registry to read from
        owner : str | None
            Connected owner address. Nothing is read if None.

        Returns
        -------
        bool
            True if amounts were loaded

        """
        if not owner or not self._holdings:
            return False

        try:
            amounts = store.get_many(owner, self.asset_ids)
        except (PortfolioRegistryError, ValueError) as e:
            logger.warning("Failed to load amounts for %s: %s", owner, e)
            self.chain_error = str(e)
            return False

        self.chain_error = None
        self.apply_chain_amounts(amounts)
        logger.debug("Loaded %d on-chain amounts for %s", len(amounts), owner)
        return True

    def save_on_chain(self, store: AssetStore, sender: Any | None) -> SaveResult:
        """
        Write all holdings to the registry in one batch.

        On success the amounts are reloaded from the registry.

        Parameters
        ----------
        store : AssetStore
            Registry to write to
        sender : Any | None
            Signing account or address. Returns NOT_CONNECTED if None.

        Returns
        -------
        SaveResult
            Outcome of the write, also kept in ``last_save``

        """
        if sender is None:
            result = SaveResult(ok=False, error_kind=SaveErrorKind.NOT_CONNECTED, message="No wallet connected")
            self.last_save = result
            return result

        asset_ids = self.asset_ids
        try:
            amounts = [to_scaled(holding.amount) for holding in self._holdings]
            tx_hash = store.set_many(asset_ids, amounts, sender=sender)
        except LengthMismatchError as e:
            result = SaveResult(ok=False, error_kind=SaveErrorKind.LENGTH_MISMATCH, message=str(e))
        except TransactionError as e:
            result = SaveResult(ok=False, error_kind=e.kind, message=str(e))
        except (PortfolioRegistryError, ValueError, ArithmeticError) as e:
            result = SaveResult(ok=False, error_kind=SaveErrorKind.SUBMISSION_FAILED, message=str(e))
        else:
            result = SaveResult(ok=True, transaction_hash=tx_hash)

        self.last_save = result
        if not result.ok:
            logger.error("Saving %d holdings failed (%s): %s", len(asset_ids), result.error_kind, result.message)
            return result

        logger.info("Saved %d holdings on-chain", len(asset_ids))
        self.load_from_chain(store, sender_address(sender))
        return result

    @asynccontextmanager
    async def polling(self, source: PriceSource, interval: float = 5.0) -> AsyncIterator[PricePoller]:
        """
        Keep prices fresh for the duration of the context.

        Parameters
        ----------
        source : PriceSource
            Where quotes come from
        interval : float
            Seconds between polls

        """
        poller = PricePoller(self, source, interval=interval)
        poller.start()
        try:
            yield poller
        finally:
            await poller.stop()
