"""Interval price polling bound to a portfolio view."""

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Protocol

from crypto_portfolio_registry.core.models import PriceQuote

if TYPE_CHECKING:
    from crypto_portfolio_registry.core.portfolio import PortfolioView

logger = logging.getLogger(__name__)


class PriceSource(Protocol):
    """Anything able to quote a list of asset identifiers."""

    async def fetch_quotes(self, identifiers: list[str]) -> dict[str, PriceQuote]:
        """
        Fetch quotes for identifiers.

        Parameters
        ----------
        identifiers : list[str]
            Asset identifiers

        Returns
        -------
        dict[str, PriceQuote]
            Quote per identifier

        """
        ...


class _Liveness:
    """Flag checked before a poll applies its result."""

    __slots__ = ("alive",)

    def __init__(self) -> None:
        self.alive = True


class PricePoller:
    """
    Polls a price source on an interval and feeds the results to a view.

    A poll runs immediately on start and whenever the view's identifier list
    changes, then every ``interval`` seconds. Each identifier change retires
    the running task: its liveness flag is cleared and the task cancelled, so
    a response for an older identifier list never reaches the view.

    Parameters
    ----------
    view : PortfolioView
        View receiving prices
    source : PriceSource
        Quote provider
    interval : float
        Seconds between polls

    """

    def __init__(self, view: "PortfolioView", source: PriceSource, interval: float = 5.0) -> None:
        self.view = view
        self.source = source
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._liveness: _Liveness | None = None
        self._unsubscribe = None

    @property
    def running(self) -> bool:
        """Whether the poller is active."""
        return self._task is not None

    def start(self) -> None:
        """
        Start polling. Must be called from a running event loop.

        Raises
        ------
        RuntimeError
            If no event loop is running
        """
        if self._task is not None:
            return
        self._unsubscribe = self.view.subscribe(self._on_identifiers_changed)
        self._launch()

    async def stop(self) -> None:
        """Stop polling and wait for the running task to finish."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        task = self._retire()
        self._task = None
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.view.end_price_refresh()

    def _retire(self) -> asyncio.Task | None:
        if self._liveness is not None:
            self._liveness.alive = False
            self._liveness = None
        task = self._task
        if task is not None:
            task.cancel()
        return task

    def _launch(self) -> None:
        loop = asyncio.get_running_loop()
        self._retire()
        liveness = _Liveness()
        self._liveness = liveness
        self._task = loop.create_task(self._run(liveness))

    def _on_identifiers_changed(self, identifiers: list[str]) -> None:
        logger.debug("Identifiers changed to %s, restarting price polling", identifiers)
        self._launch()

    async def _run(self, liveness: _Liveness) -> None:
        while liveness.alive:
            await self._poll(liveness)
            await asyncio.sleep(self.interval)

    async def _poll(self, liveness: _Liveness) -> None:
        identifiers = self.view.identifiers
        if not identifiers:
            return

        self.view.begin_price_refresh()
        try:
            quotes = await self.source.fetch_quotes(identifiers)
        except Exception as e:
            logger.warning("Price poll for %d identifiers failed: %s", len(identifiers), e)
            if liveness.alive:
                self.view.record_price_error(str(e) or "Unknown error")
            return
        else:
            if not liveness.alive:
                logger.debug("Dropping stale quotes for %s", identifiers)
                return
            self.view.replace_prices(quotes)
        finally:
            if liveness.alive:
                self.view.end_price_refresh()
