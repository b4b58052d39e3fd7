"""DeFiLlama pricing service for fetching asset USD quotes."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import quote

import httpx

from crypto_portfolio_registry.core.models import PriceQuote
from crypto_portfolio_registry.exceptions import PricingError, UpstreamError

logger = logging.getLogger(__name__)


class DeFiLlamaPricing:
    """
    Fetches asset prices from the DeFiLlama coins API.

    Identifiers are passed through in DeFiLlama's own format, e.g.
    ``coingecko:bitcoin`` or ``base:0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913``.

    Parameters
    ----------
    base_url : str
        DeFiLlama API base URL
    timeout : float
        Request timeout in seconds
    search_width : str
        How far back DeFiLlama may look for a price point
    client : httpx.Client | None
        HTTP client to use. A new one is created if None.

    """

    def __init__(
        self,
        base_url: str = "https://coins.llama.fi",
        timeout: float = 10.0,
        search_width: str = "8h",
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.search_width = search_width
        self.client = client or httpx.Client(timeout=timeout)

    def get_quotes(self, identifiers: list[str]) -> dict[str, PriceQuote]:
        """
        Fetch quotes for several identifiers in one request.

        Parameters
        ----------
        identifiers : list[str]
            Asset identifiers

        Returns
        -------
        dict[str, PriceQuote]
            Quote per requested identifier. Identifiers unknown upstream get a
            zero price.

        Raises
        ------
        UpstreamError
            If DeFiLlama answers with a non-success status
        PricingError
            If the request fails or the response cannot be parsed

        Examples
        --------
        >>> pricing = DeFiLlamaPricing()
        >>> quotes = pricing.get_quotes(["coingecko:bitcoin", "coingecko:ethereum"])
        >>> quotes["coingecko:bitcoin"].price

        """
        if not identifiers:
            return {}

        coins = self._fetch_coins(identifiers)

        result = {}
        for identifier in identifiers:
            record = coins.get(identifier)
            result[identifier] = self._to_quote(record if isinstance(record, dict) else {})
        return result

    def get_quote(self, identifier: str) -> PriceQuote:
        """
        Fetch the quote for a single identifier.

        Parameters
        ----------
        identifier : str
            Asset identifier

        Returns
        -------
        PriceQuote
            Symbol and USD price

        """
        return self.get_quotes([identifier])[identifier]

    def _fetch_coins(self, identifiers: list[str]) -> dict[str, Any]:
        """
        Query the DeFiLlama current prices endpoint.

        Parameters
        ----------
        identifiers : list[str]
            Asset identifiers

        Returns
        -------
        dict[str, Any]
            The ``coins`` object of the response

        """
        coins_param = quote(",".join(identifiers), safe="")
        url = f"{self.base_url}/prices/current/{coins_param}"

        try:
            response = self.client.get(url, params={"searchWidth": self.search_width})
        except httpx.HTTPError as e:
            msg = f"DeFiLlama request failed: {e}"
            raise PricingError(msg) from e

        if not response.is_success:
            logger.warning("DeFiLlama answered %d for %d identifiers", response.status_code, len(identifiers))
            raise UpstreamError(response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            msg = f"Invalid DeFiLlama response: {e}"
            raise PricingError(msg) from e

        coins = data.get("coins") if isinstance(data, dict) else None
        return coins if isinstance(coins, dict) else {}

    def _to_quote(self, record: dict[str, Any]) -> PriceQuote:
        """
        Normalise one upstream coin record.

        Parameters
        ----------
        record : dict[str, Any]
            DeFiLlama coin entry, possibly empty

        Returns
        -------
        PriceQuote
            Quote with price defaulting to zero

        """
        raw_price = record.get("price")
        try:
            price = Decimal(str(raw_price)) if raw_price is not None else Decimal("0")
        except InvalidOperation as e:
            msg = f"Invalid price {raw_price!r}"
            raise PricingError(msg) from e

        symbol = record.get("symbol")
        return PriceQuote(symbol=str(symbol) if symbol is not None else None, price=price)

    def close(self) -> None:
        """Close HTTP client."""
        self.client.close()

    def __enter__(self) -> "DeFiLlamaPricing":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
