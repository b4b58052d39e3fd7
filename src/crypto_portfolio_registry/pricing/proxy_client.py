"""Async client for the price proxy, used as the portfolio poller's price source."""

from decimal import Decimal

import httpx
from pydantic import ValidationError

from crypto_portfolio_registry.core.models import PriceQuote, PricesResponse
from crypto_portfolio_registry.exceptions import PriceAPIError, PricingError


class PriceProxyClient:
    """
    Async client for the ``/api/prices`` endpoint of the price proxy.

    Parameters
    ----------
    base_url : str
        Proxy base URL (e.g., 'http://127.0.0.1:8000')
    timeout : float
        Request timeout in seconds
    client : httpx.AsyncClient | None
        HTTP client to use. A new one is created if None.

    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch_quotes(self, identifiers: list[str]) -> dict[str, PriceQuote]:
        """
        Request quotes from the proxy.

        Parameters
        ----------
        identifiers : list[str]
            Asset identifiers

        Returns
        -------
        dict[str, PriceQuote]
            Quote per identifier as returned by the proxy

        Raises
        ------
        PriceAPIError
            If the proxy answers with a non-200 status
        PricingError
            If the request fails or the body is malformed

        """
        try:
            response = await self.client.get(
                f"{self.base_url}/api/prices",
                params={"ids": ",".join(identifiers)},
                headers={"Cache-Control": "no-store"},
            )
        except httpx.HTTPError as e:
            msg = f"Price API request failed: {e}"
            raise PricingError(msg) from e

        if response.status_code != 200:
            raise PriceAPIError(response.status_code)

        try:
            body = PricesResponse.model_validate(response.json(parse_float=Decimal))
        except (ValueError, ValidationError) as e:
            msg = f"Invalid price API response: {e}"
            raise PricingError(msg) from e
        return body.prices

    async def aclose(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "PriceProxyClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.aclose()
