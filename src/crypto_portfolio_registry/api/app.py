"""Price proxy: HTTP endpoint normalising DeFiLlama quotes."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from crypto_portfolio_registry import __version__
from crypto_portfolio_registry.config import Settings, get_settings
from crypto_portfolio_registry.core.models import PricesResponse
from crypto_portfolio_registry.data.loader import get_default_price_ids
from crypto_portfolio_registry.exceptions import UpstreamError
from crypto_portfolio_registry.pricing.defillama import DeFiLlamaPricing

logger = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def parse_ids(ids: str | None) -> list[str]:
    """
    Split a comma-separated ``ids`` parameter.

    Parameters
    ----------
    ids : str | None
        Raw query parameter

    Returns
    -------
    list[str]
        Trimmed, non-empty identifiers, or the default set when none remain

    """
    identifiers = [part.strip() for part in (ids or "").split(",")]
    identifiers = [identifier for identifier in identifiers if identifier]
    return identifiers or get_default_price_ids()


def get_pricing(request: Request) -> DeFiLlamaPricing:
    """Return the app's upstream pricing client."""
    return request.app.state.pricing


def create_app(pricing: DeFiLlamaPricing | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the price proxy application.

    Parameters
    ----------
    pricing : DeFiLlamaPricing | None
        Upstream client. Built from settings if None.
    settings : Settings | None
        Configuration. Uses the global settings if None.

    Returns
    -------
    FastAPI
        Application serving ``GET /api/prices`` and ``GET /health``

    """
    settings = settings or get_settings()
    if pricing is None:
        pricing = DeFiLlamaPricing(
            base_url=settings.defillama_url,
            timeout=settings.http_timeout,
            search_width=settings.search_width,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.pricing.close()

    app = FastAPI(title="Crypto Portfolio Price Proxy", version=__version__, lifespan=lifespan)
    app.state.pricing = pricing

    @app.get("/api/prices", tags=["Prices"])
    def get_prices(
        ids: str | None = Query(None, description="Comma-separated asset identifiers"),
        upstream: DeFiLlamaPricing = Depends(get_pricing),
    ) -> JSONResponse:
        """Quote the requested identifiers (or the default set)."""
        identifiers = parse_ids(ids)

        try:
            quotes = upstream.get_quotes(identifiers)
        except UpstreamError as e:
            logger.warning("Upstream price error for %s: %s", identifiers, e)
            return JSONResponse({"error": str(e)}, status_code=502)
        except Exception as e:
            logger.exception("Price request for %s failed", identifiers)
            return JSONResponse({"error": str(e) or "Unknown error"}, status_code=500)

        body = PricesResponse(prices=quotes, ts=int(time.time() * 1000))
        return JSONResponse(body.model_dump(mode="json", exclude_none=True), status_code=200, headers=NO_STORE)

    @app.get("/health", tags=["Health"])
    def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring."""
        return {"status": "healthy", "service": "price-proxy"}

    return app
