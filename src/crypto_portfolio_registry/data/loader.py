"""Asset catalog loader."""

from functools import cache
from pathlib import Path
from typing import Any

import yaml

from crypto_portfolio_registry.core.models import Holding


@cache
def load_assets() -> dict[str, Any]:
    """
    Load the asset catalog from assets.yaml.

    Returns
    -------
    dict[str, Any]
        Catalog entries, default holdings and default price identifiers

    """
    path = Path(__file__).parent / "assets.yaml"
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


def get_asset_catalog() -> list[Holding]:
    """
    Get all assets offered by the picker.

    Returns
    -------
    list[Holding]
        Catalog entries as zero-amount holdings

    """
    return [Holding(**entry) for entry in load_assets()["catalog"]]


def get_catalog_entry(identifier: str) -> Holding | None:
    """
    Look up a catalog entry by identifier.

    Parameters
    ----------
    identifier : str
        Asset identifier

    Returns
    -------
    Holding | None
        Zero-amount holding or None if the asset is not in the catalog

    """
    for holding in get_asset_catalog():
        if holding.id == identifier:
            return holding
    return None


def get_default_holdings() -> list[Holding]:
    """
    Get the holdings a new portfolio starts with.

    Returns
    -------
    list[Holding]
        Seed holdings with zero amounts

    """
    holdings = []
    for identifier in load_assets()["default_holdings"]:
        holdings.append(get_catalog_entry(identifier) or Holding(id=identifier))
    return holdings


def get_default_price_ids() -> list[str]:
    """
    Get identifiers quoted when a price request names none.

    Returns
    -------
    list[str]
        Default asset identifiers

    """
    return list(load_assets()["default_price_ids"])


def search_assets(query: str, limit: int = 20) -> list[Holding]:
    """
    Filter the catalog by name or symbol.

    Parameters
    ----------
    query : str
        Case-insensitive substring; an empty query matches everything
    limit : int
        Maximum number of results

    Returns
    -------
    list[Holding]
        Matching catalog entries

    """
    needle = query.lower()
    matches = [
        holding
        for holding in get_asset_catalog()
        if needle in (holding.name or "").lower() or needle in (holding.symbol or "").lower()
    ]
    return matches[:limit]
