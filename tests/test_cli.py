"""Tests for the command line interface."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from crypto_portfolio_registry.cli.main import _parse_holding, app
from crypto_portfolio_registry.core.identifiers import DJB2_LEGACY, derive_asset_id, to_hex
from crypto_portfolio_registry.core.models import PriceQuote
from crypto_portfolio_registry.core.registry import AssetRegistry
from crypto_portfolio_registry.exceptions import RegistryReadError

runner = CliRunner()

OWNER = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


def test_asset_id_default_scheme():
    """asset-id prints the keccak key."""
    result = runner.invoke(app, ["asset-id", "coingecko:bitcoin"])

    assert result.exit_code == 0
    assert to_hex(derive_asset_id("coingecko:bitcoin")) in result.output


def test_asset_id_legacy_scheme():
    """--scheme selects the legacy derivation."""
    result = runner.invoke(app, ["asset-id", "a", "--scheme", DJB2_LEGACY])

    assert result.exit_code == 0
    assert "2b5c4" in result.output


def test_asset_id_unknown_scheme():
    """Unknown schemes exit with an error."""
    result = runner.invoke(app, ["asset-id", "a", "--scheme", "md5"])

    assert result.exit_code == 1
    assert "Unknown asset id scheme" in result.output


def test_list_assets_query():
    """list-assets filters the catalog."""
    result = runner.invoke(app, ["list-assets", "--query", "doge"])

    assert result.exit_code == 0
    assert "coingecko:dogecoin" in result.output
    assert "coingecko:bitcoin" not in result.output


def test_list_assets_no_results():
    """An unmatched query says so."""
    result = runner.invoke(app, ["list-assets", "-q", "zzz"])

    assert result.exit_code == 0
    assert "No results" in result.output


def test_prices_command():
    """prices renders upstream quotes."""
    pricing = MagicMock()
    pricing.__enter__.return_value = pricing
    pricing.get_quotes.return_value = {"coingecko:bitcoin": PriceQuote(symbol="BTC", price=Decimal("64000"))}

    with patch("crypto_portfolio_registry.cli.main.DeFiLlamaPricing", return_value=pricing):
        result = runner.invoke(app, ["prices", "coingecko:bitcoin"])

    assert result.exit_code == 0
    assert "BTC" in result.output
    assert "64,000.00" in result.output
    pricing.get_quotes.assert_called_once_with(["coingecko:bitcoin"])


def test_parse_holding():
    """ID=AMOUNT options become holdings with catalog metadata."""
    holding = _parse_holding("coingecko:bitcoin=0.25")

    assert holding.symbol == "BTC"
    assert holding.amount == Decimal("0.25")
    assert _parse_holding("base:0xabc=nan").amount == 0

    with pytest.raises(typer.BadParameter):
        _parse_holding("coingecko:bitcoin")


def test_save_command_writes_registry():
    """save writes every holding in one batch signed by the loaded account."""
    registry = AssetRegistry()
    provider = MagicMock()
    provider.load_account.return_value = OWNER

    with patch("crypto_portfolio_registry.cli.main._connect_registry", return_value=(provider, registry)):
        result = runner.invoke(
            app,
            ["save", "--account", "me", "-h", "coingecko:bitcoin=0.5", "-h", "coingecko:ethereum=2"],
        )

    assert result.exit_code == 0, result.output
    assert "Saved 2 holdings" in result.output
    assert registry.get_many(OWNER, [derive_asset_id("coingecko:bitcoin"), derive_asset_id("coingecko:ethereum")]) == [
        5 * 10**17,
        2 * 10**18,
    ]
    provider.load_account.assert_called_once_with("me")
    provider.disconnect.assert_called_once()


def _show_fixtures():
    registry = AssetRegistry()
    registry.set_many([derive_asset_id("coingecko:bitcoin")], [5 * 10**17], sender=OWNER)
    provider = MagicMock()
    pricing = MagicMock()
    pricing.__enter__.return_value = pricing
    pricing.get_quotes.return_value = {"coingecko:bitcoin": PriceQuote(symbol="BTC", price=Decimal("64000"))}
    return provider, registry, pricing


def test_show_table_output():
    """show loads stored amounts and renders them valued at current prices."""
    provider, registry, pricing = _show_fixtures()

    with (
        patch("crypto_portfolio_registry.cli.main._connect_registry", return_value=(provider, registry)),
        patch("crypto_portfolio_registry.cli.main.DeFiLlamaPricing", return_value=pricing),
    ):
        result = runner.invoke(app, ["show", OWNER, "--asset", "coingecko:bitcoin"])

    assert result.exit_code == 0, result.output
    assert "BTC" in result.output
    assert "32,000.00" in result.output
    pricing.get_quotes.assert_called_once_with(["coingecko:bitcoin"])
    provider.disconnect.assert_called_once()


def test_show_json_output():
    """--format json prints the valuation as JSON."""
    provider, registry, pricing = _show_fixtures()

    with (
        patch("crypto_portfolio_registry.cli.main._connect_registry", return_value=(provider, registry)),
        patch("crypto_portfolio_registry.cli.main.DeFiLlamaPricing", return_value=pricing),
    ):
        result = runner.invoke(app, ["show", OWNER, "-a", "coingecko:bitcoin", "--format", "json"])

    assert result.exit_code == 0, result.output
    assert '"total_value"' in result.output
    assert '"coingecko:bitcoin"' in result.output
    assert "32000" in result.output


def test_show_read_failure_exits():
    """A failed registry read exits with the error and still disconnects."""
    provider = MagicMock()
    store = MagicMock()
    store.get_many.side_effect = RegistryReadError("rpc down")

    with patch("crypto_portfolio_registry.cli.main._connect_registry", return_value=(provider, store)):
        result = runner.invoke(app, ["show", OWNER])

    assert result.exit_code == 1
    assert "rpc down" in result.output
    provider.disconnect.assert_called_once()


def test_serve_runs_price_proxy():
    """serve hands the proxy app to uvicorn on the requested address."""
    with patch("uvicorn.run") as run:
        result = runner.invoke(app, ["serve", "--host", "0.0.0.0", "--port", "9000"])

    assert result.exit_code == 0, result.output
    _, kwargs = run.call_args
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9000
