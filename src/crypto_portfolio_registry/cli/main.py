"""CLI for crypto portfolio registry."""

import asyncio
import json
from enum import StrEnum

import httpx
import typer
from rich.console import Console
from rich.live import Live
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.traceback import install

from crypto_portfolio_registry.config import get_settings
from crypto_portfolio_registry.core.identifiers import SCHEMES, derive_asset_id, to_hex
from crypto_portfolio_registry.core.models import Holding, PortfolioValuation, coerce_amount
from crypto_portfolio_registry.core.portfolio import PortfolioView
from crypto_portfolio_registry.data import get_catalog_entry, get_default_price_ids, search_assets
from crypto_portfolio_registry.exceptions import PortfolioRegistryError
from crypto_portfolio_registry.logging_setup import setup_logging
from crypto_portfolio_registry.pricing import DeFiLlamaPricing, PriceProxyClient

# Install rich traceback handler
install(show_locals=False)

app = typer.Typer(
    name="crypto-portfolio-registry",
    help="Track a manual crypto portfolio, price it via DeFiLlama and store balances on-chain",
    add_completion=False,
)

console = Console()


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _holding_for(identifier: str) -> Holding:
    return get_catalog_entry(identifier) or Holding(id=identifier)


def _parse_holding(spec: str) -> Holding:
    """Parse an ``ID=AMOUNT`` option value."""
    identifier, sep, amount = spec.rpartition("=")
    if not sep or not identifier:
        msg = f"Expected ID=AMOUNT, got '{spec}'"
        raise typer.BadParameter(msg)
    holding = _holding_for(identifier.strip())
    return holding.model_copy(update={"amount": coerce_amount(amount)})


def _connect_registry(debug: bool = False):
    """
    Connect to the configured network and return provider and registry client.

    Raises
    ------
    typer.Exit
        If connection fails

    """
    from crypto_portfolio_registry.rpc import ApeRPCProvider, PortfolioRegistryContract

    settings = get_settings()
    rpc_provider = ApeRPCProvider(chain=settings.chain, network=settings.network)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Connecting to {settings.chain}:{settings.network}...", total=None)
        try:
            rpc_provider.connect()
        except RuntimeError as e:
            progress.stop()
            console.print(f"[bold red]Failed to connect:[/bold red] {e}")
            console.print("[yellow]Check your Ape network configuration and provider credentials[/yellow]")
            raise typer.Exit(code=1) from e
        progress.update(task, description=f"✓ Connected to {settings.chain}")

    if debug:
        console.print(f"[dim]Registry contract: {settings.registry_address}[/dim]")
    return rpc_provider, PortfolioRegistryContract(rpc_provider, settings.registry_address)


@app.command()
def prices(
    ids: list[str] | None = typer.Argument(None, help="Asset identifiers (default set if omitted)"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """
    Show current DeFiLlama quotes.

    Examples:

        crypto-portfolio-registry prices coingecko:bitcoin coingecko:ethereum
    """
    setup_logging(debug)
    settings = get_settings()
    identifiers = ids or get_default_price_ids()

    with DeFiLlamaPricing(
        base_url=settings.defillama_url,
        timeout=settings.http_timeout,
        search_width=settings.search_width,
    ) as pricing:
        try:
            quotes = pricing.get_quotes(identifiers)
        except PortfolioRegistryError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1) from e

    table = Table(title="Prices", show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan")
    table.add_column("Symbol", style="green")
    table.add_column("Price", style="bold green", justify="right")
    for identifier, quote in quotes.items():
        table.add_row(identifier, quote.symbol or "-", f"${quote.price:,.2f}")
    console.print(table)


@app.command()
def asset_id(
    identifier: str = typer.Argument(..., help="Asset identifier, e.g. coingecko:bitcoin"),
    scheme: str | None = typer.Option(None, "--scheme", "-s", help=f"Derivation scheme ({', '.join(SCHEMES)})"),
) -> None:
    """Print the on-chain bytes32 key of an asset identifier."""
    scheme = scheme or get_settings().asset_id_scheme
    try:
        key = derive_asset_id(identifier, scheme)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    console.print(to_hex(key), highlight=False)


@app.command()
def list_assets(
    query: str = typer.Option("", "--query", "-q", help="Filter by name or symbol"),
) -> None:
    """List assets available in the picker."""
    table = Table(title="Assets", show_header=True, header_style="bold magenta")
    table.add_column("Identifier", style="cyan")
    table.add_column("Symbol", style="green")
    table.add_column("Name", style="yellow")

    matches = search_assets(query)
    for holding in matches:
        table.add_row(holding.id, holding.symbol or "", holding.name or "")

    if not matches:
        console.print("[yellow]No results[/yellow]")
        return
    console.print(table)


@app.command()
def show(
    address: str = typer.Argument(..., help="Owner address to read"),
    assets: list[str] | None = typer.Option(None, "--asset", "-a", help="Asset identifier (repeatable)"),
    format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """
    Load stored amounts for an address and value them at current prices.

    Examples:

        crypto-portfolio-registry show 0xABC... --asset coingecko:bitcoin --asset coingecko:solana
    """
    setup_logging(debug)
    settings = get_settings()
    view = PortfolioView(
        [_holding_for(identifier) for identifier in assets] if assets else None,
        asset_id_scheme=settings.asset_id_scheme,
    )

    rpc_provider, registry = _connect_registry(debug)
    try:
        if not view.load_from_chain(registry, address):
            console.print(f"[bold red]Error:[/bold red] {view.chain_error or 'nothing to load'}")
            raise typer.Exit(1)
    finally:
        rpc_provider.disconnect()

    with DeFiLlamaPricing(
        base_url=settings.defillama_url,
        timeout=settings.http_timeout,
        search_width=settings.search_width,
    ) as pricing:
        try:
            view.replace_prices(pricing.get_quotes(view.identifiers))
        except PortfolioRegistryError as e:
            view.record_price_error(str(e))

    if format == OutputFormat.JSON:
        _output_json(view.valuation())
    else:
        _output_table(view, title=f"Portfolio for {address[:10]}...{address[-8:]}")


@app.command()
def save(
    holdings: list[str] = typer.Option(..., "--holding", "-h", help="ID=AMOUNT (repeatable)"),
    account: str | None = typer.Option(None, "--account", help="Ape account alias used to sign"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """
    Store holdings in the on-chain registry with a single batch write.

    Examples:

        crypto-portfolio-registry save --account me -h coingecko:bitcoin=0.5 -h coingecko:ethereum=2
    """
    setup_logging(debug)
    settings = get_settings()
    view = PortfolioView([_parse_holding(spec) for spec in holdings], asset_id_scheme=settings.asset_id_scheme)

    alias = account or settings.account_alias
    if not alias:
        console.print("[bold red]Error:[/bold red] no account alias (use --account or PORTFOLIO_ACCOUNT_ALIAS)")
        raise typer.Exit(1)

    rpc_provider, registry = _connect_registry(debug)
    try:
        sender = rpc_provider.load_account(alias)
        result = view.save_on_chain(registry, sender)
    finally:
        rpc_provider.disconnect()

    if not result.ok:
        console.print(f"[bold red]Save failed ({result.error_kind}):[/bold red] {result.message}")
        raise typer.Exit(1)

    console.print(f"[bold green]✓ Saved {len(view.holdings)} holdings[/bold green]")
    if result.transaction_hash:
        console.print(f"[dim]Transaction: {result.transaction_hash}[/dim]")


@app.command()
def watch(
    assets: list[str] | None = typer.Option(None, "--asset", "-a", help="Asset identifier (repeatable)"),
    api_url: str | None = typer.Option(None, "--api-url", help="Price proxy URL (in-process proxy if omitted)"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Show a live-updating price table until interrupted."""
    setup_logging(debug)
    view = PortfolioView([_holding_for(identifier) for identifier in assets] if assets else None)

    try:
        asyncio.run(_watch(view, api_url))
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")


async def _watch(view: PortfolioView, api_url: str | None) -> None:
    settings = get_settings()
    upstream: DeFiLlamaPricing | None = None
    if api_url:
        client = PriceProxyClient(api_url, timeout=settings.http_timeout)
    else:
        from crypto_portfolio_registry.api import create_app

        # ASGITransport does not run lifespan events, so the upstream client is closed here
        upstream = DeFiLlamaPricing(
            settings.defillama_url,
            timeout=settings.http_timeout,
            search_width=settings.search_width,
        )
        transport = httpx.ASGITransport(app=create_app(pricing=upstream, settings=settings))
        client = PriceProxyClient(
            "http://price-proxy",
            client=httpx.AsyncClient(transport=transport, timeout=settings.http_timeout),
        )

    try:
        async with client, view.polling(client, interval=settings.poll_interval):
            with Live(_build_table(view), console=console, refresh_per_second=2) as live:
                while True:
                    await asyncio.sleep(0.5)
                    live.update(_build_table(view))
    finally:
        if upstream is not None:
            upstream.close()


def _build_table(view: PortfolioView, title: str = "Portfolio") -> Table:
    valuation = view.valuation()

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Asset", style="cyan")
    table.add_column("Symbol", style="green")
    table.add_column("Price", style="white", justify="right")
    table.add_column("Amount", style="white", justify="right")
    table.add_column("Value", style="bold green", justify="right")

    for row in valuation.holdings:
        table.add_row(
            row.holding.name or row.holding.id,
            row.symbol,
            f"${row.price:,.2f}",
            f"{row.holding.amount:,.4f}",
            f"${row.value:,.2f}",
        )

    if view.error:
        status = f"[red]{view.error}[/red]"
    elif view.loading:
        status = "[dim]Updating prices…[/dim]"
    else:
        status = ""
    table.caption = f"{status}  Total: ${valuation.total_value:,.2f}".strip()
    return table


def _output_table(view: PortfolioView, title: str) -> None:
    """Output portfolio as rich table."""
    console.print("\n")
    console.print(_build_table(view, title=title))
    console.print("\n")


def _output_json(valuation: PortfolioValuation) -> None:
    """Output portfolio valuation as JSON."""
    data = valuation.model_dump(mode="json")
    console.print(json.dumps(data, indent=2))


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Bind port"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Run the price proxy HTTP server."""
    import uvicorn

    from crypto_portfolio_registry.api import create_app

    setup_logging(debug)
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level="debug" if debug else "info",
    )


if __name__ == "__main__":
    app()
