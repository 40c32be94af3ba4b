"""Click-based CLI for finz.

Thin wrapper around library modules. Every command delegates to the
library packages; nothing here talks to a provider directly.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from finz.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _fail(exc: Exception) -> None:
    console.print(f"[red]{type(exc).__name__}: {exc}[/red]")
    raise SystemExit(1)


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="FINZ_CONFIG",
    default=None,
    help="Path to finz.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="finz-dashboard")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """finz: quotes, charts, FX, and crypto for a personal dashboard."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console)],
        )


# ---------------------------------------------------------------------------
# quote
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print raw JSON.")
@click.pass_context
def quote(ctx: click.Context, symbol: str, as_json: bool) -> None:
    """Show the current quote for SYMBOL."""
    config = _load_config(ctx)

    async def _run():
        from finz.quotes import YahooClient

        async with YahooClient(config.yahoo, config.http) as client:
            return await client.get_quote_with_industry(symbol)

    from finz.core import FinzError

    try:
        result = _run_async(_run())
    except FinzError as e:
        _fail(e)
    if result is None:
        console.print(f"[yellow]Symbol not found: {symbol}[/yellow]")
        raise SystemExit(1)

    if as_json:
        _echo_json(result.model_dump())
        return

    from finz.charts import format_delta

    table = Table(title=f"{result.display_name} ({result.symbol})")
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Price", f"{result.price:.2f}" if result.price is not None else "N/A")
    table.add_row("Change", format_delta(result.change_percent) or "N/A")
    table.add_row("Currency", result.currency or "N/A")
    table.add_row("Exchange", result.exchange or "N/A")
    table.add_row("Industry", result.industry or "N/A")
    console.print(table)


# ---------------------------------------------------------------------------
# chart
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.option(
    "--range",
    "-r",
    "chart_range",
    type=click.Choice(["30d", "3mo", "1y"], case_sensitive=False),
    default="30d",
    help="Chart window.",
)
@click.option("--height", type=int, default=120, help="Pixel height for scaled values.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print raw JSON.")
@click.pass_context
def chart(
    ctx: click.Context, symbol: str, chart_range: str, height: int, as_json: bool
) -> None:
    """Show closes for SYMBOL with axis ticks and pixel positions."""
    config = _load_config(ctx)

    async def _run():
        from finz.core import ChartRange
        from finz.quotes import YahooClient

        async with YahooClient(config.yahoo, config.http) as client:
            return await client.get_chart(symbol, ChartRange(chart_range.lower()))

    from finz.core import FinzError

    try:
        series = _run_async(_run())
    except FinzError as e:
        _fail(e)

    if as_json:
        _echo_json(series.model_dump())
        return

    if not series.points:
        console.print(f"[yellow]No chart data for {symbol}[/yellow]")
        return

    from datetime import datetime, timezone

    from finz.charts import axis_ticks, scale_values

    closes = series.closes
    ticks = axis_ticks(min(closes), max(closes))
    ys = scale_values(closes, height)

    console.print(f"Axis ticks: {', '.join(f'{t:g}' for t in ticks)}")
    table = Table(title=f"{symbol} {chart_range}")
    table.add_column("Date")
    table.add_column("Close", justify="right")
    table.add_column("y", justify="right")
    for point, y in zip(series.points, ys):
        day = datetime.fromtimestamp(point.timestamp_millis / 1000, tz=timezone.utc)
        table.add_row(day.date().isoformat(), f"{point.close:.2f}", f"{y:.1f}")
    console.print(table)


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", type=int, default=None, help="Maximum results.")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int | None) -> None:
    """Search instruments by name or ticker."""
    config = _load_config(ctx)

    async def _run():
        from finz.quotes import YahooClient

        async with YahooClient(config.yahoo, config.http) as client:
            return await client.search(query, limit)

    from finz.core import FinzError

    try:
        results = _run_async(_run())
    except FinzError as e:
        _fail(e)

    table = Table(title=f"Search: {query}")
    table.add_column("Symbol", style="bold")
    table.add_column("Name")
    table.add_column("Exchange")
    table.add_column("Currency")
    for r in results:
        table.add_row(r.symbol, r.short_name or "", r.exchange or "", r.currency or "")
    console.print(table)


# ---------------------------------------------------------------------------
# profile
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.pass_context
def profile(ctx: click.Context, symbol: str) -> None:
    """Show the company profile blurb for SYMBOL."""
    config = _load_config(ctx)

    async def _run():
        from finz.profiles import CompanySummarizer, ProfileService
        from finz.quotes import YahooClient

        async with YahooClient(config.yahoo, config.http) as client:
            service = ProfileService(client, CompanySummarizer.from_config(config.summary))
            return await service.get_profile(symbol)

    from finz.core import FinzError

    try:
        result = _run_async(_run())
    except FinzError as e:
        _fail(e)

    console.print(f"[bold]{result.company_name}[/bold] ({result.symbol}) - {result.market.value}")
    console.print(f"Industry: {result.industry or 'N/A'}")
    for line in result.bullets:
        console.print(line)
    console.print(f"[dim]source: {result.source.value}[/dim]")


# ---------------------------------------------------------------------------
# forex / crypto
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def forex(ctx: click.Context) -> None:
    """Show the latest and previous exchange rate."""
    config = _load_config(ctx)

    async def _run():
        from finz.core.http import create_http_client
        from finz.markets import ForexClient

        async with create_http_client(config.http) as http:
            return await ForexClient(config.forex, http).get_snapshot()

    from finz.core import FinzError

    try:
        snapshot = _run_async(_run())
    except FinzError as e:
        _fail(e)

    from finz.charts import format_delta, rate_change_percent

    pair = f"{config.forex.base_currency}/{config.forex.quote_currency}"
    table = Table(title=f"{pair} ({snapshot.as_of or 'latest'})")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Rate", f"{snapshot.rate:.2f}")
    table.add_row(
        "Previous",
        f"{snapshot.previous_rate:.2f}" if snapshot.has_previous else "unavailable",
    )
    change = rate_change_percent(snapshot.rate, snapshot.previous_rate)
    table.add_row("Change", format_delta(change) or "N/A")
    console.print(table)


@cli.command()
@click.pass_context
def crypto(ctx: click.Context) -> None:
    """Show the configured coin's spot price."""
    config = _load_config(ctx)

    async def _run():
        from finz.core.http import create_http_client
        from finz.markets import CryptoClient

        async with create_http_client(config.http) as http:
            return await CryptoClient(config.crypto, http).get_quote()

    from finz.core import FinzError

    try:
        result = _run_async(_run())
    except FinzError as e:
        _fail(e)

    from finz.charts import format_delta

    console.print(
        f"{result.coin_id}: {config.crypto.vs_currency.upper()} {result.price:.0f} "
        f"({format_delta(result.change_percent)})"
    )


# ---------------------------------------------------------------------------
# state
# ---------------------------------------------------------------------------


@cli.group()
def state() -> None:
    """Read or write stored dashboard values."""


async def _with_store(config, action):
    from finz.core import StorageUnavailableError
    from finz.state import create_state_store

    store = await create_state_store(config.storage)
    if store is None:
        raise StorageUnavailableError(
            "State store is disabled", context={"operation": "open"}
        )
    try:
        return await action(store)
    finally:
        await store.close()


@state.command("get")
@click.argument("key")
@click.pass_context
def state_get(ctx: click.Context, key: str) -> None:
    """Print the value stored under KEY."""
    config = _load_config(ctx)

    from finz.core import FinzError

    try:
        value = _run_async(_with_store(config, lambda store: store.get(key)))
    except FinzError as e:
        _fail(e)
    _echo_json({"key": key, "value": value})


@state.command("set")
@click.argument("key")
@click.argument("value", type=float)
@click.pass_context
def state_set(ctx: click.Context, key: str, value: float) -> None:
    """Store VALUE under KEY (last write wins)."""
    config = _load_config(ctx)

    from finz.core import FinzError

    try:
        _run_async(_with_store(config, lambda store: store.put(key, value)))
    except FinzError as e:
        _fail(e)
    console.print(f"[green]✓[/green] {key} = {value:g}")


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address.")
@click.option("--port", "-p", type=int, default=None, help="Port number.")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    config = _load_config(ctx)
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting finz API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    # create_app (and any reload worker) locates the file via FINZ_CONFIG
    if ctx.obj.get("config_path"):
        os.environ["FINZ_CONFIG"] = os.path.abspath(ctx.obj["config_path"])

    uvicorn.run(
        "finz.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
