import asyncio
from pathlib import Path

import click
import tomlkit
from eth_account import Account
from pydantic import HttpUrl

from flasharb.config import CONFIG_FILE, Settings, load_settings, save_config_to_file
from flasharb.connection import connect_async_web3, connect_web3
from flasharb.exceptions import FlashArbError
from flasharb.functions import format_units, parse_units
from flasharb.quoting import fetch_quotes
from flasharb.submission import Web3FlashLoanSubmitter
from flasharb.venues import get_deployment
from flasharb.version import __version__
from flasharb.workflow import ArbitrageCheckResult, ArbitrageWorkflow


def _require_rpc(settings: Settings) -> HttpUrl | Path:
    if settings.rpc is None:
        raise click.ClickException(
            "No RPC endpoint configured. Set `rpc` in the config file or FLASHARB_RPC."
        )
    return settings.rpc


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=CONFIG_FILE,
    show_default=True,
    help="Path to the TOML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _settings(ctx: click.Context) -> Settings:
    try:
        return load_settings(ctx.obj["config_path"])
    except ValueError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc


@cli.group()
def config() -> None:
    """
    Manage the config file.
    """


@config.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """
    Write a config file with the default settings.
    """

    config_path: Path = ctx.obj["config_path"]
    if config_path.exists() and not force:
        raise click.ClickException(f"{config_path} already exists, use --force to overwrite.")

    save_config_to_file(Settings(), config_path)
    click.echo(f"Wrote default configuration to {config_path}")


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON instead of TOML.")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """
    Print the effective settings, excluding the private key.
    """

    settings = _settings(ctx)
    if as_json:
        click.echo(settings.model_dump_json(indent=2, exclude={"private_key"}, exclude_none=True))
    else:
        click.echo(
            tomlkit.dumps(
                settings.model_dump(mode="json", exclude={"private_key"}, exclude_none=True)
            )
        )


@cli.command()
@click.pass_context
def quotes(ctx: click.Context) -> None:
    """
    Print the current price on every configured venue.
    """

    settings = _settings(ctx)
    endpoint = _require_rpc(settings)

    async def _fetch() -> None:
        w3 = await connect_async_web3(endpoint)
        try:
            sweep = await fetch_quotes(
                deployments=[get_deployment(venue, settings.chain_id) for venue in settings.venues],
                base_token=settings.base_token,
                quote_token=settings.quote_token,
                w3=w3,
                base_token_decimals=settings.base_token_decimals,
            )
        finally:
            await w3.provider.disconnect()
        for quote in sweep.quotes:
            price = format_units(quote.price, settings.quote_token_decimals)
            click.echo(f"{quote.venue.name:<12} {price.normalize():f}")
        for venue, error in sweep.failures.items():
            click.echo(f"{venue.name:<12} failed: {error}", err=True)

    try:
        asyncio.run(_fetch())
    except FlashArbError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_result(result: ArbitrageCheckResult, settings: Settings) -> None:
    decision = result.decision
    if decision is None:
        click.echo("Not enough quotes to compare.")
        return

    spread = format_units(decision.spread, settings.quote_token_decimals)
    click.echo(
        f"cheap={decision.cheap_venue.name} rich={decision.rich_venue.name} "
        f"spread={spread.normalize():f} act={decision.act}"
    )
    if result.request is not None:
        for i, hop in enumerate(result.request.hops):
            click.echo(f"hop {i}: {hop.venue.name} {hop.token_in} -> {hop.token_out}")
    if result.receipt is not None:
        click.echo(f"confirmed: {result.receipt['transactionHash'].to_0x_hex()}")


@cli.command()
@click.option(
    "--min-spread",
    type=str,
    default=None,
    help="Minimum spread in whole quote tokens, e.g. 0.20. Overrides the config file.",
)
@click.option("--execute", is_flag=True, help="Submit the flash loan if the spread is actionable.")
@click.pass_context
def check(ctx: click.Context, min_spread: str | None, execute: bool) -> None:
    """
    Run one arbitrage check, and optionally submit the resulting flash loan.
    """

    settings = _settings(ctx)
    endpoint = _require_rpc(settings)

    try:
        min_spread_units = (
            parse_units(min_spread, settings.quote_token_decimals)
            if min_spread is not None
            else None
        )
    except FlashArbError as exc:
        raise click.BadParameter(str(exc), param_hint="--min-spread") from exc

    signer = (
        Account.from_key(settings.private_key.get_secret_value())
        if settings.private_key is not None
        else None
    )
    if execute and (signer is None or settings.loan.contract is None):
        raise click.ClickException(
            "--execute requires a private key and a flash loan contract address."
        )

    async def _check() -> ArbitrageCheckResult:
        submitter = (
            Web3FlashLoanSubmitter(await asyncio.to_thread(connect_web3, endpoint))
            if execute
            else None
        )
        w3 = await connect_async_web3(endpoint)
        try:
            return await ArbitrageWorkflow(
                settings=settings,
                w3=w3,
                signer=signer,
                submitter=submitter,
            ).check(min_spread=min_spread_units)
        finally:
            await w3.provider.disconnect()

    try:
        result = asyncio.run(_check())
    except FlashArbError as exc:
        raise click.ClickException(str(exc)) from exc

    _echo_result(result, settings)
