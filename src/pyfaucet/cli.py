"""CLI entry point for pyfaucet."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from pyfaucet.config import FaucetConfig, load_config
from pyfaucet.core.utils import format_address
from pyfaucet.faucet import AsyncFaucet
from pyfaucet.view import FaucetView


def _require_key(cfg: FaucetConfig) -> None:
    """Exit with error if no wallet key is configured."""
    if not cfg.private_key:
        click.echo("Error: No wallet private key configured.", err=True)
        click.echo("Set PYFAUCET_PRIVATE_KEY env var or private_key in the [wallet] config section.", err=True)
        sys.exit(1)


async def _open(cfg: FaucetConfig) -> AsyncFaucet:
    return await AsyncFaucet.create(
        private_key=cfg.private_key,
        network=cfg.network(),
        wallet_rpc_url=cfg.wallet_rpc_url,
        contract_address=cfg.contract_address,
        poll_interval=cfg.poll_interval,
        confirmation_timeout=cfg.confirmation_timeout,
    )


def _echo_view(view: FaucetView) -> None:
    click.echo(f"State:      {view.state.value}")
    click.echo(f"Network:    {view.network_name}")
    click.echo(f"Account:    {view.account or '(not connected)'}")
    if view.tx_hash:
        click.echo(f"Tx:         {view.tx_url or view.tx_hash}")
    click.echo(f"Message:    {view.message}")


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """pyfaucet - claim testnet tokens from the command line."""
    ctx.ensure_object(dict)
    cfg = load_config(config_path)
    ctx.obj["config"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show network and contract details."""
    cfg: FaucetConfig = ctx.obj["config"]
    network = cfg.network()
    click.echo(f"Name:       {network.name}")
    click.echo(f"Chain ID:   {network.chain_id_int} ({network.chain_id})")
    click.echo(f"Currency:   {network.currency.symbol} ({network.currency.decimals} decimals)")
    click.echo(f"RPC:        {', '.join(network.rpc_urls)}")
    click.echo(f"Explorer:   {network.explorer_url or '(not set)'}")
    contract_link = network.address_url(cfg.contract_address)
    click.echo(f"Contract:   {format_address(cfg.contract_address)}" + (f" {contract_link}" if contract_link else ""))
    click.echo(f"Wallet key: {'***configured***' if cfg.private_key else '(not set)'}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the wallet's current account and network state."""
    cfg: FaucetConfig = ctx.obj["config"]
    _require_key(cfg)

    async def _status() -> None:
        async with await _open(cfg) as faucet:
            _echo_view(faucet.view())

    asyncio.run(_status())


# ── Actions ────────────────────────────────────────────


@cli.command()
@click.pass_context
def connect(ctx: click.Context) -> None:
    """Connect the wallet and move it to the faucet network."""
    cfg: FaucetConfig = ctx.obj["config"]
    _require_key(cfg)

    async def _connect() -> bool:
        async with await _open(cfg) as faucet:
            result = await faucet.connect()
            _echo_view(faucet.view())
            return result.ok

    if not asyncio.run(_connect()):
        sys.exit(1)


@cli.command()
@click.pass_context
def switch(ctx: click.Context) -> None:
    """Ask the wallet to switch to the faucet network."""
    cfg: FaucetConfig = ctx.obj["config"]
    _require_key(cfg)

    async def _switch() -> bool:
        async with await _open(cfg) as faucet:
            result = await faucet.switch_network()
            click.echo(result.message)
            return result.ok

    if not asyncio.run(_switch()):
        sys.exit(1)


@cli.command()
@click.pass_context
def claim(ctx: click.Context) -> None:
    """Connect if needed, then claim testnet tokens."""
    cfg: FaucetConfig = ctx.obj["config"]
    _require_key(cfg)

    async def _claim() -> bool:
        async with await _open(cfg) as faucet:
            shown: set[str] = set()

            def on_view(view: FaucetView) -> None:
                if view.tx_hash and view.tx_hash not in shown:
                    shown.add(view.tx_hash)
                    click.echo(f"Transaction: {view.tx_url or view.tx_hash}")
                    click.echo("Waiting for confirmation...")

            faucet.add_listener(on_view)

            if faucet.session.account is None:
                result = await faucet.connect()
                if not result.ok:
                    click.echo(f"Error: {result.message}", err=True)
                    return False

            result = await faucet.claim()
            if result.ok:
                click.echo("Success! Tokens have been sent to your wallet.")
            else:
                click.echo(f"Error: {result.message}", err=True)
            return result.ok

    if not asyncio.run(_claim()):
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
