"""
xmrwallet CLI - Plan and create proportional sweep transactions.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Coroutine
from typing import Any

import httpx
import typer
from loguru import logger

from xmrwallet import logbridge
from xmrwallet.backends.wallet_rpc import WalletRpcEngine
from xmrwallet.config import Settings, get_settings
from xmrwallet.errors import SweepRejected, WalletEngineError
from xmrwallet.wallet.models import Priority, SweepPlan
from xmrwallet.wallet.sweep import create_multi_sweep_transaction, plan_sweep

app = typer.Typer(
    name="xmr-wallet",
    help="Monero wallet sweep tooling",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def format_plan(plan: SweepPlan) -> str:
    lines = [f"Sweepable: {plan.sweepable} (fee {plan.fee})"]
    width = max(len(address) for address in plan.destinations)
    for out in plan.outputs:
        lines.append(f"  {out.address:<{width}}  {out.amount}")
    lines.append(f"Total: {plan.total}")
    return "\n".join(lines)


def _priority(value: int | None, settings: Settings) -> Priority:
    return settings.priority if value is None else Priority(value)


def _engine(settings: Settings) -> WalletRpcEngine:
    return WalletRpcEngine(
        rpc_url=settings.rpc_url,
        rpc_user=settings.rpc_user,
        rpc_password=settings.rpc_password,
        timeout=settings.rpc_timeout,
    )


@app.command()
def plan(
    destination: list[str] = typer.Option(
        ..., "--destination", "-d", help="Destination address (repeatable)"
    ),
    ratio: list[float] = typer.Option(
        ..., "--ratio", "-r", help="Share for the matching destination (repeatable)"
    ),
    balance: int = typer.Option(..., "--balance", min=0, help="Unlocked balance (atomic units)"),
    fee: int = typer.Option(..., "--fee", min=0, help="Estimated fee (atomic units)"),
    log_level: str = typer.Option("INFO", "--log-level", "-l"),
) -> None:
    """Compute a sweep plan offline, without contacting a wallet."""
    setup_logging(log_level)

    try:
        sweep_plan = plan_sweep(destination, ratio, balance, fee)
    except SweepRejected as e:
        logger.error(f"Sweep rejected ({e.reason.value}): {e}")
        raise typer.Exit(1)

    typer.echo(format_plan(sweep_plan))


@app.command("balance")
def show_balance(
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Show total and unlocked balance of the opened wallet."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    asyncio.run(_run_with_bridge(settings, _show_balance(settings)))


async def _show_balance(settings: Settings) -> None:
    engine = _engine(settings)
    try:
        wallet_balance = await engine.get_balance()
    finally:
        await engine.close()

    typer.echo(f"Total:    {wallet_balance.total}")
    typer.echo(f"Unlocked: {wallet_balance.unlocked}")


@app.command("check-tx")
def check_tx(
    txid: str = typer.Option(..., "--txid", help="Transaction id"),
    tx_key: str = typer.Option(..., "--tx-key", help="Transaction private key"),
    address: str = typer.Option(..., "--address", "-a", help="Destination address"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Verify what a transaction paid to an address using its transaction key."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    asyncio.run(_run_with_bridge(settings, _check_tx(settings, txid, tx_key, address)))


async def _check_tx(settings: Settings, txid: str, tx_key: str, address: str) -> None:
    engine = _engine(settings)
    try:
        status = await engine.check_tx_key(txid, tx_key, address)
    finally:
        await engine.close()

    typer.echo(f"Received:      {status.received}")
    typer.echo(f"In pool:       {status.in_pool}")
    typer.echo(f"Confirmations: {status.confirmations}")


@app.command()
def sweep(
    destination: list[str] = typer.Option(
        ..., "--destination", "-d", help="Destination address (repeatable)"
    ),
    ratio: list[float] = typer.Option(
        ..., "--ratio", "-r", help="Share for the matching destination (repeatable)"
    ),
    priority: int | None = typer.Option(
        None, "--priority", "-p", min=0, max=3, help="Fee priority 0-3 (default from settings)"
    ),
    payment_id: str = typer.Option("", "--payment-id"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Sweep the unlocked balance to several destinations (transaction is not relayed)."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    asyncio.run(
        _run_with_bridge(
            settings,
            _sweep(settings, destination, ratio, _priority(priority, settings), payment_id),
        )
    )


async def _sweep(
    settings: Settings,
    destinations: list[str],
    ratios: list[float],
    priority: Priority,
    payment_id: str,
) -> None:
    engine = _engine(settings)
    try:
        pending = await create_multi_sweep_transaction(
            engine, destinations, ratios, priority=priority, payment_id=payment_id
        )
    finally:
        await engine.close()

    pending.check_error()

    typer.echo(f"Amount: {pending.amount}")
    typer.echo(f"Fee:    {pending.fee}")
    for txid in pending.txids:
        typer.echo(f"Txid:   {txid}")


async def _run_with_bridge(settings: Settings, coro: Coroutine[Any, Any, None]) -> None:
    if settings.forward_engine_logs:
        logbridge.install(settings.log_channel)
    try:
        await coro
    except SweepRejected as e:
        logger.error(f"Sweep rejected ({e.reason.value}): {e}")
        raise typer.Exit(1)
    except WalletEngineError as e:
        logger.error(f"Wallet error: {e}")
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        logger.error(f"Could not reach wallet RPC at {settings.rpc_url}: {e}")
        raise typer.Exit(1)
    finally:
        if settings.forward_engine_logs:
            logbridge.uninstall()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
