"""Typer CLI for the coinfolio application."""
from __future__ import annotations

import asyncio
from enum import Enum
import logging
from pathlib import Path
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

import typer

from . import utils
from .aggregation import filters
from .aggregation.monthly import aggregate_by_month
from .aggregation.positions import rollup_positions
from .aggregation.summary import summarize_operations
from .config import AppSettings, load_settings
from .ingestion import fetch as fetch_mod
from .ingestion import upload as upload_mod
from .providers.backend import BackendClient, BackendError
from .reconciliation.files import in_flight, merge_file_listing
from .reporting import console as console_report
from .reporting import formats, summaries, xlsx
from .types import CreateWalletRequest, FileStatus, Operation, UpdateWalletRequest
from .valuation import StaticPriceProvider, mark_to_market, portfolio_summary

app = typer.Typer(help="Crypto wallet portfolio tracking")

T = TypeVar("T")


class CostMethodChoice(str, Enum):
    average = "average"
    legacy = "legacy"


def _settings(config: Optional[Path], overrides: Dict[str, Any]) -> AppSettings:
    settings = load_settings(config, overrides)
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    utils.CACHE_ROOT = settings.cache_dir
    return settings


def _client(settings: AppSettings) -> BackendClient:
    return BackendClient(settings.api_base_url, timeout=settings.timeout)


def _run(coro: Awaitable[T]) -> T:
    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except BackendError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _wallet_overrides(wallet: List[int]) -> Dict[str, Any]:
    return {"wallets": wallet} if wallet else {}


def _require_wallets(settings: AppSettings) -> List[int]:
    if not settings.wallets:
        raise typer.BadParameter("No wallets provided")
    return settings.wallets


def _load(settings: AppSettings, all_statuses: bool) -> tuple[List[Operation], Optional[filters.OperationPredicate]]:
    operations = fetch_mod.load_operations(_require_wallets(settings))
    include = None if all_statuses else filters.status_in(settings.statuses)
    return operations, include


@app.command()
def wallets(config: Optional[Path] = typer.Option(None, "--config", help="Config YAML")) -> None:
    """List the wallets known to the backend."""

    settings = _settings(config, {})

    async def _list():
        async with _client(settings) as client:
            return await client.list_wallets()

    console_report.render_wallets(_run(_list()))


@app.command("create-wallet")
def create_wallet(
    name: str = typer.Argument(..., help="Wallet name"),
    user: int = typer.Option(..., "--user", help="Owner user id"),
    brokerage: int = typer.Option(..., "--brokerage", help="Brokerage id"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """Create a wallet tied to a brokerage."""

    settings = _settings(config, {})
    request = CreateWalletRequest(name=name, user_id=user, brokerage_id=brokerage)

    async def _create():
        async with _client(settings) as client:
            return await client.create_wallet(request)

    created = _run(_create())
    typer.echo(f"Created wallet {created.id} ({created.name})")


@app.command("rename-wallet")
def rename_wallet(
    wallet_id: int = typer.Argument(..., help="Wallet id"),
    name: Optional[str] = typer.Argument(None, help="New wallet name"),
    active: Optional[bool] = typer.Option(None, "--active/--inactive", help="Activate or deactivate the wallet"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """Rename a wallet or change whether it is active."""

    if name is None and active is None:
        raise typer.BadParameter("Nothing to update: pass a new name or --active/--inactive")
    settings = _settings(config, {})
    request = UpdateWalletRequest(name=name, active=active)

    async def _update():
        async with _client(settings) as client:
            return await client.update_wallet(wallet_id, request)

    updated = _run(_update())
    state = "active" if updated.active else "inactive"
    typer.echo(f"Updated wallet {updated.id} ({updated.name}, {state})")


@app.command("delete-wallet")
def delete_wallet(
    wallet_id: int = typer.Argument(..., help="Wallet id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """Delete a wallet. The backend refuses wallets that still hold operations."""

    if not yes:
        typer.confirm(f"Delete wallet {wallet_id}?", abort=True)
    settings = _settings(config, {})

    async def _delete():
        async with _client(settings) as client:
            await client.delete_wallet(wallet_id)

    _run(_delete())
    typer.echo(f"Deleted wallet {wallet_id}")


@app.command()
def brokerages(config: Optional[Path] = typer.Option(None, "--config", help="Config YAML")) -> None:
    """List the brokerages a wallet can be tied to."""

    settings = _settings(config, {})

    async def _list():
        async with _client(settings) as client:
            return await client.list_brokerages()

    for brokerage in _run(_list()):
        code = f" ({brokerage.code})" if brokerage.code else ""
        typer.echo(f"{brokerage.id}\t{brokerage.name}{code}")


@app.command()
def fetch(
    wallet: List[int] = typer.Option([], "--wallet", "-w", help="Wallet id", show_default=False),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """Download the operations of the supplied wallets into the local cache."""

    settings = _settings(config, _wallet_overrides(wallet))
    wallet_ids = _require_wallets(settings)

    async def _fetch():
        async with _client(settings) as client:
            return await fetch_mod.fetch_many(client, wallet_ids)

    results = _run(_fetch())
    total = sum(len(items) for items in results.values())
    typer.echo(f"Fetched {total} operation(s) for {len(wallet_ids)} wallet(s)")


@app.command()
def monthly(
    wallet: List[int] = typer.Option([], "--wallet", "-w", help="Wallet id", show_default=False),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
    all_statuses: bool = typer.Option(False, "--all-statuses", help="Include every operation status"),
) -> None:
    """Show the month-by-month consolidation of cached operations."""

    settings = _settings(config, _wallet_overrides(wallet))
    operations, include = _load(settings, all_statuses)
    period = aggregate_by_month(
        operations, include=include, tz=utils.resolve_tz(settings.tz), locale=settings.locale
    )
    console_report.render_monthly(period)
    console_report.render_operation_summary(summarize_operations(operations, include=include))


@app.command()
def positions(
    wallet: List[int] = typer.Option([], "--wallet", "-w", help="Wallet id", show_default=False),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
    method: Optional[CostMethodChoice] = typer.Option(
        None, "--method", case_sensitive=False, help="Cost method: average or legacy"
    ),
    all_statuses: bool = typer.Option(False, "--all-statuses", help="Include every operation status"),
) -> None:
    """Show open positions with weighted average cost."""

    overrides = _wallet_overrides(wallet)
    if method:
        overrides["cost_method"] = method.value
    settings = _settings(config, overrides)
    operations, include = _load(settings, all_statuses)
    rolled = rollup_positions(
        operations, include=include, method=settings.cost_method, chronological=settings.chronological
    )
    marked = mark_to_market(rolled, StaticPriceProvider(settings.prices))
    console_report.render_positions(marked, portfolio_summary(marked))


@app.command()
def report(
    wallet: List[int] = typer.Option([], "--wallet", "-w", help="Wallet id", show_default=False),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
    outdir: Optional[Path] = typer.Option(None, "--outdir", help="Output directory"),
    fmt: str = typer.Option("csv", "--format", help="csv, parquet, both or xlsx", show_default=True),
    all_statuses: bool = typer.Option(False, "--all-statuses", help="Include every operation status"),
) -> None:
    """Export operations, monthly consolidation and positions."""

    settings = _settings(config, _wallet_overrides(wallet))
    operations, include = _load(settings, all_statuses)
    selected = filters.select(operations, include)
    period = aggregate_by_month(selected, tz=utils.resolve_tz(settings.tz), locale=settings.locale)
    rolled = rollup_positions(selected, method=settings.cost_method, chronological=settings.chronological)
    marked = mark_to_market(rolled, StaticPriceProvider(settings.prices))
    frames = {
        "operations": summaries.operations_frame(selected),
        "monthly": summaries.monthly_frame(period),
        "period": summaries.period_frame(period),
        "positions": summaries.positions_frame(marked),
    }
    wallet_ids = settings.wallets
    output_dir = outdir or Path("./reports") / ("combined" if len(wallet_ids) > 1 else str(wallet_ids[0]))
    if fmt == "xlsx":
        summary = summarize_operations(selected)
        overview = {
            "Wallets": ", ".join(str(w) for w in wallet_ids),
            "Operations": str(summary.operation_count),
            "Invested": f"{summary.invested_total:.2f}",
            "Sold": f"{summary.sold_total:.2f}",
            "Cost method": settings.cost_method,
        }
        path = output_dir / "report.xlsx"
        xlsx.export_xlsx(path, overview=overview, frames=frames)
        typer.echo(f"Wrote {path}")
        return
    try:
        written = formats.export_reports(output_dir, frames, fmt=fmt)
    except (ValueError, RuntimeError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Wrote {len(written)} file(s) to {output_dir}")


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV statement"),
    wallet: int = typer.Option(..., "--wallet", "-w", help="Wallet id"),
    note: Optional[str] = typer.Option(None, "--note", help="Free-text note"),
    process: bool = typer.Option(False, "--process", help="Process the file after upload"),
    wait: bool = typer.Option(False, "--wait", help="Wait for processing to finish"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """Upload a CSV statement to a wallet."""

    settings = _settings(config, {})
    errors = upload_mod.validate_csv_upload(path)
    if errors:
        raise typer.BadParameter("; ".join(errors))

    async def _upload():
        async with _client(settings) as client:
            uploaded = await upload_mod.upload_statement(client, wallet, path, note=note)
            upload_mod.record_upload(uploaded)
            typer.echo(f"Uploaded {uploaded.name} as file {uploaded.id} ({uploaded.status.value})")
            if not process or uploaded.id is None:
                return
            result = await upload_mod.process_statement(client, uploaded)
            typer.echo(f"Processing requested: {result.operation_count} operation(s)")
            for error in result.errors:
                typer.echo(f"  error: {error}", err=True)
            if wait:
                status = await upload_mod.wait_for_processing(
                    client,
                    wallet,
                    uploaded.id,
                    interval=settings.poll_interval,
                    timeout=settings.poll_timeout,
                )
                upload_mod.record_upload(uploaded.model_copy(update={"status": status}))
                typer.echo(f"File {uploaded.id} finished with status {status.value}")

    _run(_upload())


@app.command()
def files(
    wallet: int = typer.Option(..., "--wallet", "-w", help="Wallet id"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """List the files uploaded to a wallet, including local uploads still in flight."""

    settings = _settings(config, {})
    local = upload_mod.load_local_uploads(wallet)

    async def _list():
        async with _client(settings) as client:
            return await client.list_files(wallet)

    try:
        remote = asyncio.run(_list())
    except BackendError as exc:
        typer.echo(f"Error: {exc}", err=True)
        console_report.render_files(in_flight(local, wallet))
        raise typer.Exit(code=1) from exc
    console_report.render_files(merge_file_listing(local, remote, wallet))


@app.command("delete-file")
def delete_file(
    file_id: int = typer.Argument(..., help="File id"),
    wallet: int = typer.Option(..., "--wallet", "-w", help="Wallet id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """Delete an uploaded file from a wallet."""

    if not yes:
        typer.confirm(f"Delete file {file_id} from wallet {wallet}?", abort=True)
    settings = _settings(config, {})

    async def _delete():
        async with _client(settings) as client:
            await client.delete_file(wallet, file_id)

    _run(_delete())
    typer.echo(f"Deleted file {file_id}")


@app.command()
def process(
    file_id: int = typer.Argument(..., help="File id"),
    wallet: int = typer.Option(..., "--wallet", "-w", help="Wallet id"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for processing to finish"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config YAML"),
) -> None:
    """Trigger server-side processing of an uploaded file."""

    settings = _settings(config, {})

    async def _process():
        async with _client(settings) as client:
            status = await client.file_status(wallet, file_id)
            if status is not FileStatus.pending:
                typer.echo(f"File {file_id} is not pending (status {status.value})")
                return
            result = await client.process_file(wallet, file_id)
            typer.echo(f"Processing requested: {result.operation_count} operation(s)")
            if wait:
                final = await upload_mod.wait_for_processing(
                    client, wallet, file_id, interval=settings.poll_interval, timeout=settings.poll_timeout
                )
                typer.echo(f"File {file_id} finished with status {final.value}")

    _run(_process())


if __name__ == "__main__":  # pragma: no cover
    app()
