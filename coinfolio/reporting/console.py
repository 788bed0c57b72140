"""Console rendering helpers using rich."""
from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from .. import utils
from ..types import OperationSummary, PeriodSummary, PortfolioSummary, PositionSummary, UploadedFile, Wallet


def _money(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


def _qty(value: float) -> str:
    return f"{value:,.8f}".rstrip("0").rstrip(".")


def render_wallets(wallets: Sequence[Wallet], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not wallets:
        console.print("[yellow]No wallets found.[/yellow]")
        return
    table = Table(title="Wallets")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Brokerage")
    table.add_column("Active")
    for wallet in wallets:
        brokerage = wallet.brokerage.name if wallet.brokerage else str(wallet.brokerage_id or "-")
        table.add_row(str(wallet.id), wallet.name, brokerage, "yes" if wallet.active else "no")
    console.print(table)


def render_monthly(period: Optional[PeriodSummary], console: Optional[Console] = None) -> None:
    console = console or Console()
    if period is None:
        console.print("[yellow]No operations to summarise.[/yellow]")
        return
    table = Table(title="Monthly consolidation")
    table.add_column("Month")
    table.add_column("Ops", justify="right")
    table.add_column("Buys", justify="right")
    table.add_column("Sells", justify="right")
    table.add_column("Bought", justify="right")
    table.add_column("Sold", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("Assets")
    for month in period.months:
        net_style = "green" if month.net_balance >= 0 else "red"
        table.add_row(
            month.label,
            str(month.operation_count),
            str(month.buy_count),
            str(month.sell_count),
            _money(month.buy_total),
            _money(month.sell_total),
            f"[{net_style}]{_money(month.net_balance)}[/{net_style}]",
            ", ".join(month.symbols),
        )
    console.print(table)
    console.print(
        f"Period {period.start_date.date().isoformat()} to {period.end_date.date().isoformat()}: "
        f"total {_money(period.grand_total)}, net {_money(period.grand_net)}"
    )


def render_positions(
    positions: Sequence[PositionSummary],
    summary: Optional[PortfolioSummary] = None,
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    if not positions:
        console.print("[yellow]No open positions.[/yellow]")
        return
    table = Table(title="Positions")
    table.add_column("Symbol")
    table.add_column("Asset")
    table.add_column("Quantity", justify="right")
    table.add_column("Avg cost", justify="right")
    table.add_column("Invested", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("P/L %", justify="right")
    for position in positions:
        pct = "-" if position.profit_pct is None else f"{position.profit_pct:.2f}%"
        table.add_row(
            position.symbol,
            position.asset_name,
            _qty(position.quantity),
            _money(position.average_cost),
            _money(position.invested),
            _money(position.current_value),
            pct,
        )
    console.print(table)
    if summary is not None and summary.current_total:
        line = (
            f"Invested {_money(summary.invested_total)}, current {_money(summary.current_total)}, "
            f"P/L {_money(summary.profit_total)} ({summary.profit_pct:.2f}%)"
        )
        if summary.best and summary.worst:
            line += f"; best {summary.best.symbol}, worst {summary.worst.symbol}"
        console.print(line)


def render_operation_summary(summary: OperationSummary, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(
        f"{summary.operation_count} operation(s): {summary.buy_count} buy(s) totalling "
        f"{_money(summary.invested_total)}, {summary.sell_count} sell(s) totalling "
        f"{_money(summary.sold_total)} across {summary.distinct_assets} asset(s)"
    )


def render_files(files: Sequence[UploadedFile], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not files:
        console.print("[yellow]No files uploaded.[/yellow]")
        return
    table = Table(title="Files")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    table.add_column("Operations", justify="right")
    for item in files:
        table.add_row(
            str(item.id or "-"),
            item.name,
            utils.human_size(item.size),
            item.status.value,
            str(item.operation_count),
        )
    console.print(table)
