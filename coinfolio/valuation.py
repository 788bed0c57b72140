"""Mark-to-market helpers for rolled-up positions."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Optional, Protocol

from . import utils
from .types import AssetPerformance, DistributionEntry, PortfolioSummary, PositionSummary

LOGGER = logging.getLogger(__name__)


class PriceProvider(Protocol):
    def current_price(self, symbol: str) -> Optional[float]:
        ...


@dataclass
class StaticPriceProvider:
    """Price provider backed by a fixed symbol → price mapping."""

    prices: Dict[str, float]

    def current_price(self, symbol: str) -> Optional[float]:
        return self.prices.get(symbol.upper())


def mark_to_market(positions: Iterable[PositionSummary], provider: PriceProvider) -> List[PositionSummary]:
    """Return copies of ``positions`` with current value and profit filled in.

    Positions without a known price are returned unchanged.
    """

    marked: List[PositionSummary] = []
    for position in positions:
        price = provider.current_price(position.symbol)
        if price is None:
            LOGGER.info("No current price for %s", position.symbol)
            marked.append(position)
            continue
        value = position.quantity * price
        profit = value - position.invested
        marked.append(
            position.model_copy(
                update={
                    "current_price": price,
                    "current_value": value,
                    "profit_loss": profit,
                    "profit_pct": utils.safe_div(profit, position.invested) * 100,
                }
            )
        )
    return marked


def portfolio_summary(positions: Iterable[PositionSummary]) -> PortfolioSummary:
    items = list(positions)
    invested = sum(p.invested for p in items)
    current = sum(p.current_value or 0.0 for p in items)
    profit = current - invested
    ranked = sorted(items, key=lambda p: p.profit_pct or 0.0, reverse=True)
    best = worst = None
    if ranked:
        best = AssetPerformance(symbol=ranked[0].symbol, profit_pct=ranked[0].profit_pct or 0.0)
        worst = AssetPerformance(symbol=ranked[-1].symbol, profit_pct=ranked[-1].profit_pct or 0.0)
    return PortfolioSummary(
        invested_total=invested,
        current_total=current,
        profit_total=profit,
        profit_pct=utils.safe_div(profit, invested) * 100,
        asset_count=len(items),
        best=best,
        worst=worst,
    )


def distribution(positions: Iterable[PositionSummary]) -> List[DistributionEntry]:
    """Share of the portfolio's current value held in each asset, largest first."""

    items = list(positions)
    total = sum(p.current_value or 0.0 for p in items)
    entries = [
        DistributionEntry(
            symbol=p.symbol,
            asset_name=p.asset_name,
            share_pct=utils.safe_div(p.current_value or 0.0, total) * 100,
            invested=p.invested,
            current_value=p.current_value or 0.0,
        )
        for p in items
    ]
    return sorted(entries, key=lambda entry: entry.share_pct, reverse=True)
