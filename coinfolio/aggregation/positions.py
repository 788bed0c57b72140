"""Running position per asset symbol with weighted average cost."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Literal, Optional

from .. import utils
from ..types import Operation, PositionSummary
from .filters import OperationPredicate, select
from .policy import PositionEffect, classify_operation

LOGGER = logging.getLogger(__name__)

CostMethod = Literal["average", "legacy"]


@dataclass
class PositionAccumulator:
    asset_name: str
    symbol: str
    quantity: float = 0.0
    invested: float = 0.0
    average_cost: float = 0.0

    def buy(self, op: Operation) -> None:
        self.quantity += op.quantity
        self.invested += op.total_value
        self._settle()

    def sell(self, op: Operation, method: CostMethod) -> None:
        if method == "legacy":
            # Scales by total_value / unit_price; a zero price reduces nothing.
            reduction = utils.safe_div(op.total_value * self.average_cost, op.unit_price)
        else:
            reduction = op.quantity * self.average_cost
        self.quantity -= op.quantity
        self.invested -= reduction
        self._settle()

    def _settle(self) -> None:
        if self.quantity <= 0 or self.invested < 0:
            self.invested = 0.0
        self.average_cost = self.invested / self.quantity if self.quantity > 0 else 0.0

    def summary(self) -> PositionSummary:
        return PositionSummary(
            asset_name=self.asset_name,
            symbol=self.symbol,
            quantity=self.quantity,
            invested=self.invested,
            average_cost=self.average_cost,
        )


def rollup_positions(
    operations: Iterable[Operation],
    *,
    include: Optional[OperationPredicate] = None,
    method: CostMethod = "average",
    chronological: bool = True,
) -> List[PositionSummary]:
    """Accumulate BUY/SELL operations into open positions keyed by symbol.

    With ``chronological`` the operations are replayed oldest first; otherwise
    in the order given. ``method="legacy"`` applies the older SELL cost
    reduction of ``total_value * average_cost / unit_price``. Positions whose
    final quantity is not positive are dropped.
    """

    selected = select(operations, include)
    if chronological:
        selected = sorted(selected, key=lambda op: utils.to_aware(op.date))
    book: Dict[str, PositionAccumulator] = {}
    for op in selected:
        effect = classify_operation(op)
        if effect is PositionEffect.record_only:
            continue
        acc = book.get(op.symbol)
        if acc is None:
            acc = book[op.symbol] = PositionAccumulator(asset_name=op.asset_name, symbol=op.symbol)
        if effect is PositionEffect.increase:
            acc.buy(op)
        else:
            if op.quantity > acc.quantity:
                LOGGER.warning(
                    "Sell of %s %s exceeds held quantity %s (operation %s)",
                    op.quantity,
                    op.symbol,
                    acc.quantity,
                    op.id,
                )
            acc.sell(op, method)
    return [acc.summary() for acc in book.values() if acc.quantity > 0]
