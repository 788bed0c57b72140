"""Predicates used to select the operations and positions that get aggregated."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional

from pydantic import BaseModel

from .. import utils
from ..types import Operation, OperationStatus, PositionSummary

OperationPredicate = Callable[[Operation], bool]


def confirmed_only(operation: Operation) -> bool:
    return operation.status == OperationStatus.confirmed


def status_in(statuses: Iterable[OperationStatus | str]) -> OperationPredicate:
    """Build a predicate accepting operations whose status is in ``statuses``."""

    allowed = {OperationStatus(str(getattr(s, "value", s)).upper()) for s in statuses}

    def _predicate(operation: Operation) -> bool:
        return operation.status in allowed

    return _predicate


def select(operations: Iterable[Operation], include: Optional[OperationPredicate]) -> list[Operation]:
    if include is None:
        return list(operations)
    return [op for op in operations if include(op)]


class OperationFilter(BaseModel):
    """Criteria for narrowing down an operation listing."""

    wallet_id: Optional[int] = None
    asset_name: Optional[str] = None
    kind: Optional[str] = None
    status: Optional[OperationStatus] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    brokerage_id: Optional[int] = None

    def matches(self, operation: Operation) -> bool:
        if self.wallet_id is not None and operation.wallet_id != self.wallet_id:
            return False
        if self.asset_name and self.asset_name.lower() not in operation.asset_name.lower():
            return False
        if self.kind and operation.kind != self.kind.upper():
            return False
        if self.status is not None and operation.status != self.status:
            return False
        if self.start is not None and utils.to_aware(operation.date) < utils.to_aware(self.start):
            return False
        if self.end is not None and utils.to_aware(operation.date) > utils.to_aware(self.end):
            return False
        if self.brokerage_id is not None and operation.brokerage_id != self.brokerage_id:
            return False
        return True

    def __call__(self, operation: Operation) -> bool:
        return self.matches(operation)


class PositionFilter(BaseModel):
    symbol: Optional[str] = None
    asset_name: Optional[str] = None
    min_invested: Optional[float] = None
    max_invested: Optional[float] = None
    only_profit: bool = False
    only_loss: bool = False

    def matches(self, position: PositionSummary) -> bool:
        if self.symbol and self.symbol.lower() not in position.symbol.lower():
            return False
        if self.asset_name and self.asset_name.lower() not in position.asset_name.lower():
            return False
        if self.min_invested is not None and position.invested < self.min_invested:
            return False
        if self.max_invested is not None and position.invested > self.max_invested:
            return False
        if self.only_profit and (position.profit_pct or 0) <= 0:
            return False
        if self.only_loss and (position.profit_pct or 0) >= 0:
            return False
        return True

    def apply(self, positions: Iterable[PositionSummary]) -> list[PositionSummary]:
        return [position for position in positions if self.matches(position)]
