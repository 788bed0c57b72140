"""Headline totals over an operation listing."""
from __future__ import annotations

from typing import Iterable, Optional

from ..types import Operation, OperationSummary
from .filters import OperationPredicate, select


def summarize_operations(
    operations: Iterable[Operation], *, include: Optional[OperationPredicate] = None
) -> OperationSummary:
    selected = select(operations, include)
    buy_count = 0
    sell_count = 0
    invested = 0.0
    sold = 0.0
    for op in selected:
        if op.is_buy:
            buy_count += 1
            invested += op.total_value
        elif op.is_sell:
            sell_count += 1
            sold += op.total_value
    return OperationSummary(
        operation_count=len(selected),
        buy_count=buy_count,
        sell_count=sell_count,
        invested_total=invested,
        sold_total=sold,
        result=sold - invested,
        distinct_assets=len({op.symbol for op in selected}),
    )
