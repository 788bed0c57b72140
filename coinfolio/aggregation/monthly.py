"""Month-by-month consolidation of an operation listing."""
from __future__ import annotations

from collections import defaultdict
from datetime import tzinfo
from typing import Dict, Iterable, List, Optional, Tuple

from .. import utils
from ..types import MonthlyConsolidation, Operation, PeriodSummary
from .filters import OperationPredicate, select

MonthKey = Tuple[int, int]


def _consolidate(key: MonthKey, operations: List[Operation], locale: str) -> MonthlyConsolidation:
    year, month = key
    buy_count = 0
    sell_count = 0
    buy_total = 0.0
    sell_total = 0.0
    symbols: set[str] = set()
    for op in operations:
        symbols.add(op.symbol)
        if op.is_buy:
            buy_count += 1
            buy_total += op.total_value
        elif op.is_sell:
            sell_count += 1
            sell_total += op.total_value
    return MonthlyConsolidation(
        label=utils.month_label(year, month, locale),
        year=year,
        month=month,
        operation_count=len(operations),
        buy_count=buy_count,
        sell_count=sell_count,
        buy_total=buy_total,
        sell_total=sell_total,
        net_balance=sell_total - buy_total,
        symbols=sorted(symbols),
        operations=operations,
    )


def aggregate_by_month(
    operations: Iterable[Operation],
    *,
    include: Optional[OperationPredicate] = None,
    tz: Optional[tzinfo] = None,
    locale: str = "en",
) -> Optional[PeriodSummary]:
    """Group ``operations`` by calendar month and summarise each month.

    Returns ``None`` when there is nothing to summarise. Months and the
    operations inside each month are ordered newest first. Value totals sum
    each operation's own ``total_value``; nothing is rounded here.
    """

    selected = select(operations, include)
    if not selected:
        return None
    ordered = sorted(selected, key=lambda op: utils.to_aware(op.date), reverse=True)
    groups: Dict[MonthKey, List[Operation]] = defaultdict(list)
    for op in ordered:
        groups[utils.month_key(op.date, tz)].append(op)

    months = [_consolidate(key, groups[key], locale) for key in sorted(groups, reverse=True)]

    grand_total = 0.0
    grand_net = 0.0
    for month in months:
        grand_total += month.buy_total + month.sell_total
        grand_net += month.net_balance
    return PeriodSummary(
        start_date=ordered[-1].date,
        end_date=ordered[0].date,
        grand_total=grand_total,
        grand_net=grand_net,
        months=months,
    )
