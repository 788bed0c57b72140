"""Tabular views of aggregation results."""
from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from ..types import Operation, PeriodSummary, PositionSummary
from .schema import MONTHLY_COLUMNS, OPERATION_COLUMNS, PERIOD_COLUMNS, POSITION_COLUMNS


def operations_frame(operations: Iterable[Operation]) -> pd.DataFrame:
    rows = [
        {
            "id": op.id,
            "wallet_id": op.wallet_id,
            "date": op.date.isoformat(),
            "kind": op.kind,
            "status": op.status.value,
            "asset_name": op.asset_name,
            "symbol": op.symbol,
            "quantity": op.quantity,
            "unit_price": op.unit_price,
            "fee": op.fee,
            "total_value": op.total_value,
            "note": op.note or "",
        }
        for op in operations
    ]
    return pd.DataFrame(rows, columns=OPERATION_COLUMNS)


def monthly_frame(period: Optional[PeriodSummary]) -> pd.DataFrame:
    rows = []
    if period is not None:
        for month in period.months:
            rows.append(
                {
                    "label": month.label,
                    "year": month.year,
                    "month": month.month,
                    "operation_count": month.operation_count,
                    "buy_count": month.buy_count,
                    "sell_count": month.sell_count,
                    "buy_total": month.buy_total,
                    "sell_total": month.sell_total,
                    "net_balance": month.net_balance,
                    "symbols": ",".join(month.symbols),
                }
            )
    return pd.DataFrame(rows, columns=MONTHLY_COLUMNS)


def period_frame(period: Optional[PeriodSummary]) -> pd.DataFrame:
    if period is None:
        return pd.DataFrame(columns=PERIOD_COLUMNS)
    return pd.DataFrame(
        [
            {
                "start_date": period.start_date.isoformat(),
                "end_date": period.end_date.isoformat(),
                "grand_total": period.grand_total,
                "grand_net": period.grand_net,
                "months": len(period.months),
            }
        ],
        columns=PERIOD_COLUMNS,
    )


def positions_frame(positions: Iterable[PositionSummary]) -> pd.DataFrame:
    rows = [position.model_dump() for position in positions]
    return pd.DataFrame(rows, columns=POSITION_COLUMNS)
