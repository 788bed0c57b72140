"""Column schemas for report outputs."""
from __future__ import annotations

OPERATION_COLUMNS = [
    "id",
    "wallet_id",
    "date",
    "kind",
    "status",
    "asset_name",
    "symbol",
    "quantity",
    "unit_price",
    "fee",
    "total_value",
    "note",
]

MONTHLY_COLUMNS = [
    "label",
    "year",
    "month",
    "operation_count",
    "buy_count",
    "sell_count",
    "buy_total",
    "sell_total",
    "net_balance",
    "symbols",
]

POSITION_COLUMNS = [
    "asset_name",
    "symbol",
    "quantity",
    "invested",
    "average_cost",
    "current_price",
    "current_value",
    "profit_loss",
    "profit_pct",
]

PERIOD_COLUMNS = [
    "start_date",
    "end_date",
    "grand_total",
    "grand_net",
    "months",
]
