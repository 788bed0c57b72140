"""XLSX export helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

MONEY_COLUMNS = (
    "unit_price",
    "fee",
    "total_value",
    "buy_total",
    "sell_total",
    "net_balance",
    "grand_total",
    "grand_net",
    "invested",
    "average_cost",
    "current_price",
    "current_value",
    "profit_loss",
)
QUANTITY_COLUMNS = ("quantity",)


def _apply_header_style(sheet) -> None:
    bold = Font(bold=True)
    for cell in sheet[1]:
        cell.font = bold
    sheet.auto_filter.ref = sheet.dimensions
    sheet.freeze_panes = "A2"


def _auto_width(sheet) -> None:
    for col in sheet.columns:
        values = [str(cell.value) if cell.value is not None else "" for cell in col]
        max_len = max((len(value) for value in values), default=0)
        col_letter = get_column_letter(col[0].column)
        sheet.column_dimensions[col_letter].width = min(max_len + 2, 60)


def _format_numbers(sheet, columns: Iterable[str], fmt: str) -> None:
    header = [cell.value for cell in sheet[1]]
    col_idx = {name: idx + 1 for idx, name in enumerate(header)}
    for name in columns:
        idx = col_idx.get(name)
        if not idx:
            continue
        for row in sheet.iter_rows(min_row=2, min_col=idx, max_col=idx):
            for cell in row:
                cell.number_format = fmt


def _cell(value):
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    return value.item() if hasattr(value, "item") else value


def export_xlsx(path: Path, *, overview: dict[str, str], frames: dict[str, pd.DataFrame]) -> None:
    """Write an Overview sheet followed by one sheet per frame."""

    path.parent.mkdir(parents=True, exist_ok=True)
    workbook = Workbook()

    overview_sheet = workbook.active
    overview_sheet.title = "Overview"
    overview_sheet.append(["Metric", "Value"])
    for key, value in overview.items():
        overview_sheet.append([key, value])
    _apply_header_style(overview_sheet)
    _auto_width(overview_sheet)

    for name, frame in frames.items():
        sheet = workbook.create_sheet(name.replace("_", " ").capitalize())
        sheet.append(list(frame.columns))
        for row in frame.itertuples(index=False):
            sheet.append([_cell(value) for value in row])
        _apply_header_style(sheet)
        _format_numbers(sheet, MONEY_COLUMNS, "#,##0.00")
        _format_numbers(sheet, QUANTITY_COLUMNS, "#,##0.00000000")
        _auto_width(sheet)

    workbook.save(path)
