from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytest

from coinfolio import utils
from coinfolio.types import Operation


def make_op(
    symbol: str,
    kind: str,
    quantity: float,
    unit_price: float,
    *,
    ts: datetime,
    total: Optional[float] = None,
    fee: float = 0.0,
    op_id: Optional[int] = None,
    status: str = "CONFIRMED",
    wallet_id: int = 1,
    name: Optional[str] = None,
) -> Operation:
    return Operation(
        id=op_id,
        wallet_id=wallet_id,
        asset_name=name or symbol,
        symbol=symbol,
        kind=kind,
        quantity=quantity,
        unit_price=unit_price,
        fee=fee,
        total_value=total,
        date=ts,
        status=status,
    )


@pytest.fixture(autouse=True)
def _isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(utils, "CACHE_ROOT", tmp_path / "cache")
