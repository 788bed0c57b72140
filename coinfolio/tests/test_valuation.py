from __future__ import annotations

import pytest

from coinfolio.types import PositionSummary
from coinfolio.valuation import StaticPriceProvider, distribution, mark_to_market, portfolio_summary


def _positions() -> list[PositionSummary]:
    return [
        PositionSummary(asset_name="Bitcoin", symbol="BTC", quantity=0.3, invested=54000, average_cost=180000),
        PositionSummary(asset_name="Cardano", symbol="ADA", quantity=1000, invested=2200, average_cost=2.2),
        PositionSummary(asset_name="Polkadot", symbol="DOT", quantity=10, invested=300, average_cost=30),
    ]


def test_mark_to_market() -> None:
    marked = mark_to_market(_positions(), StaticPriceProvider({"BTC": 220000, "ADA": 1.9}))
    btc, ada, dot = marked
    assert btc.current_value == pytest.approx(66000)
    assert btc.profit_loss == pytest.approx(12000)
    assert btc.profit_pct == pytest.approx(22.2222, rel=1e-4)
    assert ada.profit_loss == pytest.approx(-300)
    assert dot.current_value is None


def test_portfolio_summary_best_and_worst() -> None:
    marked = mark_to_market(_positions()[:2], StaticPriceProvider({"BTC": 220000, "ADA": 1.9}))
    summary = portfolio_summary(marked)
    assert summary.invested_total == pytest.approx(56200)
    assert summary.current_total == pytest.approx(67900)
    assert summary.profit_total == pytest.approx(11700)
    assert summary.asset_count == 2
    assert summary.best.symbol == "BTC"
    assert summary.worst.symbol == "ADA"


def test_portfolio_summary_empty() -> None:
    summary = portfolio_summary([])
    assert summary.profit_pct == 0
    assert summary.best is None


def test_distribution_sorted_by_share() -> None:
    marked = mark_to_market(_positions()[:2], StaticPriceProvider({"BTC": 220000, "ADA": 1.9}))
    entries = distribution(marked)
    assert [e.symbol for e in entries] == ["BTC", "ADA"]
    assert sum(e.share_pct for e in entries) == pytest.approx(100)
