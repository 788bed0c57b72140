from __future__ import annotations

from datetime import datetime

import pytest

from coinfolio.ingestion import normalize
from coinfolio.types import FileStatus, OperationStatus


def test_operation_from_backend_payload() -> None:
    payload = {
        "id": 7,
        "carteiraId": 43,
        "criptomoeda": "Bitcoin",
        "simbolo": "BTC",
        "tipoOperacao": "COMPRA",
        "quantidade": 0.5,
        "precoUnitario": 200000,
        "taxa": 10,
        "dataOperacao": "2024-03-10T14:30:00",
        "status": "CONFIRMADA",
        "hashTransacao": "0xabc",
    }
    op = normalize.operation_from_payload(payload)
    assert op.wallet_id == 43
    assert op.kind == "BUY"
    assert op.status is OperationStatus.confirmed
    assert op.total_value == pytest.approx(100010)
    assert op.date == datetime(2024, 3, 10, 14, 30)
    assert op.tx_hash == "0xabc"


def test_operation_total_value_kept_verbatim() -> None:
    payload = {
        "simbolo": "ETH",
        "tipoOperacao": "VENDA",
        "quantidade": 1,
        "precoUnitario": 100,
        "valorTotal": 99.5,
        "dataOperacaoSaida": "2024-01-01T00:00:00Z",
    }
    op = normalize.operation_from_payload(payload, wallet_id=3)
    assert op.total_value == 99.5
    assert op.wallet_id == 3
    assert op.status is OperationStatus.confirmed
    assert op.date.tzinfo is not None


def test_unknown_kind_is_kept() -> None:
    op = normalize.operation_from_payload(
        {"simbolo": "X", "tipoOperacao": "bridge", "quantidade": 1, "precoUnitario": 1, "dataOperacao": "2024-01-01"},
        wallet_id=1,
    )
    assert op.kind == "BRIDGE"


def test_normalize_operations_flattens_wrappers_and_skips_invalid(caplog) -> None:
    raw = [
        {"operacoes": [{"simbolo": "BTC", "tipoOperacao": "COMPRA", "quantidade": 1, "precoUnitario": 1, "dataOperacao": "2024-01-01"}]},
        {"simbolo": "ETH", "tipoOperacao": "COMPRA", "quantidade": -1, "precoUnitario": 1, "dataOperacao": "2024-01-01"},
        {"simbolo": "ADA", "tipoOperacao": "VENDA", "quantidade": 2, "precoUnitario": 1, "dataOperacao": "2024-01-02"},
    ]
    ops = normalize.normalize_operations(raw, wallet_id=9)
    assert [op.symbol for op in ops] == ["BTC", "ADA"]
    assert "Skipping operation payload" in caplog.text


def test_wallet_from_payload() -> None:
    wallet = normalize.wallet_from_payload(
        {"idCarteira": 44, "nome": "Jaime Mercado Bitcoin", "excluido": True, "corretora": {"idCorretora": 2, "nome": "Mercado Bitcoin"}}
    )
    assert wallet.id == 44
    assert wallet.active is False
    assert wallet.brokerage_id == 2
    assert wallet.brokerage.name == "Mercado Bitcoin"


def test_file_from_payload() -> None:
    uploaded = normalize.file_from_payload(
        {
            "idArquivo": 5,
            "nome": "binance.csv",
            "carteira": {"idCarteira": 43},
            "tamanhoBytes": 2048,
            "status": "PROCESSADO",
            "totalOperacoes": 12,
            "dataCriacao": "2024-05-01T10:00:00",
        },
        wallet_id=1,
    )
    assert uploaded.wallet_id == 43
    assert uploaded.status is FileStatus.processed
    assert uploaded.size == 2048
    assert uploaded.operation_count == 12


def test_process_result_from_payload() -> None:
    result = normalize.process_result_from_payload({"sucesso": False, "totalOperacoes": 0, "erros": ["bad header"]})
    assert result.success is False
    assert result.errors == ["bad header"]
    assert result.warnings == []
