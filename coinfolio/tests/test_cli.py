from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from coinfolio import cli, utils
from coinfolio.cli import app
from coinfolio.providers.backend import STATUS_MESSAGES, BackendClient

RUNNER = CliRunner()

OPERATIONS = [
    {"id": 1, "criptomoeda": "Bitcoin", "simbolo": "BTC", "tipoOperacao": "COMPRA", "quantidade": 1, "precoUnitario": 100, "dataOperacao": "2024-01-10T10:00:00", "status": "CONFIRMADA"},
    {"id": 2, "criptomoeda": "Bitcoin", "simbolo": "BTC", "tipoOperacao": "VENDA", "quantidade": 0.5, "precoUnitario": 300, "dataOperacao": "2024-02-10T10:00:00", "status": "CONFIRMADA"},
    {"id": 3, "criptomoeda": "Ethereum", "simbolo": "ETH", "tipoOperacao": "COMPRA", "quantidade": 1, "precoUnitario": 50, "dataOperacao": "2024-02-11T10:00:00", "status": "PENDENTE"},
]


@pytest.fixture(autouse=True)
def _wide_console(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")


def _seed(tmp_path):
    cache = tmp_path / "cache"
    utils.write_jsonl(cache / "operations" / "43.jsonl", OPERATIONS, mode="w")
    config = tmp_path / "coinfolio.yaml"
    config.write_text(f"cache_dir: {cache}\nwallets: [43]\nprices:\n  BTC: 200\n", encoding="utf-8")
    return config


def test_monthly_command(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = _seed(tmp_path)
    result = RUNNER.invoke(app, ["monthly", "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert "February 2024" in result.output
    assert "2 operation(s)" in result.output


def test_positions_command_excludes_pending(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = _seed(tmp_path)
    result = RUNNER.invoke(app, ["positions", "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert "BTC" in result.output
    assert "ETH" not in result.output


def test_report_command_writes_csv(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = _seed(tmp_path)
    outdir = tmp_path / "out"
    result = RUNNER.invoke(app, ["report", "--config", str(config), "--outdir", str(outdir), "--all-statuses"])
    assert result.exit_code == 0, result.output
    assert (outdir / "monthly.csv").exists()
    operations_csv = (outdir / "operations.csv").read_text(encoding="utf-8").splitlines()
    assert len(operations_csv) == 4


def test_commands_require_wallets(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = RUNNER.invoke(app, ["monthly"])
    assert result.exit_code != 0
    assert "No wallets provided" in result.output


def test_upload_rejects_non_csv(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    statement = tmp_path / "statement.txt"
    statement.write_text("x", encoding="utf-8")
    result = RUNNER.invoke(app, ["upload", str(statement), "--wallet", "43"])
    assert result.exit_code != 0
    assert ".csv extension" in result.output


def test_positions_rejects_unknown_method(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = _seed(tmp_path)
    result = RUNNER.invoke(app, ["positions", "--config", str(config), "--method", "fifo"])
    assert result.exit_code == 2
    assert "Invalid value" in result.output


def test_positions_accepts_method_in_any_case(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = _seed(tmp_path)
    result = RUNNER.invoke(app, ["positions", "--config", str(config), "--method", "LEGACY"])
    assert result.exit_code == 0, result.output
    assert "BTC" in result.output


def _backend(monkeypatch, handler, seen):
    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    monkeypatch.setattr(
        cli, "_client", lambda settings: BackendClient("http://backend.test/v1", transport=httpx.MockTransport(recording))
    )


def test_create_wallet_command(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    seen: list[httpx.Request] = []
    _backend(monkeypatch, lambda request: httpx.Response(201, json={"idCarteira": 50, "nome": "Main"}), seen)
    result = RUNNER.invoke(app, ["create-wallet", "Main", "--user", "1", "--brokerage", "2"])
    assert result.exit_code == 0, result.output
    assert "Created wallet 50 (Main)" in result.output
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/v1/carteiras"
    assert json.loads(seen[0].content) == {"nome": "Main", "usuarioId": 1, "corretoraId": 2}


def test_rename_wallet_command(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    seen: list[httpx.Request] = []
    _backend(
        monkeypatch,
        lambda request: httpx.Response(200, json={"idCarteira": 43, "nome": "Savings", "excluido": False}),
        seen,
    )
    result = RUNNER.invoke(app, ["rename-wallet", "43", "Savings"])
    assert result.exit_code == 0, result.output
    assert "Updated wallet 43 (Savings, active)" in result.output
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/v1/carteiras/43"
    assert json.loads(seen[0].content) == {"nome": "Savings"}


def test_rename_wallet_requires_a_change(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = RUNNER.invoke(app, ["rename-wallet", "43"])
    assert result.exit_code != 0
    assert "Nothing to update" in result.output


def test_delete_wallet_command(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    seen: list[httpx.Request] = []
    _backend(monkeypatch, lambda request: httpx.Response(204), seen)
    result = RUNNER.invoke(app, ["delete-wallet", "43", "--yes"])
    assert result.exit_code == 0, result.output
    assert "Deleted wallet 43" in result.output
    assert (seen[0].method, seen[0].url.path) == ("DELETE", "/v1/carteiras/43")


def test_delete_wallet_with_operations_reports_conflict(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    seen: list[httpx.Request] = []
    _backend(monkeypatch, lambda request: httpx.Response(409), seen)
    result = RUNNER.invoke(app, ["delete-wallet", "43", "--yes"])
    assert result.exit_code == 1
    assert STATUS_MESSAGES[409] in result.output
    assert len(seen) == 1


def test_delete_wallet_aborts_without_confirmation(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    seen: list[httpx.Request] = []
    _backend(monkeypatch, lambda request: httpx.Response(204), seen)
    result = RUNNER.invoke(app, ["delete-wallet", "43"], input="n\n")
    assert result.exit_code == 1
    assert seen == []


def test_delete_file_command(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    seen: list[httpx.Request] = []
    _backend(monkeypatch, lambda request: httpx.Response(204), seen)
    result = RUNNER.invoke(app, ["delete-file", "9", "--wallet", "43", "--yes"])
    assert result.exit_code == 0, result.output
    assert "Deleted file 9" in result.output
    assert (seen[0].method, seen[0].url.path) == ("DELETE", "/v1/carteiras/43/arquivos/9")
