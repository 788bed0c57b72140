from __future__ import annotations

from coinfolio.config import DEFAULT_API_BASE_URL, load_settings
from coinfolio.types import OperationStatus


def test_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings()
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.statuses == [OperationStatus.confirmed]
    assert settings.cost_method == "average"
    assert settings.chronological is True
    assert settings.tz is None


def test_yaml_then_env_then_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    config = tmp_path / "coinfolio.yaml"
    config.write_text(
        "api_base_url: http://example.test/v1/\n"
        "wallets: [43, 44]\n"
        "locale: pt\n"
        "prices:\n  btc: 220000\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("COINFOLIO_LOCALE", "en")
    settings = load_settings(config, {"wallets": [1]})
    assert settings.api_base_url == "http://example.test/v1"
    assert settings.wallets == [1]
    assert settings.locale == "en"
    assert settings.prices == {"BTC": 220000.0}


def test_missing_yaml_is_ignored(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings.wallets == []
