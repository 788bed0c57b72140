"""Configuration loading and validation."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .types import OperationStatus

DEFAULT_API_BASE_URL = "http://localhost:8080/v1"


class YAMLConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from a YAML configuration file."""

    def __init__(self, settings_cls: type[BaseSettings], config_path: Optional[Path]):
        super().__init__(settings_cls)
        self.config_path = config_path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self().get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        if self.config_path is None or not Path(self.config_path).exists():
            return {}
        data = yaml.safe_load(Path(self.config_path).read_text())
        if not isinstance(data, dict):
            return {}
        return data


class AppSettings(BaseSettings):
    """Application configuration resolved from CLI/env/YAML."""

    model_config = SettingsConfigDict(env_prefix="COINFOLIO_", env_file=".env", extra="ignore")

    config_path: Optional[Path] = Field(default=None, exclude=True)

    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 30.0
    wallets: list[int] = Field(default_factory=list)
    tz: Optional[str] = None
    locale: str = "en"
    statuses: list[OperationStatus] = Field(default_factory=lambda: [OperationStatus.confirmed])
    cost_method: Literal["average", "legacy"] = "average"
    chronological: bool = True
    prices: dict[str, float] = Field(default_factory=dict)
    poll_interval: float = 2.0
    poll_timeout: float = 120.0
    log_level: str = "WARNING"
    cache_dir: Path = Path("./cache")

    @field_validator("api_base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("prices", mode="before")
    @classmethod
    def _upper_symbols(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key).upper(): val for key, val in value.items()}
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # ``init_settings`` exposes the raw keyword arguments as ``init_kwargs``
        init_kwargs = getattr(init_settings, "init_kwargs", {})  # type: ignore[attr-defined]
        config_path = init_kwargs.get("config_path")
        yaml_source = YAMLConfigSettingsSource(settings_cls, config_path)
        # Precedence: CLI (init) > environment > .env > YAML > file secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_source,
            file_secret_settings,
        )


def load_settings(config_path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None) -> AppSettings:
    overrides = dict(overrides or {})
    if config_path is not None:
        overrides.setdefault("config_path", config_path)
    return AppSettings(**overrides)
