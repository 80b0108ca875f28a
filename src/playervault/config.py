"""
Configuration management for playervault.

Configuration is loaded from:
1. Environment variables (highest priority), prefix PLAYERVAULT_, nested
   sections separated by "__" (e.g. PLAYERVAULT_DATABASE__BACKEND=mysql)
2. playervault.yaml file (or the file named by PLAYERVAULT_CONFIG)
3. Default values (lowest priority)
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from playervault.core.models import DEFAULT_TITLE, MAX_ROWS, clamp_rows

CONFIG_ENV_VAR = "PLAYERVAULT_CONFIG"


class DatabaseSettings(BaseModel):
    """
    Database configuration.

    ``backend`` is matched case-insensitively; unknown values fall back to
    the embedded SQLite file at startup instead of failing.
    """

    backend: str = "sqlite"
    url: str | None = None  # SQLAlchemy URL for mysql/postgresql
    path: str = "playervault.db"  # SQLite database file
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 3600  # Recycle connections after 1 hour to prevent stale connections
    pool_pre_ping: bool = True  # Re-fetch closed connections transparently
    lock_timeout: float = 30.0  # SQLite busy timeout, seconds
    echo: bool = False


class VaultDefaults(BaseModel):
    """Defaults used when an owner has no stored metadata yet."""

    rows: int = MAX_ROWS
    title: str = DEFAULT_TITLE

    @field_validator("rows")
    @classmethod
    def _clamp_rows(cls, value: int) -> int:
        return clamp_rows(value)

    @field_validator("title")
    @classmethod
    def _default_blank_title(cls, value: str) -> str:
        return value if value.strip() else DEFAULT_TITLE


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_format: bool = False
    file: str | None = None


def find_config_file() -> Path | None:
    """Locate the YAML config file, honoring PLAYERVAULT_CONFIG."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidates = [Path(env_path)]
    else:
        candidates = [
            Path("playervault.yaml"),
            Path("config/playervault.yaml"),
            Path("/etc/playervault/playervault.yaml"),
        ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_yaml_config(path: Path | None = None) -> dict:
    """Load configuration from YAML file."""
    if path is None:
        path = find_config_file()

    if path and path.exists():
        with open(path) as f:
            return yaml.safe_load(f) or {}

    return {}


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source reading the whole YAML document at once."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return load_yaml_config()


class Settings(BaseSettings):
    """Main settings class that combines all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="PLAYERVAULT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    vault: VaultDefaults = Field(default_factory=VaultDefaults)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment variables take precedence over YAML
        return (init_settings, env_settings, YamlConfigSource(settings_cls))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Force reload of settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
