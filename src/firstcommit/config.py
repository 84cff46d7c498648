"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (FIRSTCOMMIT__GITHUB__TOKEN=ghp_...)
  2. firstcommit.yaml       (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults. Without a
GitHub token the upstream budget drops to 60 requests per hour; that is
reported at startup, not enforced here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

UNAUTHENTICATED_REQUESTS_PER_HOUR = 60


def _find_config_file() -> str | None:
    """Return the path of the first firstcommit.yaml found, or None."""
    candidates = [
        Path("firstcommit.yaml"),
        Path(platformdirs.user_config_dir("firstcommit")) / "firstcommit.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class GitHubSettings(BaseModel):
    api_url: str = "https://api.github.com"
    token: SecretStr | None = None
    requests_per_hour: int = Field(default=5000, ge=1)
    timeout_seconds: float = Field(default=30.0, gt=0)
    per_page: int = Field(default=100, ge=1, le=100)
    max_pages: int = Field(default=1000, ge=1)


class CacheSettings(BaseModel):
    ttl_seconds: int = Field(default=86400, ge=0)
    # Commit pages whose window starts in the last 24h may still change
    recent_commits_ttl_seconds: int = Field(default=300, ge=0)
    historical_commits_ttl_seconds: int = Field(default=3600, ge=0)
    cleanup_interval_seconds: int = Field(default=600, ge=1)


class RetrySettings(BaseModel):
    max_attempts: int = Field(default=5, ge=1)
    initial_backoff_seconds: float = Field(default=1.0, ge=0)
    max_backoff_seconds: float = Field(default=30.0, ge=0)
    max_rate_limit_wait_seconds: float = Field(default=3600.0, ge=0)


class ServerSettings(BaseModel):
    """Transport selection and HTTP access.

    With ``http`` transport, requests must carry ``Authorization: Bearer <api_key>``
    when ``api_key`` is set. Without a key the endpoint is open to anything that
    can reach ``host``; keep the loopback default unless a key is configured.
    """

    transport: Literal["stdio", "http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8080
    api_key: SecretStr | None = None


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: FIRSTCOMMIT__CACHE__TTL_SECONDS=3600
        env_prefix="FIRSTCOMMIT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    github: GitHubSettings = GitHubSettings()
    cache: CacheSettings = CacheSettings()
    retry: RetrySettings = RetrySettings()
    server: ServerSettings = ServerSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def authenticated(self) -> bool:
        token = self.github.token
        return token is not None and bool(token.get_secret_value())

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
