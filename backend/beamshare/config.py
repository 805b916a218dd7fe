"""beamshare configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "beamshare"
    debug: bool = False
    log_level: str = "INFO"

    # Network
    host: str = "0.0.0.0"
    port: int = 0  # 0 = first free port of the fallback list
    api_prefix: str = ""
    cors_origins: list[str] = ["*"]

    # Shared directory exposed to clients
    shared_dir: str = "."

    # Counter / starred store
    database_path: str = "~/.beamshare/beamshare.db"
    max_db_connections: int = 5
    reset_stats_on_startup: bool = False

    # Accepted and logged, never enforced
    password: str = ""

    # Stats stream timing (seconds)
    stats_refresh_interval: float = 60.0
    stats_keepalive_interval: float = 30.0
    stats_read_deadline: float = 60.0

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="BEAMSHARE_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["*"]

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure the shared directory and database path are absolute."""
        for field in ("shared_dir", "database_path"):
            val = Path(getattr(self, field)).expanduser()
            setattr(self, field, str(val.resolve()))
        return self

    @property
    def password_enabled(self) -> bool:
        return bool(self.password)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
