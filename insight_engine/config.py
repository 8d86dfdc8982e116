"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DEFAULT_REFERENCE_DATA = Path(__file__).resolve().parent / "data" / "reference_data.yaml"


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./data/insights.db",
        description="SQLAlchemy-compatible database URL.",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)

    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))
    service_log_level: str | None = Field(
        default=None,
        description="Level for insight_engine.services loggers; falls back to log_level.",
    )

    alert_lifetime_days: int = Field(default=7, ge=1)
    recommendation_lifetime_days: int = Field(default=7, ge=1)
    alert_dedup_enabled: bool = Field(
        default=True,
        description="Skip creating an alert while an active one of the same type exists for the user.",
    )
    store_timeout_seconds: float = Field(default=5.0, gt=0)
    reference_data_path: Path = Field(default=_DEFAULT_REFERENCE_DATA)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INSIGHTS_",
        extra="ignore",
    )

    @field_validator("log_level", "service_log_level")
    @classmethod
    def normalize_log_level(cls, value: str | None) -> str | None:
        if value is None:
            return None
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
