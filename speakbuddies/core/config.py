"""Application configuration for the pairing service."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    rtc_app_id: str = Field(default="")
    rtc_app_certificate: str = Field(default="")
    credential_ttl_seconds: int = Field(default=3600, ge=1)
    credential_timeout_seconds: float = Field(default=2.0, gt=0)

    waiting_timeout_seconds: float = Field(default=300, gt=0)
    channel_max_duration_seconds: float = Field(default=600, gt=0)
    sweep_interval_seconds: float = Field(default=60, gt=0)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""

        if isinstance(value, str) and not value.lstrip().startswith("["):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
