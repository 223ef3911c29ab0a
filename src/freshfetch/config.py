"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FRESHFETCH_",
        extra="ignore",
    )

    # HTTP
    http_timeout_seconds: float = 30.0
    user_agent: str = "freshfetch/0.1"
    default_charset: str = "utf-8"

    # Storage
    output_encoding: str = "cp1252"

    # Scheduling
    hourly_start_offset_minutes: int = Field(default=102, ge=0)
    hourly_interval_hours: int = Field(default=1, ge=1)
    fetch_max_attempts: int = Field(default=3, ge=1)

    # Job catalog
    jobs_file: str = "jobs.yaml"

    # Logging
    log_level: str = "INFO"


settings = Settings()
