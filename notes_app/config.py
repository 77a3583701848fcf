"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from ``NOTES_*`` variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NOTES_",
        extra="ignore",
    )

    # Storage
    storage_path: Path = Path("data") / "notes.json"
    strict_load: bool = False  # refuse to start on a corrupt notes file

    # Web server
    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: list[str] = ["*"]
    static_dir: Path = Path("static")

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
