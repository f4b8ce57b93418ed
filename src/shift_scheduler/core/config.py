from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="SHIFT_", case_sensitive=False)

    environment: Literal["development", "staging", "production"] = "development"
    project_name: str = "Shift Scheduler"
    version: str = "0.1.0"

    database_url: str = "sqlite+aiosqlite:///./shift_scheduler.db"

    # Optional JSON file replacing the bundled rule catalog.
    rules_path: Path | None = None

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
