from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="DUTY_", case_sensitive=False)

    environment: Literal["development", "staging", "production"] = "development"
    project_name: str = "Duty Scheduler API"
    version: str = "0.1.0"

    database_url: str = "sqlite:///./duty_scheduler.db"
    storage_key_prefix: str = "schedule"

    history_debounce_ms: int = 300
    max_history_size: int = 10

    roster_path: str | None = None

    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]


@lru_cache
def get_settings() -> Settings:
    return Settings()
