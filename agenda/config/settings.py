"""
Application settings and configuration
"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Basic app settings
    DEBUG: bool = Field(default=False)
    APP_NAME: str = Field(default="Agenda Scheduling API")

    # Server settings
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Document store settings
    DATABASE_URL: str = Field(default="sqlite:///./agenda.db")
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=20)
    MAX_BATCH_WRITES: int = Field(default=500)  # atomic write cap per bulk call

    # Scheduling settings
    DEFAULT_TIMEZONE: str = Field(default="America/Sao_Paulo")
    SLOT_INTERVAL_MINUTES: int = Field(default=30, ge=1)
    FALLBACK_OPEN_TIME: str = Field(default="08:00")
    FALLBACK_CLOSE_TIME: str = Field(default="19:00")
    MAX_SERVICE_DURATION_MINUTES: int = Field(default=720)

    # Monitoring settings
    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
