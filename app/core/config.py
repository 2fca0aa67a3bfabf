# app/core/config.py
"""Application settings"""
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables"""

    APP_NAME: str = Field(default="Salon Scheduling API")
    DEBUG: bool = Field(default=False)

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./salon.db")
    DB_ECHO: bool = Field(default=False)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Scheduling defaults
    DEFAULT_TIMEZONE: str = Field(default="America/Sao_Paulo")
    DEFAULT_SLOT_INTERVAL_MINUTES: int = Field(default=30)

    # Organizations without saved business hours are closed unless this is on
    FALLBACK_HOURS_ENABLED: bool = Field(default=False)
    FALLBACK_OPEN: str = Field(default="08:00")
    FALLBACK_CLOSE: str = Field(default="22:00")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
