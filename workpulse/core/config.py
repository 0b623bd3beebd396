"""
Application configuration using Pydantic Settings.

Environment-based behavior (scheduler on/off) is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./workpulse.db"

    # ===========================================
    # Scheduler
    # ===========================================
    SCHEDULER_ENABLED: bool = True
    KPI_UPDATE_INTERVAL_MINUTES: int = Field(default=60, ge=1)
    THRESHOLD_CHECK_INTERVAL_MINUTES: int = Field(default=15, ge=1)

    # Upper bound for a single (metric, project) calculation inside a batch run
    KPI_ITEM_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # ===========================================
    # Dependency graph
    # ===========================================
    # False keeps only the direct self-dependency check
    DETECT_DEPENDENCY_CYCLES: bool = True

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.ENVIRONMENT == "test"

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
