from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LIFECYCLE_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "lifecycle-aggregates"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "test", "staging", "production"] = "local"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "console"

    # Library rules
    LOAN_PERIOD_DAYS: int = Field(default=14, ge=1)
    MAX_ACTIVE_LOANS: int = Field(default=3, ge=1)
    PENALTY_DAYS_PER_OVERDUE_DAY: int = Field(default=2, ge=0)
    # Fine in minor units of PENALTY_CURRENCY
    PENALTY_FINE_PER_DAY: int = Field(default=50, ge=0)
    PENALTY_CURRENCY: str = "EUR"

    # Sales and inventory
    DEFAULT_CURRENCY: str = "EUR"
    LOW_STOCK_THRESHOLD: int = Field(default=10, ge=0)

    EVENT_HISTORY_SIZE: int = Field(default=1000, ge=0)

    @field_validator("PENALTY_CURRENCY", "DEFAULT_CURRENCY")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()


def get_settings(**overrides) -> Settings:
    """Build a fresh settings object; callers own and inject it."""
    return Settings(**overrides)
