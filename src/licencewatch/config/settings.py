"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecheckConfig(BaseModel):
    """Recheck cadence per risk tier.

    Months are added to the check date with calendar arithmetic, so a
    high-risk driver checked on the 15th is due again on the 15th of the
    following month.
    """

    high_months: int = 1
    """Months until the next check for a high-risk driver."""

    medium_months: int = 3
    """Months until the next check for a medium-risk driver."""

    low_months: int = 6
    """Months until the next check for a low-risk driver."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"

    # Application Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Licensing registry
    registry_base_url: str = "https://uat.driver-vehicle-licensing.api.gov.uk"
    registry_timeout_ms: int = 30000
    registry_api_key: SecretStr | None = None
    registry_username: str | None = None
    registry_password: SecretStr | None = None

    # Recheck scheduling
    recheck: RecheckConfig = RecheckConfig()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
