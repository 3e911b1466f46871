"""Application configuration."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loads and validates application settings from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    RATE_PER_CUBIC_METER: Decimal = Decimal("30")
    DISCOUNTED_BLOCK_CUBIC_METERS: Decimal = Decimal("10")
    OVERDUE_PENALTY_RATE: Decimal = Decimal("0.05")

    SCHEDULER_ENABLED: bool = True


settings = Settings()
