import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_LOCALES = {"en", "pl"}


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is only meant for local development and tests. Set DATABASE_URL
    to a PostgreSQL connection string anywhere plans must survive a restart.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "fitcoach.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(
        f"Using SQLite database (LOCAL DEV ONLY): {db_url}\n"
        "Set DATABASE_URL environment variable to use PostgreSQL."
    )
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    locale: str = Field(
        default="en",
        validation_alias="LOCALE",
        description="Language of validation messages and default day names",
    )
    default_sets: int = Field(default=3, validation_alias="DEFAULT_SETS")
    default_reps: str = Field(default="10-12", validation_alias="DEFAULT_REPS")
    default_rest_seconds: int = Field(default=60, validation_alias="DEFAULT_REST_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, value: str) -> str:
        """Fall back to English for locales without a message catalog."""
        lower_value = value.lower()
        if lower_value not in SUPPORTED_LOCALES:
            logger.warning(f"Unsupported LOCALE '{value}'. Supported: {', '.join(sorted(SUPPORTED_LOCALES))}. Defaulting to en.")
            return "en"
        return lower_value


settings = Settings()
