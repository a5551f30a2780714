"""Application configuration from environment variables.

Settings are read from the process environment and an optional .env file in
the working directory. Entry points also call python-dotenv's load_dotenv()
so that values are visible to code reading os.environ directly.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./village_ledger.db",
        description="SQLAlchemy database URL (sync driver form)",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Log file path")

    # Export
    export_row_limit: int = Field(
        default=50000,
        gt=0,
        description="Maximum number of apartments a single export may return",
    )

    # API
    api_title: str = Field(default="Village Ledger API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
