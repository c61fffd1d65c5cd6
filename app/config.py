"""
Application configuration.

Values come from environment variables prefixed with ``LEDGER_`` or from a
local ``.env`` file. The ledger engine itself takes no configuration.
"""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Group Ledger API")
    database_url: str = Field(default="sqlite:///./ledger.db", description="SQLAlchemy database URL")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True, description="Render logs as JSON instead of console lines")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"log_level must be one of {sorted(valid)}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Cached settings. Call ``get_settings.cache_clear()`` to reload."""
    return Settings()
