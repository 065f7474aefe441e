"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the engine and the CLI.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Engine settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Application
    ENVIRONMENT: str = Field(default="development")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")  # "text" or "json"

    # Rule tables (plan_rules.yaml / workout_library.yaml).
    # When unset, the files bundled with the package are used.
    PLAN_CONFIG_DIR: Optional[str] = Field(default=None)

    # Persistence boundary: the plan store rejects documents above this size.
    MAX_PLAN_DOCUMENT_BYTES: int = Field(default=1_048_576, gt=0)

    # Repair defaults
    LONG_RUN_DAY: str = Field(default="Sunday")
    MAX_SYNTHESIZED_LONG_RUN: int = Field(default=20, gt=0)

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            raise ValueError("LOG_FORMAT must be 'text' or 'json'")
        return v


# Global settings instance
settings = Settings()
