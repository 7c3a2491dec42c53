"""
Pipeline configuration for CrisisLens.

Values come from the environment (and an optional .env file) and are
validated on load; connector-specific settings live in
crisislens.services.connectors.config.
"""
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crisislens.core.exceptions import ConfigurationError

DEFAULT_RESULT_LIMIT = 20
DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY_SECONDS = 0.5
DEFAULT_ANALYSIS_TIMEOUT_SECONDS = 30.0
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"

_TRUE_VALUES = ("1", "true", "yes", "on")
_DISABLED_VALUES = ("none", "off")


class Settings(BaseSettings):
    """Runtime settings for the aggregation/enrichment/insights pipeline."""

    # Delegates
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_model: str = Field(default=DEFAULT_OPENAI_MODEL, alias="CRISISLENS_OPENAI_MODEL")
    news_api_key: str = Field(default="", alias="NEWS_API_KEY")

    # Aggregation and enrichment
    result_limit: int = Field(default=DEFAULT_RESULT_LIMIT, ge=1, alias="CRISISLENS_RESULT_LIMIT")
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1, alias="CRISISLENS_BATCH_SIZE")
    include_timing: bool = Field(default=True, alias="CRISISLENS_INCLUDE_TIMING")
    batch_delay_seconds: float = Field(
        default=DEFAULT_BATCH_DELAY_SECONDS, ge=0, alias="CRISISLENS_BATCH_DELAY_SECONDS"
    )
    analysis_timeout_seconds: Optional[float] = Field(
        default=DEFAULT_ANALYSIS_TIMEOUT_SECONDS, gt=0, alias="CRISISLENS_ANALYSIS_TIMEOUT_SECONDS"
    )
    offline: bool = Field(default=False, alias="CRISISLENS_OFFLINE")

    @field_validator("include_timing", "offline", mode="before")
    @classmethod
    def parse_flag(cls, v):
        if isinstance(v, str):
            return v.strip().lower() in _TRUE_VALUES
        return bool(v)

    @field_validator("analysis_timeout_seconds", mode="before")
    @classmethod
    def parse_timeout(cls, v):
        if isinstance(v, str) and v.strip().lower() in _DISABLED_VALUES:
            return None
        return v

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )


# Global settings instance (lazy init)
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Raises:
        ConfigurationError: an environment value failed validation
    """
    global settings
    if settings is None:
        try:
            settings = Settings()
        except ValidationError as e:
            fields = ", ".join(
                str(error["loc"][0]) for error in e.errors() if error.get("loc")
            )
            raise ConfigurationError(
                f"Invalid configuration: {fields or 'unknown field'}",
                details={"errors": e.errors(include_url=False)},
            ) from e
    return settings
