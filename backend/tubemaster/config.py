"""Configuration for the tubemaster backend.

Settings are read once from environment variables and an optional `.env` file
and then passed explicitly to the clients that need them. Secrets are never
defaulted: a feature whose key is absent fails when its client is built.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Main settings class for the application."""

    # Credentials
    openrouter_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    # Endpoints
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    groq_base_url: str = "https://api.groq.com/openai/v1"
    app_referer: str = "https://tubemaster.ai"
    app_title: str = "TubeMaster AI"

    # Models
    vision_model: str = "x-ai/grok-2-vision-1212"
    text_model: str = "llama-3.3-70b-versatile"
    image_model: str = "gemini-2.5-flash-image"
    vision_temperature: float = Field(0.5, ge=0.0, le=2.0)
    text_temperature: float = Field(0.7, ge=0.0, le=2.0)
    text_max_tokens: int = Field(4096, gt=0)

    # Image normalization
    image_max_edge: int = Field(1024, gt=0)
    image_jpeg_quality: int = Field(70, ge=1, le=95)
    image_decode_timeout_seconds: float = Field(4.0, gt=0)

    # None means outgoing model requests are not time-bounded.
    request_timeout_seconds: Optional[float] = Field(None, gt=0)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @field_validator("openrouter_api_key", "groq_api_key", "gemini_api_key")
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    def require(self, field_name: str) -> str:
        """
        Return a configured secret or fail with the env var the user must set.
        """
        value = getattr(self, field_name, None)
        if not value:
            raise ConfigurationError(
                f"{field_name.upper()} is not set. Add it to the environment or .env file."
            )
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
