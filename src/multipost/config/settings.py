"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Loads defaults from MULTIPOST_* environment variables and an optional
.env file. Command line flags override these values field by field.
Duration fields accept seconds or Go-style strings such as "30s".
"""

from typing import Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from multipost.models.delivery import RetryPolicy
from multipost.utils.durations import parse_duration


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MULTIPOST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Delivery settings
    verbose: bool = Field(default=False, description="Log every attempt, not only failures")
    retries: int = Field(
        default=3,
        ge=1,
        description="How many times to try each post"
    )
    retry_time: float = Field(
        default=30.0,
        ge=0,
        description="Seconds to wait between retries"
    )
    request_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional per-request HTTP timeout in seconds"
    )
    time_limit: float = Field(
        default=15 * 60.0,
        gt=0,
        description="Maximum number of seconds this process may run"
    )

    # Payload settings
    input: str = Field(default="-", description="File from which to read the body, '-' for stdin")
    param: str = Field(default="payload", description="Form parameter name, empty to send raw bytes")

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log rendering: json or console")

    @field_validator('retry_time', 'time_limit', 'request_timeout', mode='before')
    @classmethod
    def validate_duration(cls, v: Union[str, int, float, None]) -> Optional[float]:
        """Accept Go-style duration strings for time fields."""
        if v is None or v == "":
            return None
        return parse_duration(v)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v.lower() not in ('json', 'console'):
            raise ValueError("log_format must be one of: json, console")
        return v.lower()

    def retry_policy(self) -> RetryPolicy:
        """Build the retry policy shared by all delivery workers."""
        return RetryPolicy(
            max_attempts=self.retries,
            backoff_interval=self.retry_time
        )
