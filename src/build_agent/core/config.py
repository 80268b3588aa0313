"""Configuration management for the build agent server utilities."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from build_agent import __version__

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Agent configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # HTTP
    http_timeout_seconds: float = Field(100.0, description="Per-request timeout in seconds")
    user_agent: str = Field(f"build-agent/{__version__}", description="User-Agent header value")
    skip_cert_validation: bool = Field(False, description="Disable TLS certificate validation")
    proxy_url: Optional[str] = Field(None, description="HTTP proxy URL")

    # Credentials
    access_token: Optional[str] = Field(None, description="Access token used when none is given")

    # Observability
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("console", description="Log renderer: json or console")

    @field_validator("http_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Timeout must be positive."""
        if v <= 0:
            raise ValueError(f"http_timeout_seconds must be > 0, got: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Must be a standard logging level name."""
        v = v.strip().upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Only json and console renderers exist."""
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got: {v}")
        return v

    @field_validator("proxy_url", "access_token", mode="before")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v
