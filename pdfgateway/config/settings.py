"""
Service settings, read from the environment.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the gateway."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=3000, description="Listening port (PORT)")
    log_level: str = Field(default="INFO", description="Root log level")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    # Matches the 50mb JSON limit of the original service
    max_body_bytes: int = Field(default=50 * 1024 * 1024, ge=1)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Install an explicit settings instance (tests, embedding)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
