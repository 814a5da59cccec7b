"""Configuration for the command suggestion service."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="CMDSUGGEST_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    service_version: str = Field(default="0.1.0")
    log_level: str = Field(default="INFO")

    predictor_url: str = Field(default="http://localhost:8080")
    predictor_timeout_seconds: float = Field(default=5.0)
    client_type: str = Field(default="AzurePowerShell")
    client_version: str = Field(default="1.0")

    history_window: int = Field(default=2, ge=1)
    flag_prefix: str = Field(default="-", min_length=1)
    noise_flags: list[str] = Field(
        default_factory=lambda: [
            "-Verbose",
            "-ErrorAction",
            "-Debug",
            "-ErrorVariable",
            "-OutVariable",
            "-OutBuffer",
        ]
    )
    redaction_marker: str = Field(default="***")
    sentinel: str = Field(default="start_of_snippet")

    rate_limit_rps: int = Field(default=5)
    rate_limit_window_seconds: float = Field(default=1)
    circuit_breaker_threshold: int = Field(default=5)
    circuit_breaker_timeout_seconds: float = Field(default=30)


@lru_cache
def get_settings() -> Settings:
    return Settings()
