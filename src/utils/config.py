"""Configuration management using environment variables and pydantic."""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


MARTA_REALTIME_URL = (
    "https://developer.itsmarta.com/RealtimeTrain/RestServiceNextTrain/GetRealtimeArrivals"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # MARTA Configuration
    marta_api_key: str
    marta_api_url: str = MARTA_REALTIME_URL
    poll_time_in_seconds: int = Field(default=30, ge=1)

    # Slack Configuration
    webhook_url: str
    slack_signing_secret: str = ""  # Required by the command endpoint
    slack_signature_version: str = "v0"
    request_max_age_seconds: int = Field(default=300, ge=1)
    skip_signature_verification: bool = False  # Unauthenticated local debugging only

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    # Repeated boarding alerts for the same train (0 = alert every cycle)
    boarding_suppression_seconds: int = Field(default=0, ge=0)

    # Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8080

    # Logging Configuration
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file_path: str = "logs/smarta.log"
    log_max_size_mb: int = 10
    log_backup_count: int = 5

    # Development/Testing
    debug_mode: bool = False
    dry_run: bool = False

    @property
    def effective_log_level(self) -> str:
        """Log level after applying debug mode."""
        return "DEBUG" if self.debug_mode else self.log_level.upper()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
