"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SCAN LOGGING SERVICE
    # ===================
    scan_logger_url: Optional[str] = Field(
        None,
        description="Endpoint of the remote scan logging service"
    )
    shared_secret: Optional[str] = Field(
        None,
        description="Secret sent with every payload to the logging service"
    )

    # ===================
    # TRANSPORT
    # ===================
    request_timeout_seconds: float = Field(
        default=25.0,
        gt=0,
        le=120,
        description="Timeout for a single scan submission request"
    )
    ping_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="Timeout for the connectivity check"
    )
    send_max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries after the first failed submission attempt"
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        le=30,
        description="Wait before retrying after a server error response"
    )
    network_retry_delay_seconds: float = Field(
        default=1.5,
        ge=0,
        le=30,
        description="Wait before retrying after a network error"
    )
    max_failures_before_offline: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Consecutive failed submissions before reporting offline"
    )

    # ===================
    # SCANNING
    # ===================
    processing_timeout_seconds: float = Field(
        default=35.0,
        gt=0,
        le=300,
        description="Age after which an in-flight scan lock is considered stale"
    )
    history_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum history entries kept per operator"
    )
    default_station: str = Field(
        default="MAIN",
        min_length=1,
        description="Station used when none has been chosen"
    )
    block_local_duplicates: bool = Field(
        default=False,
        description="Record locally known serials as DUPLICATE without sending"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for the local store file"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def scan_logger_configured(self) -> bool:
        """Check if the logging service endpoint is set."""
        return bool(self.scan_logger_url)

    @property
    def store_path(self) -> Path:
        """Location of the local store file."""
        return self.data_dir / "local_store.json"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
