"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseSettings):
    """Hosted backend (auth + REST data store) configuration."""

    url: str = "http://localhost:54321"
    anon_key: str = "test-anon-key-default"  # Default for testing, should be overridden in production
    rest_path: str = "/rest/v1"
    auth_path: str = "/auth/v1"
    request_timeout: int = 30
    max_retries: int = 3

    model_config = SettingsConfigDict(env_prefix="BACKEND_")


class RedisSettings(BaseSettings):
    """Redis configuration for session caching."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    socket_timeout: int = 5
    socket_connect_timeout: int = 5

    model_config = SettingsConfigDict(env_prefix="REDIS_")


class SessionSettings(BaseSettings):
    """Signed-in session handling."""

    cache_enabled: bool = False
    cache_key: str = "frontdesk:auth:session"

    model_config = SettingsConfigDict(env_prefix="SESSION_")


class FrontDeskSettings(BaseSettings):
    """Front desk business rules."""

    timezone: Optional[str] = None  # IANA name for "today"; unset uses the host zone
    enforce_overlap_check: bool = True
    archive_room_guard: bool = True

    model_config = SettingsConfigDict(env_prefix="FRONTDESK_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Sub-settings
    backend: BackendSettings = BackendSettings()
    redis: RedisSettings = RedisSettings()
    session: SessionSettings = SessionSettings()
    frontdesk: FrontDeskSettings = FrontDeskSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_backend(self) -> list[str]:
        """Validate required backend vars. Returns list of missing var names."""
        missing = []
        if not self.backend.url.strip():
            missing.append("BACKEND_URL")
        if not self.backend.anon_key.strip():
            missing.append("BACKEND_ANON_KEY")
        return missing

    @property
    def rest_url(self) -> str:
        """Base URL of the REST data store."""
        return f"{self.backend.url.rstrip('/')}{self.backend.rest_path}"

    @property
    def auth_url(self) -> str:
        """Base URL of the authentication service."""
        return f"{self.backend.url.rstrip('/')}{self.backend.auth_path}"


# Global settings instance
settings = Settings()
