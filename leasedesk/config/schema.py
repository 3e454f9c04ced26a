"""Pydantic models for LeaseDesk configuration.

These models define the structure of config.toml and secrets.env files.
"""

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    workers: int = 2
    debug: bool = False
    enforce_https: bool = False
    rate_limit_per_minute: int = 120
    # CORS configuration - empty list means same-origin only
    cors_origins: list[str] = []


class DatabaseConfig(BaseModel):
    """MongoDB database configuration."""

    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "leasedesk"
    # Connection pool settings
    min_pool_size: int = 5
    max_pool_size: int = 50


class ImportConfig(BaseModel):
    """Spreadsheet import configuration."""

    max_upload_mb: int = 10
    max_response_errors: int = 100
    allowed_extensions: list[str] = ["xlsx"]

    @property
    def max_upload_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_mb * 1024 * 1024


class AuthConfig(BaseModel):
    """Authentication configuration."""

    session_cookie_name: str = "leasedesk_session"
    session_ttl_days: int = 30
    login_rate_limit_per_minute: int = 10
    min_password_length: int = 4
    # Admin account created at startup when the matching secret is set
    bootstrap_admin_login: str | None = None
    bootstrap_admin_display_name: str | None = None

    @property
    def session_ttl_seconds(self) -> int:
        """Get session lifetime in seconds."""
        return self.session_ttl_days * 24 * 60 * 60


class MediaConfig(BaseModel):
    """Media preview configuration."""

    preview_cache_ttl_seconds: int = 600
    preview_cache_max_entries: int = 2048
    request_timeout_seconds: float = 10.0
    yandex_api_url: str = "https://cloud-api.yandex.net/v1/disk/public/resources"


class ActivityConfig(BaseModel):
    """Activity event recording configuration."""

    rate_limit_window_seconds: int = 60
    rate_limit_max_events: int = 300
    max_payload_bytes: int = 4096


class LeasedeskConfig(BaseModel):
    """Main LeaseDesk configuration loaded from config.toml."""

    app_name: str = "LeaseDesk"
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    imports: ImportConfig = Field(default_factory=ImportConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    activity: ActivityConfig = Field(default_factory=ActivityConfig)


class SecretsConfig(BaseModel):
    """Secrets loaded from secrets.env file.

    These are sensitive values that should not be stored in config.toml.
    """

    bootstrap_admin_password: str | None = None
