"""Global settings instance for LeaseDesk.

This module provides a unified settings object that combines:
- Configuration from config.toml
- Secrets from secrets.env
- Environment variable overrides
"""

import logging

from leasedesk.config.loader import load_config, load_secrets
from leasedesk.config.schema import LeasedeskConfig, SecretsConfig

logger = logging.getLogger(__name__)


class Settings:
    """Unified settings object combining config and secrets.

    Frequently used values are exposed as flat properties; everything else
    is reachable through ``settings.config.<section>``.
    """

    def __init__(
        self,
        config: LeasedeskConfig | None = None,
        secrets: SecretsConfig | None = None,
    ):
        self._config = config or load_config()
        self._secrets = secrets or load_secrets()

        if self._config.auth.bootstrap_admin_login and not self._secrets.bootstrap_admin_password:
            logger.warning(
                "Bootstrap admin login is configured but LEASEDESK_BOOTSTRAP_ADMIN_PASSWORD "
                "is not set; no admin account will be created at startup."
            )

    @property
    def config(self) -> LeasedeskConfig:
        """Get the full configuration object."""
        return self._config

    @property
    def secrets(self) -> SecretsConfig:
        """Get the secrets configuration object."""
        return self._secrets

    # Application
    @property
    def app_name(self) -> str:
        return self._config.app_name

    @property
    def debug(self) -> bool:
        return self._config.server.debug

    # Server
    @property
    def enforce_https(self) -> bool:
        return self._config.server.enforce_https

    @property
    def rate_limit_per_minute(self) -> int:
        return self._config.server.rate_limit_per_minute

    @property
    def cors_origins(self) -> list[str]:
        return self._config.server.cors_origins

    # Database
    @property
    def mongodb_url(self) -> str:
        return self._config.database.mongodb_url

    @property
    def mongodb_database(self) -> str:
        return self._config.database.mongodb_database

    @property
    def min_pool_size(self) -> int:
        return self._config.database.min_pool_size

    @property
    def max_pool_size(self) -> int:
        return self._config.database.max_pool_size

    # Imports
    @property
    def max_upload_size_bytes(self) -> int:
        return self._config.imports.max_upload_bytes

    @property
    def max_response_errors(self) -> int:
        return self._config.imports.max_response_errors

    # Auth
    @property
    def session_cookie_name(self) -> str:
        return self._config.auth.session_cookie_name

    @property
    def session_ttl_seconds(self) -> int:
        return self._config.auth.session_ttl_seconds

    @property
    def login_rate_limit_per_minute(self) -> int:
        return self._config.auth.login_rate_limit_per_minute

    @property
    def min_password_length(self) -> int:
        return self._config.auth.min_password_length


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    The settings are loaded once and cached for subsequent calls.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance.

    This is primarily useful for testing to reload configuration.
    """
    global _settings
    _settings = None


class _SettingsProxy:
    """Proxy object that lazily loads settings on first access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)

    def __repr__(self) -> str:
        return repr(get_settings())


settings = _SettingsProxy()
