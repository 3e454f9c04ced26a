"""LeaseDesk configuration module.

This module provides TOML-based configuration with environment variable overrides.

Configuration is loaded from the following locations (in order of priority):
1. Environment variables (highest priority)
2. ./config.toml (project root - for development)
3. ~/.config/leasedesk/config.toml (user config)
4. /etc/leasedesk/config.toml (system config)

Secrets are loaded from secrets.env files in the same directories.
"""

from leasedesk.config.schema import (
    ActivityConfig,
    AuthConfig,
    DatabaseConfig,
    ImportConfig,
    LeasedeskConfig,
    MediaConfig,
    SecretsConfig,
    ServerConfig,
)
from leasedesk.config.settings import get_settings, reset_settings, settings

__all__ = [
    "ActivityConfig",
    "AuthConfig",
    "DatabaseConfig",
    "ImportConfig",
    "LeasedeskConfig",
    "MediaConfig",
    "SecretsConfig",
    "ServerConfig",
    "get_settings",
    "reset_settings",
    "settings",
]
