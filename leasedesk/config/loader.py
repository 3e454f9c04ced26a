"""Configuration loader for LeaseDesk.

Loads configuration from TOML files and secrets from .env files.
Environment variables can override any configuration value.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from leasedesk.config.schema import LeasedeskConfig, SecretsConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "LEASEDESK"

_INT_KEYS = {
    "port",
    "workers",
    "min_pool_size",
    "max_pool_size",
    "max_upload_mb",
    "max_response_errors",
    "session_ttl_days",
    "login_rate_limit_per_minute",
    "rate_limit_per_minute",
    "preview_cache_ttl_seconds",
    "preview_cache_max_entries",
    "rate_limit_window_seconds",
    "rate_limit_max_events",
    "max_payload_bytes",
}
_BOOL_KEYS = {"debug", "enforce_https"}
_FLOAT_KEYS = {"request_timeout_seconds"}
_LIST_KEYS = {"cors_origins", "allowed_extensions"}


def _search_paths(filename: str) -> list[Path]:
    return [
        Path.cwd() / filename,
        Path.home() / ".config" / "leasedesk" / filename,
        Path("/opt/leasedesk") / filename,
        Path("/etc/leasedesk") / filename,
    ]


def get_config_search_paths() -> list[Path]:
    """Get the list of paths to search for configuration files.

    Returns paths in priority order (first found wins):
    1. ./config.toml (project root - for development)
    2. ~/.config/leasedesk/config.toml (user config)
    3. /opt/leasedesk/config.toml (production install)
    4. /etc/leasedesk/config.toml (system config)
    """
    return _search_paths("config.toml")


def get_secrets_search_paths() -> list[Path]:
    """Get the list of paths to search for secrets files, same order as config."""
    return _search_paths("secrets.env")


def _find_first(paths: list[Path]) -> Path | None:
    for path in paths:
        if path.exists() and path.is_file():
            logger.debug("Found configuration file: %s", path)
            return path
    return None


def find_config_file() -> Path | None:
    """Find the first existing config file from search paths."""
    return _find_first(get_config_search_paths())


def find_secrets_file() -> Path | None:
    """Find the first existing secrets file from search paths."""
    return _find_first(get_secrets_search_paths())


def load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a simple .env file into a dictionary.

    Supports:
    - KEY=value
    - KEY="quoted value"
    - # comments
    - Empty lines
    """
    env_vars: dict[str, str] = {}

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            # Remove surrounding quotes if present
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]

            env_vars[key] = value

    return env_vars


def _coerce_env_value(key: str, value: str) -> Any:
    if key in _INT_KEYS:
        return int(value)
    if key in _FLOAT_KEYS:
        return float(value)
    if key in _BOOL_KEYS:
        return value.lower() in ("true", "1", "yes")
    if key in _LIST_KEYS:
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def apply_env_overrides(config_dict: dict[str, Any], prefix: str = ENV_PREFIX) -> None:
    """Apply environment variable overrides to configuration dictionary.

    Environment variables are mapped as follows:
    - LEASEDESK_SERVER_HOST -> config_dict["server"]["host"]
    - LEASEDESK_DATABASE_MONGODB_URL -> config_dict["database"]["mongodb_url"]
    - etc.

    Note: This modifies config_dict in place.
    """
    env_mappings = {
        # Server
        f"{prefix}_SERVER_HOST": ("server", "host"),
        f"{prefix}_SERVER_PORT": ("server", "port"),
        f"{prefix}_SERVER_WORKERS": ("server", "workers"),
        f"{prefix}_SERVER_DEBUG": ("server", "debug"),
        f"{prefix}_SERVER_ENFORCE_HTTPS": ("server", "enforce_https"),
        f"{prefix}_SERVER_CORS_ORIGINS": ("server", "cors_origins"),
        f"{prefix}_DEBUG": ("server", "debug"),  # Shorthand
        f"{prefix}_HOST": ("server", "host"),  # Shorthand
        f"{prefix}_PORT": ("server", "port"),  # Shorthand
        # Database
        f"{prefix}_DATABASE_MONGODB_URL": ("database", "mongodb_url"),
        f"{prefix}_DATABASE_MONGODB_DATABASE": ("database", "mongodb_database"),
        f"{prefix}_MONGODB_URL": ("database", "mongodb_url"),  # Shorthand
        f"{prefix}_MONGODB_DATABASE": ("database", "mongodb_database"),  # Shorthand
        # Imports
        f"{prefix}_IMPORTS_MAX_UPLOAD_MB": ("imports", "max_upload_mb"),
        f"{prefix}_IMPORTS_MAX_RESPONSE_ERRORS": ("imports", "max_response_errors"),
        # Auth
        f"{prefix}_AUTH_SESSION_COOKIE_NAME": ("auth", "session_cookie_name"),
        f"{prefix}_AUTH_SESSION_TTL_DAYS": ("auth", "session_ttl_days"),
        f"{prefix}_AUTH_LOGIN_RATE_LIMIT_PER_MINUTE": ("auth", "login_rate_limit_per_minute"),
        f"{prefix}_BOOTSTRAP_ADMIN_LOGIN": ("auth", "bootstrap_admin_login"),
        f"{prefix}_BOOTSTRAP_ADMIN_DISPLAY_NAME": ("auth", "bootstrap_admin_display_name"),
        # Media
        f"{prefix}_MEDIA_PREVIEW_CACHE_TTL_SECONDS": ("media", "preview_cache_ttl_seconds"),
        f"{prefix}_MEDIA_PREVIEW_CACHE_MAX_ENTRIES": ("media", "preview_cache_max_entries"),
        f"{prefix}_MEDIA_REQUEST_TIMEOUT_SECONDS": ("media", "request_timeout_seconds"),
        # Activity
        f"{prefix}_ACTIVITY_RATE_LIMIT_MAX_EVENTS": ("activity", "rate_limit_max_events"),
        f"{prefix}_ACTIVITY_RATE_LIMIT_WINDOW_SECONDS": ("activity", "rate_limit_window_seconds"),
    }

    for env_var, (section, key) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        config_dict.setdefault(section, {})[key] = _coerce_env_value(key, value)


def load_secrets(secrets_file: Path | None = None) -> SecretsConfig:
    """Load secrets from environment variables and optional secrets.env file.

    Environment variables take precedence over file values.
    """
    key_mapping = {
        f"{ENV_PREFIX}_BOOTSTRAP_ADMIN_PASSWORD": "bootstrap_admin_password",
    }
    secrets_dict: dict[str, str] = {}

    if secrets_file is None:
        secrets_file = find_secrets_file()

    if secrets_file and secrets_file.exists():
        logger.info("Loading secrets from: %s", secrets_file)
        file_secrets = parse_env_file(secrets_file)
        for file_key, config_key in key_mapping.items():
            if file_key in file_secrets:
                secrets_dict[config_key] = file_secrets[file_key]

    for env_var, config_key in key_mapping.items():
        value = os.environ.get(env_var)
        if value:
            secrets_dict[config_key] = value

    return SecretsConfig(**secrets_dict)


def load_config(config_file: Path | None = None) -> LeasedeskConfig:
    """Load configuration from TOML file with environment variable overrides.

    Args:
        config_file: Optional path to config file. If not provided,
                     searches default locations.

    Returns:
        LeasedeskConfig instance with all settings loaded.
    """
    config_dict: dict[str, Any] = {}

    if config_file is None:
        config_file = find_config_file()

    if config_file and config_file.exists():
        logger.info("Loading config from: %s", config_file)
        config_dict = load_toml_file(config_file)
    else:
        logger.info("No config file found, using defaults with env overrides")

    apply_env_overrides(config_dict)

    return LeasedeskConfig(**config_dict)
