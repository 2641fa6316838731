"""Configuration module for colivara-client.

Settings come from constructor arguments, ``COLIVARA_*`` environment
variables and an optional YAML file. YAML values support ${VAR} and
${VAR:-default} interpolation.

Example:
    >>> from colivara_client.config import load_settings
    >>> settings = load_settings()
    >>> settings.api.base_url
    'https://api.colivara.com'
    >>> settings.defaults.collection_name
    'default_collection'
"""

from __future__ import annotations

from colivara_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    MissingApiKeyError,
)
from colivara_client.config.schema import (
    DEFAULT_BASE_URL,
    ApiConfig,
    ClientDefaults,
    ConfigBaseModel,
    LoggingConfig,
)
from colivara_client.config.settings import (
    Settings,
    clear_settings_cache,
    find_config_file,
    get_settings,
    load_settings,
)


__all__ = [
    "DEFAULT_BASE_URL",
    "ApiConfig",
    "ClientDefaults",
    "ConfigBaseModel",
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "LoggingConfig",
    "MissingApiKeyError",
    "Settings",
    "clear_settings_cache",
    "find_config_file",
    "get_settings",
    "load_settings",
]
