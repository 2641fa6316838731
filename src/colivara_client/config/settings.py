"""Settings management for colivara-client.

This module provides the Settings class and functions for loading
configuration from YAML files and environment variables.

Example:
    >>> from colivara_client.config import load_settings
    >>> settings = load_settings()
    >>> print(settings.api.base_url)
    https://api.colivara.com
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import ValidationError, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from colivara_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from colivara_client.config.schema import ApiConfig, ClientDefaults, LoggingConfig


if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = [
    "Settings",
    "clear_settings_cache",
    "find_config_file",
    "get_settings",
    "load_settings",
]


# Pattern for ${VAR} and ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _interpolate_env_vars(value: object) -> object:
    """Recursively interpolate ${VAR} and ${VAR:-default} in strings.

    Unset variables without a default expand to an empty string. Dicts and
    lists are processed recursively; other values are returned unchanged.

    Example:
        >>> os.environ["MY_KEY"] = "secret123"
        >>> _interpolate_env_vars("${MY_KEY}")
        'secret123'
        >>> _interpolate_env_vars("${MISSING:-fallback}")
        'fallback'
    """
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            return match.group(2) or ""

        return _ENV_VAR_PATTERN.sub(replace, value)

    if isinstance(value, dict):
        return {k: _interpolate_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [_interpolate_env_vars(item) for item in value]

    return value


class _InterpolatingYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML settings source with ${VAR} interpolation support."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | str | None = None,
    ) -> None:
        if yaml_file is not None:
            super().__init__(settings_cls, yaml_file=yaml_file)
        else:
            super().__init__(settings_cls)

    def _read_files(
        self,
        files: Path | str | Sequence[Path | str] | None,
    ) -> dict[str, Any]:
        raw_data = super()._read_files(files)
        interpolated = _interpolate_env_vars(raw_data)
        if not isinstance(interpolated, dict):  # pragma: no cover
            return {}
        return interpolated


class Settings(BaseSettings):
    """Client settings loaded from YAML file and environment variables.

    Settings are loaded in priority order (highest to lowest):
    1. Constructor arguments
    2. Environment variables (``COLIVARA_*``, nested with ``__``)
    3. YAML configuration file
    4. Default values

    Attributes:
        api: API connection settings.
        defaults: Default collection names and search depth.
        logging: Logging settings.

    Example:
        >>> settings = load_settings()
        >>> settings.defaults.top_k
        3
    """

    model_config = SettingsConfigDict(
        yaml_file=None,
        yaml_file_encoding="utf-8",
        env_prefix="COLIVARA_",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    CONFIG_SEARCH_PATHS: ClassVar[list[Path]] = [
        Path("colivara.yaml"),
        Path("colivara.yml"),
        Path.home() / ".config" / "colivara" / "config.yaml",
    ]

    # Set by load_settings() before instantiation
    _yaml_file_override: ClassVar[Path | str | None] = None

    api: ApiConfig = ApiConfig()
    defaults: ClientDefaults = ClientDefaults()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def resolve_api_key(self) -> Settings:
        """Resolve the API key from its fallback sources.

        Resolution order:
        1. Direct ``api.api_key`` value
        2. ``api.api_key_file``
        3. ``COLIVARA_API_KEY`` environment variable

        Raises:
            ValueError: If api_key_file is set but the file doesn't exist.
        """
        if self.api.api_key:
            return self

        if self.api.api_key_file:
            key_path = self.api.api_key_file
            if not key_path.is_file():
                msg = f"API key file not found: {key_path}"
                raise ValueError(msg)
            object.__setattr__(self.api, "api_key", key_path.read_text().strip())
            return self

        env_key = os.environ.get("COLIVARA_API_KEY")
        if env_key:
            object.__setattr__(self.api, "api_key", env_key)

        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order sources as init > env > YAML > file secrets (no dotenv)."""
        return (
            init_settings,
            env_settings,
            _InterpolatingYamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._yaml_file_override,
            ),
            file_secret_settings,
        )


_cached_settings: Settings | None = None


def find_config_file(config_path: Path | str | None = None) -> Path | None:
    """Find the configuration file.

    Args:
        config_path: Explicit path to a config file, or None to search the
            default locations.

    Returns:
        Path to the config file if found, None otherwise.
    """
    if config_path is not None:
        path = Path(config_path)
        return path if path.is_file() else None

    for search_path in Settings.CONFIG_SEARCH_PATHS:
        if search_path.is_file():
            return search_path

    return None


def load_settings(
    config_path: Path | str | None = None,
    *,
    require_config_file: bool = False,
) -> Settings:
    """Load and validate client settings.

    The loaded settings are cached for subsequent calls to get_settings().

    Args:
        config_path: Path to a YAML config file. If None, searches
            ./colivara.yaml, ./colivara.yml and ~/.config/colivara/config.yaml.
        require_config_file: If True, raise when no config file is found.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationFileNotFoundError: When require_config_file=True and
            no config file is found.
        ConfigurationValidationError: When configuration validation fails.
    """
    global _cached_settings  # noqa: PLW0603

    config_file = find_config_file(config_path)

    if config_file is None and require_config_file:
        raise ConfigurationFileNotFoundError(
            path=str(config_path) if config_path else None,
            searched_paths=[str(p) for p in Settings.CONFIG_SEARCH_PATHS],
        )

    Settings._yaml_file_override = config_file  # noqa: SLF001
    try:
        settings = Settings()
    except ConfigurationError:
        raise
    except ValidationError as exc:
        msg = f"Failed to load configuration: {exc}"
        raise ConfigurationValidationError(
            msg,
            errors=[dict(err) for err in exc.errors()],
        ) from exc
    except Exception as exc:
        msg = f"Failed to load configuration: {exc}"
        raise ConfigurationValidationError(msg) from exc
    finally:
        Settings._yaml_file_override = None  # noqa: SLF001

    _cached_settings = settings
    return settings


def get_settings() -> Settings:
    """Get the cached settings instance, loading it if necessary."""
    global _cached_settings  # noqa: PLW0603

    if _cached_settings is None:
        _cached_settings = load_settings()

    return _cached_settings


def clear_settings_cache() -> None:
    """Clear the cached settings instance (mainly useful in tests)."""
    global _cached_settings  # noqa: PLW0603
    _cached_settings = None
