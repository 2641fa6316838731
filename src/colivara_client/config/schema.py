"""Configuration schema models for colivara-client.

This module defines Pydantic models for all configuration sections.
These models are used by the Settings class to validate and type-check
configuration loaded from YAML files and environment variables.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - needed at runtime for Pydantic
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from colivara_client.observability.logging import LogLevel


__all__ = [
    "DEFAULT_BASE_URL",
    "ApiConfig",
    "ClientDefaults",
    "ConfigBaseModel",
    "LoggingConfig",
]


DEFAULT_BASE_URL = "https://api.colivara.com"


class ConfigBaseModel(BaseModel):
    """Base model for all configuration sections.

    Uses stricter settings than API models to catch configuration typos:
    - extra="forbid" raises errors for unknown fields
    - validate_default=True ensures defaults are validated
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_default=True,
    )


# ---------------------------------------------------------------------------
# API Connection
# ---------------------------------------------------------------------------


class ApiConfig(ConfigBaseModel):
    """ColiVara API connection configuration.

    Either `api_key` or `api_key_file` should be provided. If both are set,
    `api_key` takes precedence. Environment variable interpolation is
    supported in the `api_key` field using ${VAR} syntax.

    Attributes:
        api_key: API key sent as a bearer token.
        api_key_file: Path to a file containing the API key.
        base_url: Base URL of the ColiVara API.
        timeout: Default request timeout in seconds.
        connect_timeout: Connection timeout in seconds.
    """

    api_key: str | None = Field(
        default=None,
        description="API key (supports ${VAR} interpolation)",
    )
    api_key_file: Path | None = Field(
        default=None,
        description="Path to file containing the API key",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the ColiVara API",
    )
    timeout: Annotated[float, Field(gt=0.0)] = 30.0
    connect_timeout: Annotated[float, Field(gt=0.0)] = 10.0

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Remove trailing slash from URL to avoid double slashes."""
        return v.rstrip("/")


# ---------------------------------------------------------------------------
# Client Defaults
# ---------------------------------------------------------------------------


class ClientDefaults(ConfigBaseModel):
    """Default values applied when a call leaves a parameter unset.

    Attributes:
        collection_name: Collection used by single-collection document
            operations.
        search_collection_name: Collection searched when none is given;
            "all" spans every collection of the user.
        top_k: Number of search results returned.
    """

    collection_name: str = Field(
        default="default_collection",
        description="Collection for single-collection document operations",
    )
    search_collection_name: str = Field(
        default="all",
        description="Collection searched when none is given",
    )
    top_k: Annotated[int, Field(ge=1, description="Number of search results")] = 3


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class LoggingConfig(ConfigBaseModel):
    """Logging configuration.

    Attributes:
        level: Minimum log level.
        colors: Force colorized output on or off; None detects a TTY.
    """

    level: LogLevel = Field(default=LogLevel.INFO)
    colors: bool | None = Field(default=None)

    @field_validator("level", mode="before")
    @classmethod
    def lowercase_level(cls, v: object) -> object:
        """Accept log levels in any case."""
        return v.lower() if isinstance(v, str) else v
