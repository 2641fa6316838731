"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import structlog

from colivara_client.config import clear_settings_cache


if TYPE_CHECKING:
    from collections.abc import Generator


COLIVARA_ENV_VARS = (
    "COLIVARA_API_KEY",
    "COLIVARA_API__API_KEY",
    "COLIVARA_API__BASE_URL",
    "COLIVARA_DEFAULTS__TOP_K",
    "COLIVARA_DEFAULTS__COLLECTION_NAME",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from COLIVARA_* variables and cached settings."""
    for name in COLIVARA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.reset_defaults()
