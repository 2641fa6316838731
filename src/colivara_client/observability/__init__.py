"""Observability module (structured logging)."""

from __future__ import annotations

from colivara_client.observability.logging import (
    LogLevel,
    call_context,
    configure_logging,
    generate_call_id,
    get_logger,
)


__all__ = [
    "LogLevel",
    "call_context",
    "configure_logging",
    "generate_call_id",
    "get_logger",
]
