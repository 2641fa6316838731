"""Async Python client for the ColiVara document search API."""

from __future__ import annotations

from colivara_client.api import (
    ColiVaraAPIError,
    ColiVaraClient,
    ColiVaraError,
    EmbeddingTask,
    LookupOperator,
    QueryFilter,
)


__version__ = "0.1.0"

__all__ = [
    "ColiVaraAPIError",
    "ColiVaraClient",
    "ColiVaraError",
    "EmbeddingTask",
    "LookupOperator",
    "QueryFilter",
    "__version__",
]
