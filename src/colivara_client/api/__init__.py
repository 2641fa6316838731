"""ColiVara API client module.

This module provides an async HTTP client for the ColiVara document search
API: collections, documents, search, embeddings, metadata filters, webhooks
and helper endpoints.

Example:
    ```python
    from colivara_client.api import ColiVaraClient, QueryFilter

    async with ColiVaraClient(api_key="your-api-key") as client:
        await client.upsert_document(
            "invoice-42",
            document_url="https://example.com/invoice-42.pdf",
            metadata={"kind": "invoice"},
        )
        results = await client.search(
            "total amount due",
            query_filter=QueryFilter(key="kind", value="invoice"),
        )
    ```
"""

from __future__ import annotations

from colivara_client.api.client import ColiVaraClient
from colivara_client.api.exceptions import (
    ColiVaraAPIError,
    ColiVaraError,
    ColiVaraFileNotFoundError,
    ColiVaraFileReadError,
    ColiVaraPermissionError,
    InvalidTaskError,
    MissingDocumentSourceError,
)
from colivara_client.api.models import (
    Collection,
    Document,
    EmbeddingItem,
    EmbeddingsResponse,
    EmbeddingsUsage,
    EmbeddingTask,
    ExpandField,
    FileImage,
    FilterTarget,
    LookupOperator,
    Page,
    QueryFilter,
    SearchResponse,
    SearchResult,
    WebhookRegistration,
)
from colivara_client.api.webhooks import validate_webhook


__all__ = [
    "ColiVaraAPIError",
    "ColiVaraClient",
    "ColiVaraError",
    "ColiVaraFileNotFoundError",
    "ColiVaraFileReadError",
    "ColiVaraPermissionError",
    "Collection",
    "Document",
    "EmbeddingItem",
    "EmbeddingTask",
    "EmbeddingsResponse",
    "EmbeddingsUsage",
    "ExpandField",
    "FileImage",
    "FilterTarget",
    "InvalidTaskError",
    "LookupOperator",
    "MissingDocumentSourceError",
    "Page",
    "QueryFilter",
    "SearchResponse",
    "SearchResult",
    "WebhookRegistration",
    "validate_webhook",
]
