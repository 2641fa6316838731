"""Pydantic models for ColiVara API requests and responses."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


__all__ = [
    "Collection",
    "CollectionCreate",
    "CollectionUpdate",
    "Document",
    "DocumentUpdate",
    "DocumentUpsert",
    "EmbeddingItem",
    "EmbeddingTask",
    "EmbeddingsRequest",
    "EmbeddingsResponse",
    "EmbeddingsUsage",
    "ExpandField",
    "FileImage",
    "FilterTarget",
    "LookupOperator",
    "Page",
    "QueryFilter",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
    "WebhookCreate",
    "WebhookRegistration",
]


class EmbeddingTask(StrEnum):
    """Kind of input sent to the embeddings endpoint."""

    QUERY = "query"
    IMAGE = "image"


class FilterTarget(StrEnum):
    """Entity class a metadata filter applies to."""

    DOCUMENT = "document"
    COLLECTION = "collection"


class LookupOperator(StrEnum):
    """Metadata lookup operators understood by the filter and search endpoints.

    Attributes:
        KEY_LOOKUP: Exact match of ``key`` against ``value``.
        CONTAINS: Metadata contains the given key/value pairs.
        CONTAINED_BY: Metadata is a subset of the given value.
        HAS_KEY: Metadata has the given key.
        HAS_KEYS: Metadata has all of the given keys.
        HAS_ANY_KEYS: Metadata has at least one of the given keys.
    """

    KEY_LOOKUP = "key_lookup"
    CONTAINS = "contains"
    CONTAINED_BY = "contained_by"
    HAS_KEY = "has_key"
    HAS_KEYS = "has_keys"
    HAS_ANY_KEYS = "has_any_keys"


class ExpandField(StrEnum):
    """Fields that can be expanded in document responses."""

    PAGES = "pages"


class ColiVaraBaseModel(BaseModel):
    """Base model with common configuration for all ColiVara models."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",  # Ignore unknown fields from API
    )


class ColiVaraRequestModel(BaseModel):
    """Base model for request bodies.

    Caller strings are sent exactly as given.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class Collection(ColiVaraBaseModel):
    """A named, user-owned grouping of documents."""

    id: int
    name: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    num_documents: int = Field(default=0)


class Page(ColiVaraBaseModel):
    """One rendered page of a document, as an inline base64 image."""

    document_name: str | None = None
    page_number: int
    img_base64: str


class Document(ColiVaraBaseModel):
    """A document tracked under a collection.

    ``pages`` is only populated when the request asked for the pages to be
    expanded; otherwise it is None.
    """

    id: int
    name: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    url: str | None = None
    base64: str | None = None
    num_pages: int = Field(default=0)
    collection_name: str
    pages: list[Page] | None = None


class SearchResult(ColiVaraBaseModel):
    """A ranked page reference returned by search."""

    collection_name: str
    collection_id: int
    collection_metadata: dict[str, Any] = Field(default_factory=dict)
    document_name: str
    document_id: int
    document_metadata: dict[str, Any] = Field(default_factory=dict)
    page_number: int
    raw_score: float
    normalized_score: float
    img_base64: str


class SearchResponse(ColiVaraBaseModel):
    """Search results in server-provided order."""

    query: str
    results: list[SearchResult] = Field(default_factory=list)


class EmbeddingItem(ColiVaraBaseModel):
    """A single embedding in an embeddings response.

    ColiVara returns multi-vector embeddings, one vector per token or patch,
    so ``embedding`` may be a list of vectors rather than a flat vector.
    """

    embedding: list[list[float]] | list[float]
    index: int | None = None


class EmbeddingsUsage(ColiVaraBaseModel):
    """Token accounting for an embeddings call."""

    prompt_tokens: int = 0
    total_tokens: int = 0


class EmbeddingsResponse(ColiVaraBaseModel):
    """Response of the embeddings endpoint."""

    model: str
    data: list[EmbeddingItem]
    usage: EmbeddingsUsage = Field(default_factory=EmbeddingsUsage)


class FileImage(ColiVaraBaseModel):
    """One page image produced by the file-to-image helper endpoint."""

    page_number: int
    img_base64: str


class WebhookRegistration(ColiVaraBaseModel):
    """A registered webhook endpoint.

    The ``webhook_secret`` is only returned once; callers must store it to
    validate incoming webhook calls later.
    """

    app_id: str
    endpoint_id: str
    webhook_secret: str


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class QueryFilter(ColiVaraRequestModel):
    """Metadata filter criterion for search and filter calls.

    A missing ``value`` is always sent as an empty string; the API schema does
    not accept null or an absent field.
    """

    on: FilterTarget = FilterTarget.DOCUMENT
    key: str | list[str]
    value: str | int | float | bool | None = ""
    lookup: LookupOperator = LookupOperator.KEY_LOOKUP

    @field_validator("value", mode="after")
    @classmethod
    def none_to_empty(cls, v: object) -> object:
        """Serialize a missing value as an empty string."""
        return "" if v is None else v


class CollectionCreate(ColiVaraRequestModel):
    """Body for creating a collection."""

    name: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class CollectionUpdate(ColiVaraRequestModel):
    """Body for a partial collection update (PATCH).

    Only non-None fields are included in the request body.
    """

    name: str | None = None
    metadata: dict[str, Any] | None = None


class DocumentUpsert(ColiVaraRequestModel):
    """Body for inserting or replacing a document."""

    name: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    collection_name: str
    url: str | None = None
    base64: str | None = None
    wait: bool = False
    use_proxy: bool = False


class DocumentUpdate(ColiVaraRequestModel):
    """Body for a partial document update (PATCH).

    Only non-None fields are included in the request body.
    """

    name: str | None = None
    metadata: dict[str, Any] | None = None
    collection_name: str | None = None
    url: str | None = None
    base64: str | None = None
    use_proxy: bool = False


class SearchRequest(ColiVaraRequestModel):
    """Body for a search call."""

    query: str
    collection_name: str
    top_k: int = Field(default=3, ge=1)
    query_filter: QueryFilter | None = None


class EmbeddingsRequest(ColiVaraRequestModel):
    """Body for an embeddings call."""

    input_data: list[str]
    task: EmbeddingTask = EmbeddingTask.QUERY


class WebhookCreate(ColiVaraRequestModel):
    """Body for registering a webhook."""

    url: str
