"""Request body construction for the ColiVara API.

Each builder turns the arguments of a client call into the exact request
model the API expects, applying defaults and omission rules. Nothing here
performs I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel  # noqa: TC002

from colivara_client.api.exceptions import InvalidTaskError
from colivara_client.api.models import (
    CollectionCreate,
    CollectionUpdate,
    DocumentUpdate,
    DocumentUpsert,
    EmbeddingsRequest,
    EmbeddingTask,
    ExpandField,
    QueryFilter,
    SearchRequest,
    WebhookCreate,
)


__all__ = [
    "build_collection_create",
    "build_collection_update",
    "build_document_update",
    "build_document_upsert",
    "build_embeddings",
    "build_search",
    "build_webhook",
    "expand_params",
    "normalize_filter",
    "normalize_task",
    "to_body",
]


def to_body(model: BaseModel) -> dict[str, Any]:
    """Serialize a request model to a JSON body, dropping None fields."""
    body: dict[str, Any] = model.model_dump(mode="json", exclude_none=True)
    return body


def normalize_task(task: EmbeddingTask | str) -> EmbeddingTask:
    """Normalize an embedding task to its enum member.

    Args:
        task: An ``EmbeddingTask`` or a case-insensitive "query"/"image".

    Returns:
        The matching ``EmbeddingTask``.

    Raises:
        InvalidTaskError: If the value names no known task.
    """
    if isinstance(task, EmbeddingTask):
        return task
    if isinstance(task, str):
        try:
            return EmbeddingTask(task.lower())
        except ValueError:
            pass
    raise InvalidTaskError(task)


def normalize_filter(query_filter: QueryFilter | Mapping[str, Any]) -> QueryFilter:
    """Coerce a filter given as a mapping into a ``QueryFilter``.

    A missing or None ``value`` becomes an empty string.

    Raises:
        pydantic.ValidationError: If the mapping is not a valid filter.
    """
    if isinstance(query_filter, QueryFilter):
        return query_filter
    return QueryFilter.model_validate(dict(query_filter))


def expand_params(
    expand: str | Iterable[ExpandField | str] | None,
) -> dict[str, str]:
    """Build the ``expand`` query parameter.

    Args:
        expand: Comma-separated string or iterable of fields to expand.
            Only "pages" is currently recognized by the API.

    Returns:
        ``{"expand": "..."}`` or an empty dict when nothing is expanded.
    """
    if not expand:
        return {}
    if isinstance(expand, str):
        value = expand
    else:
        value = ",".join(str(field) for field in expand)
    return {"expand": value} if value else {}


def build_collection_create(
    name: str,
    metadata: Mapping[str, Any] | None = None,
) -> CollectionCreate:
    """Body for creating a collection; metadata defaults to ``{}``."""
    return CollectionCreate(name=name, metadata=dict(metadata or {}))


def build_collection_update(
    name: str | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> CollectionUpdate:
    """Body for a partial collection update with only the given fields."""
    return CollectionUpdate(
        name=name,
        metadata=dict(metadata) if metadata is not None else None,
    )


def build_document_upsert(  # noqa: PLR0913
    name: str,
    *,
    collection_name: str,
    metadata: Mapping[str, Any] | None = None,
    url: str | None = None,
    base64_content: str | None = None,
    wait: bool = False,
    use_proxy: bool = False,
) -> DocumentUpsert:
    """Body for a document upsert.

    The caller is expected to have resolved the content source already.
    """
    return DocumentUpsert(
        name=name,
        metadata=dict(metadata or {}),
        collection_name=collection_name,
        url=url,
        base64=base64_content,
        wait=wait,
        use_proxy=use_proxy,
    )


def build_document_update(  # noqa: PLR0913
    *,
    name: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    collection_name: str | None = None,
    url: str | None = None,
    base64_content: str | None = None,
    use_proxy: bool = False,
) -> DocumentUpdate:
    """Body for a partial document update with only the given fields."""
    return DocumentUpdate(
        name=name,
        metadata=dict(metadata) if metadata is not None else None,
        collection_name=collection_name,
        url=url,
        base64=base64_content,
        use_proxy=use_proxy,
    )


def build_search(
    query: str,
    *,
    collection_name: str,
    top_k: int,
    query_filter: QueryFilter | Mapping[str, Any] | None = None,
) -> SearchRequest:
    """Body for a search call; ``query_filter`` is omitted when absent."""
    return SearchRequest(
        query=query,
        collection_name=collection_name,
        top_k=top_k,
        query_filter=(
            normalize_filter(query_filter) if query_filter is not None else None
        ),
    )


def build_embeddings(
    input_data: str | Iterable[str],
    task: EmbeddingTask | str = EmbeddingTask.QUERY,
) -> EmbeddingsRequest:
    """Body for an embeddings call; a scalar input becomes a one-item list."""
    items = [input_data] if isinstance(input_data, str) else list(input_data)
    return EmbeddingsRequest(input_data=items, task=normalize_task(task))


def build_webhook(url: str) -> WebhookCreate:
    """Body for registering a webhook."""
    return WebhookCreate(url=url)
