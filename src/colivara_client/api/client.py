"""Async HTTP client for the ColiVara API."""

from __future__ import annotations

import asyncio
import contextlib
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn, Self, TypeVar
from urllib.parse import quote

import httpx
import structlog
from pydantic import TypeAdapter

from colivara_client.api.encoding import (
    file_to_base64,
    read_file_bytes,
    resolve_document_content,
    resolve_embedding_image_inputs,
)
from colivara_client.api.exceptions import ColiVaraAPIError
from colivara_client.api.models import (
    Collection,
    Document,
    EmbeddingsResponse,
    EmbeddingTask,
    ExpandField,
    FileImage,
    FilterTarget,
    QueryFilter,
    SearchResponse,
    WebhookRegistration,
)
from colivara_client.api.payloads import (
    build_collection_create,
    build_collection_update,
    build_document_update,
    build_document_upsert,
    build_embeddings,
    build_search,
    build_webhook,
    expand_params,
    normalize_filter,
    normalize_task,
    to_body,
)
from colivara_client.api.webhooks import validate_webhook
from colivara_client.config import (
    DEFAULT_BASE_URL,
    ClientDefaults,
    MissingApiKeyError,
    Settings,
    get_settings,
)
from colivara_client.observability import call_context


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping


__all__ = ["ColiVaraClient"]

T = TypeVar("T")

_COLLECTION_LIST = TypeAdapter(list[Collection])
_DOCUMENT_LIST = TypeAdapter(list[Document])
_FILE_IMAGE_LIST = TypeAdapter(list[FileImage])
_JSON_OBJECT = TypeAdapter(dict[str, Any])


def _segment(value: str) -> str:
    """Percent-encode a name for use as a single URL path segment."""
    return quote(value, safe="")


class ColiVaraClient:
    """Async client for the ColiVara document search API.

    Every operation issues at most one HTTP request and never retries. Any
    failure on the network path surfaces as ``ColiVaraAPIError``; client-side
    validation errors (missing document source, unreadable files, unknown
    embedding task) are raised before a request is made.

    Example:
        ```python
        async with ColiVaraClient(api_key="your-api-key") as client:
            await client.create_collection("research", metadata={"year": 2024})
            await client.upsert_document(
                "paper.pdf",
                collection_name="research",
                document_path="./paper.pdf",
                wait=True,
            )
            results = await client.search("attention heads", top_k=5)
            for result in results.results:
                print(result.document_name, result.page_number)
        ```

    Attributes:
        base_url: The base URL of the ColiVara API.
        timeout: Default timeout for requests.
        defaults: Default collection names and search depth.
    """

    DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
    UPLOAD_TIMEOUT = httpx.Timeout(300.0, connect=10.0)

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: httpx.Timeout | None = None,
        defaults: ClientDefaults | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the ColiVara client.

        Args:
            api_key: API key, sent as a bearer token on every request.
            base_url: Base URL of the API (default: production host).
            timeout: Optional custom timeout configuration.
            defaults: Default collection names and top_k.
            transport: Optional custom transport for testing or advanced config.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.defaults = defaults or ClientDefaults()
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._logger = structlog.get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create a client from loaded settings.

        Args:
            settings: Settings to use; the cached settings when None.
            transport: Optional custom transport.

        Raises:
            MissingApiKeyError: If the settings carry no API key.
        """
        settings = settings or get_settings()
        if not settings.api.api_key:
            raise MissingApiKeyError

        return cls(
            settings.api.api_key,
            settings.api.base_url,
            timeout=httpx.Timeout(
                settings.api.timeout,
                connect=settings.api.connect_timeout,
            ),
            defaults=settings.defaults,
            transport=transport,
        )

    @property
    def _headers(self) -> dict[str, str]:
        """Default headers for API requests."""
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }

    async def __aenter__(self) -> Self:
        """Enter async context and create HTTP client."""
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context and close HTTP client."""
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure the HTTP client is initialized."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Core Request Method and Error Normalization
    # -------------------------------------------------------------------------

    async def _request(  # noqa: PLR0913
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,  # noqa: ANN401
        files: Mapping[str, Any] | None = None,
        timeout: httpx.Timeout | None = None,  # noqa: ASYNC109
    ) -> httpx.Response:
        """Execute a single HTTP request.

        Args:
            operation: Name of the client operation, bound to log lines.
            method: HTTP method (GET, POST, PATCH, DELETE).
            path: API endpoint path (e.g. "/v1/collections/").
            params: Query parameters.
            json: JSON body data.
            files: Multipart file uploads.
            timeout: Override default timeout.

        Returns:
            The successful HTTP response.

        Raises:
            ColiVaraAPIError: For error responses and transport failures.
        """
        client = await self._ensure_client()

        with call_context(operation):
            log = self._logger.bind(method=method, path=path)
            try:
                response = await client.request(
                    method,
                    path,
                    params=dict(params) if params else None,
                    json=json,
                    files=files,
                    timeout=timeout or self.timeout,
                )
                log.debug(
                    "api_response",
                    status_code=response.status_code,
                    elapsed_ms=response.elapsed.total_seconds() * 1000,
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                self._raise_api_error(exc, log)

        return response

    def _raise_api_error(
        self,
        exc: httpx.HTTPError,
        log: structlog.typing.FilteringBoundLogger,
    ) -> NoReturn:
        """Convert an httpx error into ``ColiVaraAPIError`` and raise it.

        The message uses the ``detail`` field of a JSON error body when there
        is one and falls back to the transport message otherwise. Errors
        without a response (connection failures, timeouts) carry no status.
        """
        response: httpx.Response | None = None
        status_code: int | None = None
        detail = str(exc)

        if isinstance(exc, httpx.HTTPStatusError):
            response = exc.response
            status_code = response.status_code
            body: Any = None
            with contextlib.suppress(ValueError):
                body = response.json()
            if isinstance(body, dict) and "detail" in body:
                detail = str(body["detail"])

        log.warning(
            "api_error",
            status_code=status_code,
            error_type=type(exc).__name__,
            detail=detail,
        )
        raise ColiVaraAPIError(
            detail,
            status_code=status_code,
            response=response,
        ) from exc

    def _decode(
        self,
        operation: str,
        response: httpx.Response,
        parse: Callable[[Any], T],
    ) -> T:
        """Decode a successful response body with ``parse``.

        A body that is not JSON or does not match the expected shape raises
        ``ColiVaraAPIError`` with the response status.
        """
        try:
            return parse(response.json())
        except ValueError as exc:
            # Covers json.JSONDecodeError and pydantic.ValidationError
            detail = f"Invalid response body: {exc}"
            self._logger.warning(
                "api_invalid_response",
                operation=operation,
                status_code=response.status_code,
                error_type=type(exc).__name__,
            )
            raise ColiVaraAPIError(
                detail,
                status_code=response.status_code,
                response=response,
            ) from exc

    # -------------------------------------------------------------------------
    # Collection Operations
    # -------------------------------------------------------------------------

    async def create_collection(
        self,
        name: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> Collection:
        """Create a new collection.

        Args:
            name: Collection name, unique per account.
            metadata: Optional metadata (defaults to an empty mapping).

        Returns:
            The created collection.
        """
        body = build_collection_create(name, metadata)
        response = await self._request(
            "create_collection",
            "POST",
            "/v1/collections/",
            json=to_body(body),
        )
        return self._decode("create_collection", response, Collection.model_validate)

    async def get_collection(self, collection_name: str) -> Collection:
        """Get a collection by name."""
        response = await self._request(
            "get_collection",
            "GET",
            f"/v1/collections/{_segment(collection_name)}/",
        )
        return self._decode("get_collection", response, Collection.model_validate)

    async def list_collections(self) -> list[Collection]:
        """List all collections of the user, in server order."""
        response = await self._request(
            "list_collections",
            "GET",
            "/v1/collections/",
        )
        return self._decode(
            "list_collections",
            response,
            _COLLECTION_LIST.validate_python,
        )

    async def partial_update_collection(
        self,
        collection_name: str,
        *,
        name: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> Collection:
        """Partially update a collection (PATCH).

        Args:
            collection_name: Current name of the collection.
            name: New name, if renaming.
            metadata: Replacement metadata, if changing.

        Returns:
            The updated collection.
        """
        body = build_collection_update(name=name, metadata=metadata)
        response = await self._request(
            "partial_update_collection",
            "PATCH",
            f"/v1/collections/{_segment(collection_name)}/",
            json=to_body(body),
        )
        return self._decode(
            "partial_update_collection",
            response,
            Collection.model_validate,
        )

    async def delete_collection(self, collection_name: str) -> None:
        """Delete a collection and its documents."""
        await self._request(
            "delete_collection",
            "DELETE",
            f"/v1/collections/{_segment(collection_name)}/",
        )

    # -------------------------------------------------------------------------
    # Document Operations
    # -------------------------------------------------------------------------

    async def upsert_document(  # noqa: PLR0913
        self,
        name: str,
        *,
        metadata: Mapping[str, Any] | None = None,
        collection_name: str | None = None,
        document_url: str | None = None,
        document_base64: str | None = None,
        document_path: str | Path | None = None,
        wait: bool = False,
        use_proxy: bool = False,
    ) -> Document:
        """Create or replace a document in a collection.

        Exactly one content source should be given. A local ``document_path``
        is read and base64-encoded before the request and takes precedence
        over ``document_base64``.

        Args:
            name: Document name; together with the collection it keys the upsert.
            metadata: Document metadata (defaults to an empty mapping).
            collection_name: Target collection (default: "default_collection").
            document_url: Remote URL the server downloads the document from.
            document_base64: Inline base64 document content.
            document_path: Local file to upload.
            wait: Ask the server to process the document before responding.
            use_proxy: Ask the server to download ``document_url`` via a proxy.

        Returns:
            The created or updated document.

        Raises:
            MissingDocumentSourceError: If no content source is usable.
            ColiVaraFileNotFoundError: If ``document_path`` does not exist.
            ColiVaraPermissionError: If ``document_path`` cannot be read.
            ColiVaraFileReadError: For other errors reading ``document_path``.
            ColiVaraAPIError: If the request fails.
        """
        content = await asyncio.to_thread(
            resolve_document_content,
            document_url,
            document_base64,
            document_path,
        )
        body = build_document_upsert(
            name,
            collection_name=collection_name or self.defaults.collection_name,
            metadata=metadata,
            url=document_url,
            base64_content=content,
            wait=wait,
            use_proxy=use_proxy,
        )
        response = await self._request(
            "upsert_document",
            "POST",
            "/v1/documents/upsert-document/",
            json=to_body(body),
        )
        return self._decode("upsert_document", response, Document.model_validate)

    async def get_document(
        self,
        document_name: str,
        *,
        collection_name: str | None = None,
        expand: str | Iterable[ExpandField | str] | None = None,
    ) -> Document:
        """Get a document by name.

        Args:
            document_name: Name of the document.
            collection_name: Collection holding it (default: "default_collection").
            expand: Fields to expand; "pages" includes the document's pages.

        Returns:
            The document.
        """
        params = {
            "collection_name": collection_name or self.defaults.collection_name,
            **expand_params(expand),
        }
        response = await self._request(
            "get_document",
            "GET",
            f"/v1/documents/{_segment(document_name)}/",
            params=params,
        )
        return self._decode("get_document", response, Document.model_validate)

    async def list_documents(
        self,
        *,
        collection_name: str | None = None,
        expand: str | Iterable[ExpandField | str] | None = None,
    ) -> list[Document]:
        """List the documents of a collection.

        Args:
            collection_name: Collection to list (default: "default_collection");
                "all" lists documents across every collection.
            expand: Fields to expand; "pages" includes each document's pages.

        Returns:
            Documents in server order.
        """
        params = {
            "collection_name": collection_name or self.defaults.collection_name,
            **expand_params(expand),
        }
        response = await self._request(
            "list_documents",
            "GET",
            "/v1/documents/",
            params=params,
        )
        return self._decode("list_documents", response, _DOCUMENT_LIST.validate_python)

    async def partial_update_document(  # noqa: PLR0913
        self,
        document_name: str,
        *,
        name: str | None = None,
        metadata: Mapping[str, Any] | None = None,
        collection_name: str | None = None,
        document_url: str | None = None,
        document_base64: str | None = None,
        use_proxy: bool = False,
    ) -> Document:
        """Partially update a document (PATCH).

        Only the given fields are sent. Passing ``collection_name`` moves the
        document to that collection.

        Returns:
            The updated document.
        """
        body = build_document_update(
            name=name,
            metadata=metadata,
            collection_name=collection_name,
            url=document_url,
            base64_content=document_base64,
            use_proxy=use_proxy,
        )
        response = await self._request(
            "partial_update_document",
            "PATCH",
            f"/v1/documents/{_segment(document_name)}/",
            json=to_body(body),
        )
        return self._decode(
            "partial_update_document",
            response,
            Document.model_validate,
        )

    async def delete_document(
        self,
        document_name: str,
        *,
        collection_name: str | None = None,
    ) -> None:
        """Delete a document by name."""
        await self._request(
            "delete_document",
            "DELETE",
            f"/v1/documents/delete-document/{_segment(document_name)}/",
            params={
                "collection_name": collection_name or self.defaults.collection_name,
            },
        )

    # -------------------------------------------------------------------------
    # Search, Filter and Embeddings
    # -------------------------------------------------------------------------

    async def search(
        self,
        query: str,
        *,
        collection_name: str | None = None,
        top_k: int | None = None,
        query_filter: QueryFilter | Mapping[str, Any] | None = None,
    ) -> SearchResponse:
        """Search pages by a text query.

        Args:
            query: The search query.
            collection_name: Collection to search (default: "all").
            top_k: Number of results (default: 3).
            query_filter: Optional metadata filter, as a QueryFilter or
                mapping with "on", "key", "value" and "lookup".

        Returns:
            Results in server order (by descending relevance).
        """
        body = build_search(
            query,
            collection_name=collection_name or self.defaults.search_collection_name,
            top_k=top_k if top_k is not None else self.defaults.top_k,
            query_filter=query_filter,
        )
        response = await self._request(
            "search",
            "POST",
            "/v1/search/",
            json=to_body(body),
        )
        return self._decode("search", response, SearchResponse.model_validate)

    async def filter(
        self,
        query_filter: QueryFilter | Mapping[str, Any],
        *,
        expand: str | Iterable[ExpandField | str] | None = None,
    ) -> list[Document] | list[Collection]:
        """Find documents or collections whose metadata match a filter.

        Args:
            query_filter: The filter; its ``on`` field selects whether
                documents or collections are returned.
            expand: Fields to expand on returned documents ("pages").

        Returns:
            Matching documents or collections.
        """
        criterion = normalize_filter(query_filter)
        response = await self._request(
            "filter",
            "POST",
            "/v1/filter/",
            params=expand_params(expand),
            json=to_body(criterion),
        )
        if criterion.on == FilterTarget.COLLECTION:
            return self._decode("filter", response, _COLLECTION_LIST.validate_python)
        return self._decode("filter", response, _DOCUMENT_LIST.validate_python)

    async def create_embedding(
        self,
        input_data: str | Iterable[str],
        task: EmbeddingTask | str = EmbeddingTask.QUERY,
    ) -> EmbeddingsResponse:
        """Create embeddings for text queries or images.

        Args:
            input_data: One input or a sequence of inputs. For the image task
                each item may be a local file path (read and encoded), a
                base64 string or a URL.
            task: "query" or "image", as an EmbeddingTask or string.

        Returns:
            The embeddings response.

        Raises:
            InvalidTaskError: If ``task`` is not a known task.
        """
        resolved_task = normalize_task(task)
        items = [input_data] if isinstance(input_data, str) else list(input_data)
        if resolved_task is EmbeddingTask.IMAGE:
            items = await resolve_embedding_image_inputs(items)

        body = build_embeddings(items, resolved_task)
        response = await self._request(
            "create_embedding",
            "POST",
            "/v1/embeddings/",
            json=to_body(body),
        )
        return self._decode(
            "create_embedding",
            response,
            EmbeddingsResponse.model_validate,
        )

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    async def add_webhook(self, url: str) -> WebhookRegistration:
        """Register a webhook endpoint.

        The returned ``webhook_secret`` is needed later to validate incoming
        calls; the client does not store it.
        """
        response = await self._request(
            "add_webhook",
            "POST",
            "/v1/webhook/",
            json=to_body(build_webhook(url)),
        )
        return self._decode("add_webhook", response, WebhookRegistration.model_validate)

    def validate_webhook(
        self,
        webhook_secret: str,
        payload: str | bytes,
        headers: Mapping[str, str],
    ) -> bool:
        """Validate an incoming webhook call. Never raises."""
        return validate_webhook(webhook_secret, payload, headers)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def file_to_base64(self, path: str | Path) -> str:
        """Read a local file and return its base64 encoding."""
        return file_to_base64(path)

    async def file_to_img_base64(self, path: str | Path) -> list[FileImage]:
        """Convert a local file into page images using the helper endpoint.

        The file is uploaded as multipart form data in the ``file`` field.

        Args:
            path: Local file to convert.

        Returns:
            One image per page, as base64.
        """
        content = await asyncio.to_thread(read_file_bytes, path)
        filename = Path(path).name
        mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        response = await self._request(
            "file_to_img_base64",
            "POST",
            "/v1/helpers/file-to-imgbase64/",
            files={"file": (filename, content, mime_type)},
            timeout=self.UPLOAD_TIMEOUT,
        )
        return self._decode(
            "file_to_img_base64",
            response,
            _FILE_IMAGE_LIST.validate_python,
        )

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    async def check_health(self) -> dict[str, Any]:
        """Check that the API is reachable.

        Returns:
            The health endpoint body.

        Raises:
            ColiVaraAPIError: If the API is unreachable or unhealthy, or the
                body is not a JSON object.
        """
        response = await self._request("check_health", "GET", "/v1/health/")
        return self._decode("check_health", response, _JSON_OBJECT.validate_python)
