"""Local input encoding for document and image uploads.

The API accepts document and image content as base64 strings. These helpers
turn file paths into that form and decide which content source an upsert
actually sends. They only touch the local filesystem; no network calls are
made here.
"""

from __future__ import annotations

import asyncio
import base64
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from colivara_client.api.exceptions import (
    ColiVaraFileNotFoundError,
    ColiVaraFileReadError,
    ColiVaraPermissionError,
    MissingDocumentSourceError,
)


if TYPE_CHECKING:
    from collections.abc import Iterable


__all__ = [
    "file_to_base64",
    "read_file_bytes",
    "resolve_document_content",
    "resolve_embedding_image_inputs",
    "resolve_image_input",
]

logger = structlog.get_logger(__name__)


def read_file_bytes(path: str | Path) -> bytes:
    """Read a local file, mapping OS errors onto client exceptions.

    Args:
        path: Path of the file to read.

    Returns:
        The file content.

    Raises:
        ColiVaraFileNotFoundError: If the file does not exist.
        ColiVaraPermissionError: If the file cannot be read.
        ColiVaraFileReadError: For any other I/O failure.
    """
    try:
        return Path(path).read_bytes()
    except FileNotFoundError:
        raise ColiVaraFileNotFoundError(path) from None
    except PermissionError:
        raise ColiVaraPermissionError(path) from None
    except OSError as exc:
        raise ColiVaraFileReadError(path, exc.strerror or str(exc)) from exc


def file_to_base64(path: str | Path) -> str:
    """Read a local file and return its content as a base64 string.

    Args:
        path: Path of the file to encode.

    Returns:
        Standard, padded base64 of the file bytes.

    Raises:
        ColiVaraFileNotFoundError: If the file does not exist.
        ColiVaraPermissionError: If the file cannot be read.
        ColiVaraFileReadError: For any other I/O failure.
    """
    return base64.b64encode(read_file_bytes(path)).decode("ascii")


def resolve_document_content(
    url: str | None = None,
    base64_content: str | None = None,
    path: str | Path | None = None,
) -> str | None:
    """Work out the base64 payload for a document upsert.

    A local ``path`` takes precedence over ``base64_content``. The URL is not
    touched here; it is sent to the server as given.

    Args:
        url: Remote URL of the document, if any.
        base64_content: Inline base64 content, if any.
        path: Local file to read and encode, if any.

    Returns:
        The base64 payload to send, or None when the document is given by URL
        only.

    Raises:
        MissingDocumentSourceError: If neither a URL nor base64 content results.
        ColiVaraFileNotFoundError: If ``path`` does not exist.
        ColiVaraPermissionError: If ``path`` cannot be read.
        ColiVaraFileReadError: For any other I/O failure on ``path``.
    """
    content = base64_content
    if path:
        content = file_to_base64(path)

    if not url and not content:
        raise MissingDocumentSourceError

    return content


def resolve_image_input(item: str) -> str:
    """Encode ``item`` if it names a local file, else return it unchanged.

    Items that are not regular files are assumed to already be base64 data or
    a remote reference. A failing filesystem check counts as "not a file".
    """
    try:
        candidate = Path(item)
        if not candidate.is_file():
            return item
    except (OSError, ValueError) as exc:
        # Long base64 strings can exceed the OS path length limit.
        logger.debug("image_input_not_a_path", error=str(exc))
        return item

    return file_to_base64(candidate)


async def resolve_embedding_image_inputs(items: Iterable[str]) -> list[str]:
    """Resolve each image input independently, preserving order.

    Items are resolved concurrently in worker threads.
    """
    resolved = await asyncio.gather(
        *(asyncio.to_thread(resolve_image_input, item) for item in items),
    )
    return list(resolved)
