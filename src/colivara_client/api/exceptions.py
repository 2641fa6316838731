"""Custom exceptions for the ColiVara API client."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path

    import httpx


__all__ = [
    "ColiVaraAPIError",
    "ColiVaraError",
    "ColiVaraFileNotFoundError",
    "ColiVaraFileReadError",
    "ColiVaraPermissionError",
    "InvalidTaskError",
    "MissingDocumentSourceError",
]


class ColiVaraError(Exception):
    """Base exception for all ColiVara client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message


class ColiVaraFileNotFoundError(ColiVaraError):
    """Raised when a local file to upload does not exist."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(f"The specified file does not exist: {path}")
        self.path = path


class ColiVaraPermissionError(ColiVaraError):
    """Raised when a local file to upload cannot be read."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(f"No read permission for file: {path}")
        self.path = path


class ColiVaraFileReadError(ColiVaraError):
    """Raised for any other I/O failure while reading a local file.

    Attributes:
        path: The file that could not be read.
        reason: The underlying operating system error message.
    """

    def __init__(self, path: str | Path, reason: str) -> None:
        """Initialize the read error.

        Args:
            path: The file that could not be read.
            reason: The underlying operating system error message.
        """
        super().__init__(f"Error reading file: {reason}")
        self.path = path
        self.reason = reason


class MissingDocumentSourceError(ColiVaraError):
    """Raised when a document upsert has no URL, base64 content or file path."""

    def __init__(
        self,
        message: str = (
            "Either document_url, document_base64, or document_path must be provided."
        ),
    ) -> None:
        super().__init__(message)


class InvalidTaskError(ColiVaraError):
    """Raised for an embedding task that is neither "query" nor "image".

    Attributes:
        task: The rejected task value.
    """

    def __init__(self, task: object) -> None:
        """Initialize the invalid task error.

        Args:
            task: The rejected task value.
        """
        super().__init__(f"Invalid task: {task}. Must be 'query' or 'image'.")
        self.task = task


class ColiVaraAPIError(ColiVaraError):
    """Raised for every failure on the network path.

    Both HTTP error responses and transport failures (connection errors,
    timeouts) surface as this one type. The formatted message keeps the
    ``API Error (<status>): <detail>`` shape, and the structured fields stay
    available for callers that want them.

    Attributes:
        status_code: HTTP status code, or None when no response was received.
        detail: Server-supplied ``detail`` or the transport error message.
        response: The HTTP response that caused this error, if available.
    """

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the API error.

        Args:
            detail: Server-supplied detail or transport error message.
            status_code: HTTP status code, if a response was received.
            response: The HTTP response that caused this error.
        """
        status = "undefined" if status_code is None else str(status_code)
        super().__init__(f"API Error ({status}): {detail}")
        self.detail = detail
        self.status_code = status_code
        self.response = response
