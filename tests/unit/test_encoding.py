"""Unit tests for local input encoding."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING

import pytest

from colivara_client.api.encoding import (
    file_to_base64,
    read_file_bytes,
    resolve_document_content,
    resolve_embedding_image_inputs,
    resolve_image_input,
)
from colivara_client.api.exceptions import (
    ColiVaraFileNotFoundError,
    ColiVaraFileReadError,
    ColiVaraPermissionError,
    MissingDocumentSourceError,
)


if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# File Reading
# ---------------------------------------------------------------------------


class TestFileToBase64:
    """Tests for file_to_base64 and read_file_bytes."""

    def test_encodes_file(self, tmp_path: Path) -> None:
        """Test file bytes are base64 encoded with padding."""
        path = tmp_path / "doc.bin"
        path.write_bytes(b"ab")

        assert file_to_base64(path) == "YWI="

    def test_accepts_string_path(self, tmp_path: Path) -> None:
        """Test a string path works the same as a Path."""
        path = tmp_path / "doc.txt"
        path.write_bytes(b"hello")

        assert base64.b64decode(file_to_base64(str(path))) == b"hello"

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file raises with the path in the message."""
        missing = tmp_path / "nope.pdf"

        with pytest.raises(ColiVaraFileNotFoundError) as exc_info:
            file_to_base64(missing)

        assert str(exc_info.value) == f"The specified file does not exist: {missing}"
        assert exc_info.value.path == missing

    def test_permission_denied(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test an unreadable file raises a permission error."""
        path = tmp_path / "secret.pdf"
        path.write_bytes(b"x")

        def deny(self: Path) -> bytes:
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr("pathlib.Path.read_bytes", deny)

        with pytest.raises(ColiVaraPermissionError) as exc_info:
            read_file_bytes(path)

        assert str(exc_info.value) == f"No read permission for file: {path}"

    def test_directory_is_read_error(self, tmp_path: Path) -> None:
        """Test other OS errors are reported as read errors."""
        with pytest.raises(ColiVaraFileReadError) as exc_info:
            read_file_bytes(tmp_path)

        assert str(exc_info.value).startswith("Error reading file: ")
        assert exc_info.value.reason


# ---------------------------------------------------------------------------
# Document Content
# ---------------------------------------------------------------------------


class TestResolveDocumentContent:
    """Tests for resolve_document_content."""

    def test_url_only(self) -> None:
        """Test a URL alone needs no content."""
        assert resolve_document_content(url="https://example.com/a.pdf") is None

    def test_base64_only(self) -> None:
        """Test inline base64 is passed through."""
        assert resolve_document_content(base64_content="YWI=") == "YWI="

    def test_path_wins_over_base64(self, tmp_path: Path) -> None:
        """Test file content replaces inline base64."""
        path = tmp_path / "a.pdf"
        path.write_bytes(b"ab")

        assert resolve_document_content(base64_content="other", path=path) == "YWI="

    def test_no_source(self) -> None:
        """Test that no source at all is rejected."""
        with pytest.raises(MissingDocumentSourceError) as exc_info:
            resolve_document_content()

        assert str(exc_info.value) == (
            "Either document_url, document_base64, or document_path must be provided."
        )

    def test_empty_strings_are_no_source(self) -> None:
        """Test empty strings do not count as a source."""
        with pytest.raises(MissingDocumentSourceError):
            resolve_document_content(url="", base64_content="")


# ---------------------------------------------------------------------------
# Image Inputs
# ---------------------------------------------------------------------------


class TestResolveImageInputs:
    """Tests for embedding image input resolution."""

    def test_existing_file_is_encoded(self, tmp_path: Path) -> None:
        """Test a path to a file becomes its base64 content."""
        path = tmp_path / "img.png"
        path.write_bytes(b"ab")

        assert resolve_image_input(str(path)) == "YWI="

    def test_url_passes_through(self) -> None:
        """Test URLs are not treated as files."""
        url = "https://example.com/img.png"
        assert resolve_image_input(url) == url

    def test_very_long_base64_passes_through(self) -> None:
        """Test inputs too long to be a path are returned unchanged."""
        data = "QUJD" * 5000
        assert resolve_image_input(data) == data

    def test_null_byte_passes_through(self) -> None:
        """Test inputs that are invalid as paths are returned unchanged."""
        assert resolve_image_input("a\x00b") == "a\x00b"

    async def test_order_is_preserved(self, tmp_path: Path) -> None:
        """Test mixed inputs keep their positions."""
        first = tmp_path / "1.png"
        first.write_bytes(b"one")
        third = tmp_path / "3.png"
        third.write_bytes(b"three")

        result = await resolve_embedding_image_inputs(
            [str(first), "aW5saW5l", str(third)],
        )

        assert result == [
            base64.b64encode(b"one").decode(),
            "aW5saW5l",
            base64.b64encode(b"three").decode(),
        ]

    async def test_empty_input(self) -> None:
        """Test an empty list resolves to an empty list."""
        assert await resolve_embedding_image_inputs([]) == []
