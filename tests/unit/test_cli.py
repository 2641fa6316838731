"""Unit tests for the command line interface."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest
from typer.testing import CliRunner

from colivara_client import __version__
from colivara_client.cli import app


if TYPE_CHECKING:
    from pathlib import Path

    import respx


BASE_URL = "https://api.colivara.test"

runner = CliRunner()


@pytest.fixture
def api_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the CLI at the mocked API."""
    monkeypatch.setenv("COLIVARA_API_KEY", "cli-key")
    monkeypatch.setenv("COLIVARA_API__BASE_URL", BASE_URL)


# ---------------------------------------------------------------------------
# Global Options
# ---------------------------------------------------------------------------


class TestGlobalOptions:
    """Tests for the app callback options."""

    def test_version(self) -> None:
        """Test --version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_verbose_and_quiet_conflict(self, api_env: None) -> None:
        """Test --verbose and --quiet cannot be combined."""
        result = runner.invoke(app, ["--verbose", "--quiet", "health"])

        assert result.exit_code == 1
        assert "mutually exclusive" in result.output

    def test_missing_config_file(self, tmp_path: Path) -> None:
        """Test an explicit missing config file is an error."""
        result = runner.invoke(
            app,
            ["--config", str(tmp_path / "missing.yaml"), "health"],
        )

        assert result.exit_code == 1
        assert "Configuration file not found" in result.output

    def test_missing_api_key(self) -> None:
        """Test commands fail cleanly without an API key."""
        result = runner.invoke(app, ["--quiet", "health"])

        assert result.exit_code == 1
        assert "No ColiVara API key configured" in result.output


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestCommands:
    """Tests for the individual commands."""

    @pytest.mark.respx(base_url=BASE_URL)
    def test_health(self, api_env: None, respx_mock: respx.MockRouter) -> None:
        """Test health prints the status body."""
        route = respx_mock.get("/v1/health/").mock(
            return_value=httpx.Response(200, json={"status": "healthy"}),
        )

        result = runner.invoke(app, ["--quiet", "health"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"status": "healthy"}
        assert route.calls.last.request.headers["Authorization"] == "Bearer cli-key"

    @pytest.mark.respx(base_url=BASE_URL)
    def test_health_api_error(
        self,
        api_env: None,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test API errors are printed and exit with status 1."""
        respx_mock.get("/v1/health/").mock(
            return_value=httpx.Response(401, json={"detail": "Invalid token."}),
        )

        result = runner.invoke(app, ["--quiet", "health"])

        assert result.exit_code == 1
        assert "API Error (401): Invalid token." in result.output

    @pytest.mark.respx(base_url=BASE_URL)
    def test_collections(self, api_env: None, respx_mock: respx.MockRouter) -> None:
        """Test collections are printed as JSON."""
        respx_mock.get("/v1/collections/").mock(
            return_value=httpx.Response(
                200,
                json=[{"id": 1, "name": "research", "metadata": {}, "num_documents": 2}],
            ),
        )

        result = runner.invoke(app, ["--quiet", "collections"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)[0]["name"] == "research"

    @pytest.mark.respx(base_url=BASE_URL)
    def test_documents_with_pages(
        self,
        api_env: None,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test --collection and --pages become query parameters."""
        route = respx_mock.get("/v1/documents/").mock(
            return_value=httpx.Response(200, json=[]),
        )

        result = runner.invoke(
            app,
            ["--quiet", "documents", "--collection", "all", "--pages"],
        )

        assert result.exit_code == 0
        params = route.calls.last.request.url.params
        assert params["collection_name"] == "all"
        assert params["expand"] == "pages"

    @pytest.mark.respx(base_url=BASE_URL)
    def test_upsert_from_path(
        self,
        api_env: None,
        respx_mock: respx.MockRouter,
        tmp_path: Path,
    ) -> None:
        """Test upsert reads the file and sends the wait flag."""
        pdf = tmp_path / "report.pdf"
        pdf.write_bytes(b"ab")
        route = respx_mock.post("/v1/documents/upsert-document/").mock(
            return_value=httpx.Response(
                201,
                json={
                    "id": 3,
                    "name": "report",
                    "metadata": {},
                    "num_pages": 1,
                    "collection_name": "research",
                },
            ),
        )

        result = runner.invoke(
            app,
            [
                "--quiet",
                "upsert",
                "report",
                "--path",
                str(pdf),
                "--collection",
                "research",
                "--wait",
            ],
        )

        assert result.exit_code == 0
        body = json.loads(route.calls.last.request.content)
        assert body["base64"] == "YWI="
        assert body["collection_name"] == "research"
        assert body["wait"] is True

    def test_upsert_without_source(self, api_env: None) -> None:
        """Test upsert without any content source fails before a request."""
        result = runner.invoke(app, ["--quiet", "upsert", "report"])

        assert result.exit_code == 1
        assert "Either document_url, document_base64, or document_path" in (
            result.output
        )

    @pytest.mark.respx(base_url=BASE_URL)
    def test_search(self, api_env: None, respx_mock: respx.MockRouter) -> None:
        """Test search sends the query and top_k."""
        route = respx_mock.post("/v1/search/").mock(
            return_value=httpx.Response(200, json={"query": "revenue", "results": []}),
        )

        result = runner.invoke(app, ["--quiet", "search", "revenue", "-k", "5"])

        assert result.exit_code == 0
        assert json.loads(route.calls.last.request.content) == {
            "query": "revenue",
            "collection_name": "all",
            "top_k": 5,
        }
        assert json.loads(result.stdout) == {"query": "revenue", "results": []}
