"""Unit tests for request body construction."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from colivara_client.api.exceptions import InvalidTaskError
from colivara_client.api.models import (
    EmbeddingTask,
    ExpandField,
    FilterTarget,
    LookupOperator,
    QueryFilter,
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


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


class TestNormalizeTask:
    """Tests for normalize_task."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("query", EmbeddingTask.QUERY),
            ("QUERY", EmbeddingTask.QUERY),
            ("Image", EmbeddingTask.IMAGE),
            (EmbeddingTask.IMAGE, EmbeddingTask.IMAGE),
        ],
    )
    def test_valid(self, value: str, expected: EmbeddingTask) -> None:
        """Test known tasks in any case."""
        assert normalize_task(value) is expected

    @pytest.mark.parametrize("value", ["invalid_task", "", "images"])
    def test_invalid(self, value: str) -> None:
        """Test unknown tasks are rejected."""
        with pytest.raises(InvalidTaskError, match="Must be 'query' or 'image'"):
            normalize_task(value)


class TestNormalizeFilter:
    """Tests for normalize_filter and QueryFilter defaults."""

    def test_defaults(self) -> None:
        """Test target, value and lookup defaults."""
        criterion = normalize_filter({"key": "type"})

        assert criterion.on is FilterTarget.DOCUMENT
        assert criterion.value == ""
        assert criterion.lookup is LookupOperator.KEY_LOOKUP

    def test_none_value_becomes_empty_string(self) -> None:
        """Test an explicit None value is sent as an empty string."""
        criterion = QueryFilter(key="type", value=None)

        assert to_body(criterion)["value"] == ""

    def test_model_passes_through(self) -> None:
        """Test a QueryFilter is returned as is."""
        criterion = QueryFilter(key=["a", "b"], lookup="has_keys")
        assert normalize_filter(criterion) is criterion

    def test_unknown_lookup_is_rejected(self) -> None:
        """Test invalid lookups fail validation."""
        with pytest.raises(ValidationError):
            normalize_filter({"key": "type", "lookup": "startswith"})


class TestExpandParams:
    """Tests for expand_params."""

    def test_none(self) -> None:
        """Test no expansion yields no parameter."""
        assert expand_params(None) == {}
        assert expand_params([]) == {}

    def test_string(self) -> None:
        """Test a string is passed through."""
        assert expand_params("pages") == {"expand": "pages"}

    def test_iterable(self) -> None:
        """Test an iterable is joined with commas."""
        assert expand_params([ExpandField.PAGES, "extra"]) == {
            "expand": "pages,extra",
        }


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


class TestBuilders:
    """Tests for request body builders."""

    def test_collection_create_default_metadata(self) -> None:
        """Test metadata defaults to an empty mapping."""
        assert to_body(build_collection_create("research")) == {
            "name": "research",
            "metadata": {},
        }

    def test_collection_update_only_given_fields(self) -> None:
        """Test None fields are omitted."""
        assert to_body(build_collection_update(metadata={"a": 1})) == {
            "metadata": {"a": 1},
        }

    def test_collection_update_keeps_empty_metadata(self) -> None:
        """Test an explicit empty metadata mapping is sent."""
        assert to_body(build_collection_update(metadata={})) == {"metadata": {}}

    def test_document_upsert_base64(self) -> None:
        """Test an upsert with inline content omits the URL."""
        body = to_body(
            build_document_upsert(
                "doc",
                collection_name="default_collection",
                base64_content="YWI=",
            ),
        )

        assert body == {
            "name": "doc",
            "metadata": {},
            "collection_name": "default_collection",
            "base64": "YWI=",
            "wait": False,
            "use_proxy": False,
        }

    def test_document_update_rename(self) -> None:
        """Test a rename sends the new name and use_proxy."""
        assert to_body(build_document_update(name="renamed")) == {
            "name": "renamed",
            "use_proxy": False,
        }

    def test_search_without_filter(self) -> None:
        """Test query_filter is absent, not null, when not given."""
        body = to_body(build_search("q", collection_name="all", top_k=3))

        assert body == {"query": "q", "collection_name": "all", "top_k": 3}
        assert "query_filter" not in body

    def test_search_rejects_zero_top_k(self) -> None:
        """Test top_k must be positive."""
        with pytest.raises(ValidationError):
            build_search("q", collection_name="all", top_k=0)

    def test_embeddings_scalar_input(self) -> None:
        """Test a scalar input becomes a one-item list."""
        assert to_body(build_embeddings("hello")) == {
            "input_data": ["hello"],
            "task": "query",
        }

    def test_embeddings_list_input(self) -> None:
        """Test a list input keeps its order."""
        body = to_body(build_embeddings(["b", "a"], "image"))
        assert body == {"input_data": ["b", "a"], "task": "image"}

    def test_webhook(self) -> None:
        """Test the webhook body."""
        assert to_body(build_webhook("https://example.com/hook")) == {
            "url": "https://example.com/hook",
        }


class TestBuildersKeepCallerStrings:
    """Tests that builders do not rewrite caller strings."""

    def test_search_query_not_stripped(self) -> None:
        """Test a padded query is kept."""
        body = to_body(build_search("  q ", collection_name="all", top_k=3))
        assert body["query"] == "  q "

    def test_filter_value_not_stripped(self) -> None:
        """Test a padded filter value and key are kept."""
        criterion = normalize_filter({"key": " k ", "value": " padded "})

        assert to_body(criterion) == {
            "on": "document",
            "key": " k ",
            "value": " padded ",
            "lookup": "key_lookup",
        }

    def test_names_not_stripped(self) -> None:
        """Test collection and document names are kept."""
        assert to_body(build_collection_create(" research "))["name"] == " research "
        body = to_body(
            build_document_upsert(
                "report ",
                collection_name=" inbox",
                url="https://example.com/r.pdf",
            ),
        )
        assert body["name"] == "report "
        assert body["collection_name"] == " inbox"
