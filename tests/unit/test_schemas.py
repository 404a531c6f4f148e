"""Unit tests for docs request validation."""

from __future__ import annotations

import pytest

from docs_context.errors import RequestValidationError
from docs_context.schemas import DocsRequest


class TestDocsRequest:
    """Tests for DocsRequest.from_dict."""

    def test_defaults(self) -> None:
        request = DocsRequest.from_dict({})
        assert request.query == "Documentation overview"
        assert request.max_chars == 6000
        assert request.max_section_chars == 1200
        assert request.max_sentences == 5
        assert request.url is None

    def test_strips_and_blanks_to_none(self) -> None:
        request = DocsRequest.from_dict(
            {"query": "  hooks ", "library_name": "  ", "library_id": " /a/b ", "url": None}
        )
        assert request.query == "hooks"
        assert request.library_name is None
        assert request.library_id == "/a/b"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("max_chars", 499),
            ("max_chars", 20001),
            ("max_section_chars", 199),
            ("max_section_chars", 5001),
            ("max_sentences", 1),
            ("max_sentences", 13),
            ("max_sentences", "5"),
            ("query", ""),
        ],
    )
    def test_out_of_bounds(self, field: str, value: object) -> None:
        with pytest.raises(RequestValidationError) as excinfo:
            DocsRequest.from_dict({field: value})
        assert excinfo.value.errors[0].startswith(field)

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(RequestValidationError, match="libraryName"):
            DocsRequest.from_dict({"libraryName": "react"})

    @pytest.mark.parametrize("url", ["docs.example.com", "ftp://example.com/file", "/relative/path"])
    def test_url_must_be_absolute_http(self, url: str) -> None:
        with pytest.raises(RequestValidationError, match="absolute http"):
            DocsRequest.from_dict({"url": url})

    def test_bounds_inclusive(self) -> None:
        request = DocsRequest.from_dict(
            {"max_chars": 500, "max_section_chars": 5000, "max_sentences": 12, "url": "https://x.dev/"}
        )
        assert (request.max_chars, request.max_section_chars, request.max_sentences) == (500, 5000, 12)

    def test_unparseable_url_rejected(self) -> None:
        with pytest.raises(RequestValidationError, match="malformed") as excinfo:
            DocsRequest.from_dict({"url": "http://[::1"})
        assert excinfo.value.errors[0].startswith("url:")
