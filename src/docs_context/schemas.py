"""Docs request schema and validation.

Requests arrive as loosely typed mappings from the agent's tool layer. They
are validated against DOCS_REQUEST_SCHEMA with jsonschema, then normalized
into a DocsRequest with defaults applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import jsonschema

from .errors import RequestValidationError

DEFAULT_QUERY = "Documentation overview"
DEFAULT_MAX_CHARS = 6000
DEFAULT_MAX_SECTION_CHARS = 1200
DEFAULT_MAX_SENTENCES = 5

DOCS_REQUEST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "DocsRequest",
    "type": "object",
    "properties": {
        "query": {"type": "string", "minLength": 1},
        "url": {"type": ["string", "null"]},
        "library_name": {"type": ["string", "null"]},
        "library_id": {"type": ["string", "null"]},
        "max_chars": {"type": "integer", "minimum": 500, "maximum": 20000},
        "max_section_chars": {"type": "integer", "minimum": 200, "maximum": 5000},
        "max_sentences": {"type": "integer", "minimum": 2, "maximum": 12},
    },
    "additionalProperties": False,
}

_VALIDATOR = jsonschema.Draft202012Validator(DOCS_REQUEST_SCHEMA)


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


@dataclass(frozen=True)
class DocsRequest:
    """A validated documentation retrieval request.

    Fields:
        query: The user's question or task
        url: Docs page to fall back to when no library resolves
        library_name: Library name for structured lookup (e.g. "react")
        library_id: Library identifier (e.g. "/vercel/next.js")
        max_chars: Cap for the excerpt and sidecar documents
        max_section_chars: Cap for each section snippet
        max_sentences: Sentence budget for the summary
    """
    query: str = DEFAULT_QUERY
    url: str | None = None
    library_name: str | None = None
    library_id: str | None = None
    max_chars: int = DEFAULT_MAX_CHARS
    max_section_chars: int = DEFAULT_MAX_SECTION_CHARS
    max_sentences: int = DEFAULT_MAX_SENTENCES

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocsRequest:
        """Validate a mapping and build a DocsRequest.

        Raises:
            RequestValidationError: With one message per schema violation
        """
        errors = [
            f"{'.'.join(str(p) for p in error.absolute_path) or 'request'}: {error.message}"
            for error in sorted(_VALIDATOR.iter_errors(data), key=lambda e: list(e.absolute_path))
        ]

        url = _optional(data.get("url")) if not errors else None
        if url is not None:
            try:
                parts = urlsplit(url)
                absolute = parts.scheme in ("http", "https") and bool(parts.netloc)
            except ValueError as e:
                errors.append(f"url: {url!r} is malformed ({e})")
            else:
                if not absolute:
                    errors.append(f"url: {url!r} is not an absolute http(s) URL")

        if errors:
            raise RequestValidationError(errors)

        return cls(
            query=data.get("query", DEFAULT_QUERY).strip() or DEFAULT_QUERY,
            url=url,
            library_name=_optional(data.get("library_name")),
            library_id=_optional(data.get("library_id")),
            max_chars=data.get("max_chars", DEFAULT_MAX_CHARS),
            max_section_chars=data.get("max_section_chars", DEFAULT_MAX_SECTION_CHARS),
            max_sentences=data.get("max_sentences", DEFAULT_MAX_SENTENCES),
        )
