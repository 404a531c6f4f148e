"""Text extraction utilities shared by both retrieval paths.

Structural heuristics only: regexes over the raw HTML, no DOM. All functions
are pure and operate on ``str`` (code points), never on bytes.
"""

from __future__ import annotations

import re

ELLIPSIS = "…"
TITLE_FALLBACK_CHARS = 80

_DROP_BLOCKS_RE = re.compile(
    r"<(script|style|noscript)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
_BLOCK_CLOSE_RE = re.compile(r"</(?:p|div|section|article|li|h[1-6])\s*>", re.IGNORECASE)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_H1_RE = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")

_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))


def decode_entities(text: str) -> str:
    """Decode the six common HTML entities in a single pass."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs, keeping line breaks as single newlines."""
    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r" ?\n[\s]*", "\n", text)
    return text.strip()


def strip_html(html: str) -> str:
    """Convert HTML to plain text.

    Script, style and noscript blocks are dropped with their content.
    Closing block tags and ``<br>`` become newlines before the remaining
    tags are removed, so ``<p>A</p><p>B</p>`` yields ``"A\\nB"``.
    """
    text = _DROP_BLOCKS_RE.sub(" ", html)
    text = _BLOCK_CLOSE_RE.sub("\n", text)
    text = _BR_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    return normalize_whitespace(decode_entities(text))


def extract_title(html: str, fallback_text: str) -> str:
    """Pick a page title: ``<title>``, then the first ``<h1>``, then text.

    The first match wins even if it is hidden content.
    """
    for pattern in (_TITLE_RE, _H1_RE):
        match = pattern.search(html)
        if match:
            title = strip_html(match.group(1)).replace("\n", " ")
            if title:
                return title
    return fallback_text[:TITLE_FALLBACK_CHARS]


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def summarize(text: str, max_sentences: int) -> str:
    """Extractive summary: the first ``max_sentences`` sentences, in order.

    Sentences end at ``.``, ``!`` or ``?`` followed by whitespace. No scoring
    or reordering is done.
    """
    if max_sentences <= 0:
        return ""
    return " ".join(split_sentences(text)[:max_sentences])


def truncate_snippet(text: str, max_chars: int) -> str:
    """Collapse whitespace and cap ``text`` at ``max_chars`` code points.

    When cut, the result ends with an ellipsis and is still at most
    ``max_chars`` long, so truncating twice changes nothing.
    """
    collapsed = re.sub(r"\s+", " ", text).strip()
    if len(collapsed) <= max_chars:
        return collapsed
    if max_chars <= 0:
        return ""
    return collapsed[: max_chars - 1].rstrip() + ELLIPSIS
