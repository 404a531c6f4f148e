"""Reference classification.

Turns a user-supplied reference (URL, ``owner/repo``, SSH remote, docs URL)
into a routing decision. Everything here is pure: no I/O, no logging side
effects that change results, and the same input always classifies the same
way because callers treat the answer as final.

GitHub detection order:
    1. SSH remote ``git@github.com:owner/repo[.git][/...]``
    2. Bare ``owner/repo`` (owners that collide with API/doc routes rejected)
    3. URL on exactly ``github.com`` or ``www.github.com``

Anything else is parsed as a documentation URL, or classified UNKNOWN when
it does not look like one (e.g. a bare library name).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import unquote, urlsplit

from .models import (
    Classification,
    ParsedDocsReference,
    ParsedGithubReference,
    TargetKind,
)

logger = logging.getLogger(__name__)

GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})
BLOCKED_OWNERS = frozenset({"repos", "rest", "api", "docs"})

_SSH_RE = re.compile(r"^git@github\.com:([^/]+)/([^/]+?)(?:\.git)?(?:/(.*))?$", re.IGNORECASE)
# GitHub owners are alphanumerics and hyphens; no dot keeps "docs.site.com/page" out.
_OWNER_REPO_RE = re.compile(r"^([\w-]+)/([\w.-]+)$")
_GITHUB_URL_FALLBACK_RE = re.compile(
    r"(?:^|//|@)(?:www\.)?github\.com[/:]([\w-]+)/([\w.-]+)", re.IGNORECASE
)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def _decode(reference: str) -> str:
    # %0A and friends must be gone before any pattern sees the string
    return unquote(reference.strip()).strip()


def _strip_git_suffix(repo: str) -> str:
    return repo[:-4] if repo.lower().endswith(".git") else repo


def _build_github(
    owner: str,
    repo: str,
    ref: str | None = None,
    path: str | None = None,
) -> ParsedGithubReference | None:
    repo = _strip_git_suffix(repo)
    if not owner or not repo or repo in {".", ".."}:
        return None
    return ParsedGithubReference(
        owner=owner,
        repo=repo,
        ref=ref or None,
        path=path or None,
        canonical_url=f"https://github.com/{owner}/{repo}",
    )


def _normalize_url(decoded: str) -> str:
    normalized = re.sub(r"^git\+", "", decoded)
    normalized = re.sub(r"^ssh://git@github\.com/", "https://github.com/", normalized, flags=re.IGNORECASE)
    normalized = re.sub(r"^www\.", "https://www.", normalized, flags=re.IGNORECASE)
    if not normalized.lower().startswith(("http://", "https://")):
        normalized = f"https://{normalized}"
    return normalized


def _parse_github_url(decoded: str) -> ParsedGithubReference | None:
    try:
        parsed = urlsplit(_normalize_url(decoded))
        host = parsed.hostname
    except ValueError:
        logger.debug(f"Malformed URL, using regex host check: {decoded!r}")
        match = _GITHUB_URL_FALLBACK_RE.search(decoded)
        return _build_github(match.group(1), match.group(2)) if match else None

    if host not in GITHUB_HOSTS:
        return None

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        return None

    owner, repo, rest = parts[0], parts[1], parts[2:]
    ref: str | None = None
    path: str | None = None

    if rest and rest[0] in ("tree", "blob"):
        ref = rest[1] if len(rest) > 1 else None
        path = "/".join(rest[2:]) or None
    elif rest and rest[0] == "commit":
        ref = rest[1] if len(rest) > 1 else None
    elif rest:
        path = "/".join(rest)

    return _build_github(owner, repo, ref, path)


def parse_github_reference(reference: str) -> ParsedGithubReference | None:
    """Parse a GitHub reference into owner/repo/ref/path.

    Args:
        reference: URL, SSH remote or ``owner/repo`` string

    Returns:
        ParsedGithubReference, or None when the reference is not GitHub
    """
    if not reference or not isinstance(reference, str):
        return None

    decoded = _decode(reference)
    if not decoded:
        return None

    ssh_match = _SSH_RE.match(decoded)
    if ssh_match:
        return _build_github(ssh_match.group(1), ssh_match.group(2))

    bare_match = _OWNER_REPO_RE.match(decoded)
    if bare_match:
        owner, repo = bare_match.group(1), bare_match.group(2)
        if owner.lower() in BLOCKED_OWNERS:
            return None
        return _build_github(owner, repo)

    return _parse_github_url(decoded)


def parse_docs_reference(reference: str) -> ParsedDocsReference | None:
    """Parse a documentation URL into host/section/page.

    A leading ``docs`` path segment is skipped when choosing the section, so
    ``https://site.dev/docs/guides/intro`` gives section ``guides``.

    Returns:
        ParsedDocsReference, or None when the reference has no usable host
    """
    if not reference or not isinstance(reference, str):
        return None

    decoded = _decode(reference)
    if not decoded or any(ch.isspace() for ch in decoded):
        return None

    candidate = decoded if _SCHEME_RE.match(decoded) else f"https://{decoded}"
    try:
        parsed = urlsplit(candidate)
        host = parsed.hostname
    except ValueError:
        return None

    if parsed.scheme.lower() not in ("http", "https"):
        return None
    if not host or ("." not in host and host != "localhost"):
        return None

    segments = [s for s in parsed.path.split("/") if s]
    path = "/" + "/".join(segments) if segments else None
    if segments and segments[0].lower() == "docs":
        segments = segments[1:]

    return ParsedDocsReference(
        host=host,
        section=segments[0] if segments else None,
        page=segments[-1] if segments else None,
        path=path,
    )


def classify(reference: str) -> Classification:
    """Classify a reference as GitHub, documentation, or unknown.

    Never raises; ambiguity resolves to a best guess or UNKNOWN.

    Examples:
        >>> classify("facebook/react").github.full_name
        'facebook/react'
        >>> classify("https://docs.python.org/3/library/re.html").kind
        <TargetKind.DOCS: 'docs'>
    """
    github = parse_github_reference(reference)
    if github is not None:
        return Classification(kind=TargetKind.GITHUB, data=github)

    docs = parse_docs_reference(reference)
    if docs is not None:
        return Classification(kind=TargetKind.DOCS, data=docs)

    return Classification(kind=TargetKind.UNKNOWN)


# =============================================================================
# Conversation routing
# =============================================================================

_GITHUB_URL_MENTION_RE = re.compile(r"github\.com/\S+", re.IGNORECASE)
_GITHUB_SSH_MENTION_RE = re.compile(r"git@github\.com:\S+", re.IGNORECASE)
_GITHUB_WORD_RE = re.compile(r"\bgithub\b", re.IGNORECASE)
_OWNER_REPO_TOKEN_RE = re.compile(r"[\w.-]+/[\w.-]+")


def message_text(message: Mapping[str, Any]) -> str:
    """Extract the text of a chat message (``content`` or text ``parts``)."""
    content = message.get("content")
    if isinstance(content, str):
        return content
    parts = message.get("parts")
    if isinstance(parts, list):
        return "\n".join(
            part["text"]
            for part in parts
            if isinstance(part, Mapping)
            and part.get("type") == "text"
            and isinstance(part.get("text"), str)
        )
    return ""


def mentions_github(text: str) -> bool:
    if _GITHUB_URL_MENTION_RE.search(text) or _GITHUB_SSH_MENTION_RE.search(text):
        return True
    return bool(_GITHUB_WORD_RE.search(text) and _OWNER_REPO_TOKEN_RE.search(text))


def is_github_url(url: str | None) -> bool:
    if not url:
        return False
    return url.lower().startswith("git@github.com:") or "github.com" in url.lower()


def route_conversation(
    messages: Iterable[Mapping[str, Any]],
    chat_url: str | None = None,
) -> TargetKind:
    """Decide whether a conversation is about GitHub or documentation.

    Args:
        messages: Chat messages, oldest first
        chat_url: URL the conversation was anchored to, if any

    Returns:
        TargetKind.GITHUB or TargetKind.DOCS
    """
    if is_github_url(chat_url):
        return TargetKind.GITHUB

    for message in reversed(list(messages)):
        if message.get("role") != "user":
            continue
        text = message_text(message)
        if text and mentions_github(text):
            return TargetKind.GITHUB

    return TargetKind.DOCS
