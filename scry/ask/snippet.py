"""Selection of top evidence and extraction of snippets around query terms."""

from __future__ import annotations

from typing import Sequence

from scry.ask.models import Chunk

ELLIPSIS = "..."


def select_top_evidence(chunks: Sequence[Chunk], n: int) -> list[Chunk]:
    """Return at most the first ``n`` chunks; nothing when ``n`` is not positive."""
    if n <= 0:
        return []
    return list(chunks[:n])


def trim_snippet(text: str, max_chars: int) -> str:
    """Cut text to ``max_chars``, marking the cut with an ellipsis."""
    if len(text) <= max_chars:
        return text.strip()
    return text[:max_chars].strip() + ELLIPSIS


def snippet_around_term(text: str, terms: Sequence[str], max_chars: int) -> str:
    """Return up to ``max_chars`` of text around the first matching term.

    The window starts a third of its width before the match; ellipses mark
    text cut from either end. Without a match the text is trimmed from the start.
    """
    if max_chars <= 0:
        return ""
    lower = text.lower()
    pos = next((idx for term in terms if term and (idx := lower.find(term)) >= 0), -1)
    if pos < 0:
        return trim_snippet(text, max_chars)
    start = min(max(pos - max_chars // 3, 0), len(text))
    end = min(start + max_chars, len(text))
    snippet = text[start:end].strip()
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(text):
        snippet += ELLIPSIS
    return snippet