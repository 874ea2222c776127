"""Query tokenization, term matching, filtering and ranking of candidates."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from scry.ask.models import Chunk

MIN_TERM_BYTES = 3


def _is_word_char(ch: str) -> bool:
    return ch.isalpha() or ch.isnumeric()


def tokenize_query(query: str) -> list[str]:
    """Split on non-alphanumerics, lowercase, drop short terms and de-duplicate.

    Terms shorter than three bytes in UTF-8 are dropped; order of first
    appearance is kept.
    """
    tokens: list[str] = []
    seen: set[str] = set()
    word: list[str] = []

    def flush() -> None:
        if not word:
            return
        term = "".join(word)
        word.clear()
        if len(term.encode("utf-8")) < MIN_TERM_BYTES or term in seen:
            return
        seen.add(term)
        tokens.append(term)

    for ch in query:
        if _is_word_char(ch):
            word.append(ch.lower())
        else:
            flush()
    flush()
    return tokens


def distinct_term_match_count(terms: Iterable[str], text: str) -> int:
    """Count the distinct non-empty terms found in the text, ignoring case."""
    if not text:
        return 0
    lower = text.lower()
    return len({term for term in terms if term and term in lower})


def has_any_term(text: str, terms: Iterable[str]) -> bool:
    """Tell whether any non-empty term occurs in the text."""
    return any(term and term in text for term in terms)


def filter_by_query_terms(chunks: Sequence[Chunk], terms: Sequence[str]) -> list[Chunk]:
    """Keep the chunks whose text contains at least one query term."""
    if not terms or not chunks:
        return []
    return [chunk for chunk in chunks if has_any_term(chunk.text.lower(), terms)]


def apply_match_preference(chunks: Sequence[Chunk], terms: Sequence[str]) -> list[Chunk]:
    """Prefer chunks matching two or more distinct terms, else those matching one.

    Returned chunks are copies carrying their match count.
    """
    if not chunks or not terms:
        return []
    strong: list[Chunk] = []
    weak: list[Chunk] = []
    for chunk in chunks:
        matches = distinct_term_match_count(terms, chunk.text)
        counted = replace(chunk, match_count=matches)
        if matches >= 2:
            strong.append(counted)
        elif matches >= 1:
            weak.append(counted)
    return strong or weak


def sort_candidates(chunks: list[Chunk]) -> list[Chunk]:
    """Sort in place by score descending, then path and start line ascending."""
    chunks.sort(key=lambda c: (-c.score, c.file_path, c.start_line))
    return chunks