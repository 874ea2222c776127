"""Term tokenization and an in-memory inverted index."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from itertools import groupby


def _is_word_char(ch: str) -> bool:
    return ch.isalpha() or ch.isnumeric()


def tokenize(text: str) -> list[str]:
    """Lowercase, split on non-alphanumerics and drop terms under two bytes."""
    words = ("".join(run) for keep, run in groupby(text.lower(), key=_is_word_char) if keep)
    return [word for word in words if len(word.encode("utf-8")) >= 2]


@dataclass(frozen=True)
class Posting:
    """Occurrences of one term in one chunk."""

    term: str
    chunk_id: str
    tf: int


@dataclass
class InvertedIndex:
    """Maps each term to the postings that mention it."""

    postings: defaultdict[str, list[Posting]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def add(self, chunk_id: str, text: str) -> list[Posting]:
        """Index a chunk's text and return the postings created for it."""
        created = [
            Posting(term=term, chunk_id=chunk_id, tf=tf)
            for term, tf in Counter(tokenize(text)).items()
        ]
        for posting in created:
            self.postings[posting.term].append(posting)
        return created