"""Lexical search over the index, ranked by summed term frequency."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Protocol

from scry.lexical import tokenize
from scry.metadata import ChunkView, TermHit


@dataclass(frozen=True)
class SearchResult:
    """A matching chunk and its score."""

    chunk: ChunkView
    score: float


class Store(Protocol):
    """What the search engine needs from the index."""

    def term_hits(self, term: str) -> list[TermHit]:
        ...

    def get_chunks_by_ids(self, ids: Iterable[str]) -> list[ChunkView]:
        ...


@dataclass
class SearchEngine:
    """Runs queries against a store."""

    store: Store

    def search(self, query: str, limit: int) -> list[SearchResult]:
        """Return chunks matching the query, best first.

        Ties are broken by file path. A limit of zero or less means no limit.
        Errors from the store propagate unchanged.
        """
        terms = tokenize(query)
        if not terms:
            return []

        scores: defaultdict[str, float] = defaultdict(float)
        for term in terms:
            for hit in self.store.term_hits(term):
                scores[hit.chunk_id] += float(hit.tf)
        if not scores:
            return []

        chunks = self.store.get_chunks_by_ids(list(scores))
        results = sorted(
            (SearchResult(chunk=chunk, score=scores[chunk.id]) for chunk in chunks),
            key=lambda r: (-r.score, r.chunk.file_path),
        )
        if limit > 0:
            return results[:limit]
        return results