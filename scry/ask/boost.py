"""Score adjustments for candidates based on query terms and file paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, Sequence

from scry.ask.models import Chunk

_SCAN_TERMS = frozenset({"scan", "ignore", "gitignore", "exclude", "pattern"})


@dataclass(frozen=True)
class BoostRule:
    """Adds ``bonus`` to chunks under ``paths`` when a rule term is queried.

    An empty ``terms`` list applies the rule to every query.
    """

    terms: tuple[str, ...] = field(default_factory=tuple)
    paths: tuple[str, ...] = field(default_factory=tuple)
    bonus: float = 0.0


@dataclass(frozen=True)
class WhitelistRule:
    """Adds ``boost`` to chunks under ``paths`` when a rule term is queried."""

    terms: tuple[str, ...] = field(default_factory=tuple)
    paths: tuple[str, ...] = field(default_factory=tuple)
    boost: float = 0.0


def default_boost_rules() -> list[BoostRule]:
    """Penalise tool internals and promote scanning code for scan queries."""
    return [
        BoostRule(terms=(), paths=("internal/query/ask/", "cmd/"), bonus=-2.0),
        BoostRule(
            terms=("ignore", "scan", "gitignore", "pattern", "exclude"),
            paths=("pkg/ignore/", "pkg/scan/"),
            bonus=2.0,
        ),
    ]


def default_whitelist_rules() -> list[WhitelistRule]:
    """Softly promote scanning code for scan-related queries."""
    return [
        WhitelistRule(
            terms=("scan", "ignore", "gitignore", "exclude", "pattern"),
            paths=("pkg/scan/", "pkg/ignore/"),
            boost=1.5,
        )
    ]


def terms_match(rule_terms: Sequence[str], term_set: AbstractSet[str]) -> bool:
    """True when the rule has no terms or any of them was queried."""
    if not rule_terms:
        return True
    return any(term in term_set for term in rule_terms)


def path_match(prefixes: Iterable[str], path: str) -> bool:
    """True when the path starts with any prefix."""
    return any(path.startswith(prefix) for prefix in prefixes)


def _adjust(chunks: list[Chunk], terms: Sequence[str], rules: Sequence[tuple]) -> list[Chunk]:
    if not chunks or not terms or not rules:
        return chunks
    term_set = set(terms)
    for chunk in chunks:
        for rule_terms, paths, amount in rules:
            if terms_match(rule_terms, term_set) and path_match(paths, chunk.file_path):
                chunk.score += amount
    return chunks


def apply_boosts(chunks: list[Chunk], terms: Sequence[str], rules: Sequence[BoostRule]) -> list[Chunk]:
    """Add rule bonuses to matching chunks in place and return the list."""
    return _adjust(chunks, terms, [(r.terms, r.paths, r.bonus) for r in rules])


def apply_whitelist_promotion(
    chunks: list[Chunk], terms: Sequence[str], rules: Sequence[WhitelistRule]
) -> list[Chunk]:
    """Add whitelist boosts to matching chunks in place and return the list."""
    return _adjust(chunks, terms, [(r.terms, r.paths, r.boost) for r in rules])


def is_scan_related(terms: Iterable[str]) -> bool:
    """Tell whether any term concerns scanning or ignore rules."""
    return any(term.lower() in _SCAN_TERMS for term in terms)