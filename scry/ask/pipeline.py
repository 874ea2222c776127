"""Turning retrieved chunks into evidence and deciding whether to answer."""

from __future__ import annotations

from typing import Sequence

from scry.ask.boost import (
    apply_boosts,
    apply_whitelist_promotion,
    default_boost_rules,
    default_whitelist_rules,
)
from scry.ask.models import AskOptions, Chunk, Decision, Evidence, EvidenceOptions
from scry.ask.snippet import select_top_evidence, snippet_around_term
from scry.ask.terms import apply_match_preference, filter_by_query_terms, sort_candidates

REASON_NO_EVIDENCE = "no_evidence"
REASON_LOW_SCORE = "low_score"


def build_evidence(
    chunks: Sequence[Chunk], terms: Sequence[str], options: EvidenceOptions
) -> list[Evidence]:
    """Filter, prefer, boost and rank chunks, then snippet the best of them."""
    candidates = apply_match_preference(filter_by_query_terms(chunks, terms), terms)
    candidates = apply_boosts(candidates, terms, default_boost_rules())
    candidates = apply_whitelist_promotion(candidates, terms, default_whitelist_rules())
    ranked = sort_candidates(candidates)
    return [
        Evidence(chunk=chunk, snippet=snippet_around_term(chunk.text, terms, options.snippet_chars))
        for chunk in select_top_evidence(ranked, options.max_evidence)
    ]


def total_score(evidence: Sequence[Evidence]) -> float:
    """Sum the scores of the evidence chunks."""
    return sum((e.chunk.score for e in evidence), 0.0)


def decide(chunks: Sequence[Chunk], terms: Sequence[str], options: AskOptions) -> Decision:
    """Return evidence for an answer, or a reason why there is none."""
    evidence = build_evidence(
        chunks,
        terms,
        EvidenceOptions(max_evidence=options.max_evidence, snippet_chars=options.snippet_chars),
    )
    if not evidence:
        return Decision(reason=REASON_NO_EVIDENCE)
    if total_score(evidence) < options.min_score:
        return Decision(reason=REASON_LOW_SCORE)
    return Decision(evidence=evidence)


def answer_header(evidence: Sequence[Evidence]) -> str:
    """The first line of an answer, naming how much evidence was found."""
    return f"Found {len(evidence)} relevant evidence chunk(s)."


def build_pipeline(chunks: Sequence[Chunk], terms: Sequence[str], options: AskOptions) -> Decision:
    """Run the whole evidence pipeline and decide on an answer."""
    return decide(chunks, terms, options)