"""Data passed through the question-answering pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Chunk:
    id: str = ""
    file_path: str = ""
    start_line: int = 0
    end_line: int = 0
    text: str = ""
    score: float = 0.0
    match_count: int = 0


@dataclass
class Evidence:
    chunk: Chunk
    snippet: str = ""


@dataclass
class Decision:
    evidence: list[Evidence] = field(default_factory=list)
    reason: str = ""


@dataclass(frozen=True)
class EvidenceOptions:
    max_evidence: int
    snippet_chars: int


@dataclass(frozen=True)
class AskOptions:
    max_evidence: int
    snippet_chars: int
    min_score: float