"""Embedding provider interface and the vector index that uses one."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence


class Provider(Protocol):
    def embed(self, texts: Sequence[str]) -> list[list[float]]: ...

    def dimension(self) -> int: ...

    def name(self) -> str: ...

    def offline_only(self) -> bool: ...


@dataclass
class VectorIndex:
    provider: Provider