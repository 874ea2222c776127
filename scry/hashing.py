"""Content hashes for files and chunks."""

from __future__ import annotations

import hashlib


def file_hash(data: bytes) -> str:
    """Return the hex SHA-256 digest of a file's bytes."""
    return hashlib.sha256(data).hexdigest()


def chunk_hash(file_hash: str, start_line: int, end_line: int, text: str) -> str:
    """Return a hex SHA-256 digest identifying a chunk of a file."""
    digest = hashlib.sha256()
    digest.update(f"{file_hash}:{start_line}:{end_line}:\n".encode("utf-8"))
    digest.update(text.encode("utf-8"))
    return digest.hexdigest()