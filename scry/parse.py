"""Dispatch of files to the chunker for their language, and Markdown chunking."""

from __future__ import annotations

import os

from scry.chunk import Chunk
from scry.gochunk import chunk_go


def _extension(path: str) -> str:
    name = path.replace(os.sep, "/").rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def chunk_markdown(path: str, content: str) -> list[Chunk]:
    """Split Markdown into chunks, each starting at a heading line."""
    lines = content.split("\n")
    chunks: list[Chunk] = []
    start = 1
    current = ""
    for number, line in enumerate(lines, start=1):
        if line.strip().startswith("#"):
            if current:
                chunks.append(
                    Chunk(file_path=path, start_line=start, end_line=number - 1,
                          text=current, lang="md")
                )
            start, current = number, line
            continue
        if not current:
            start, current = number, line
        else:
            current += "\n" + line
    if current.strip():
        chunks.append(
            Chunk(file_path=path, start_line=start, end_line=len(lines),
                  text=current, lang="md")
        )
    return chunks


def chunks_for_file(path: str, content: str) -> list[Chunk]:
    """Chunk a file by its extension; unsupported files yield no chunks."""
    ext = _extension(path).lower()
    if ext == ".go":
        return chunk_go(path, content)
    if ext in (".md", ".markdown"):
        return chunk_markdown(path, content)
    return []