"""Building and incrementally updating the index of a repository."""

from __future__ import annotations

import contextlib
import os
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from scry.hashing import chunk_hash, file_hash
from scry.lexical import InvertedIndex
from scry.metadata import ChunkRecord, FileRecord, TermRecord, open_database
from scry.parse import chunks_for_file
from scry.scan import FileEntry, create_scanner
from scry.workspace import ensure, resolve

SUPPORTED_EXTENSIONS = frozenset({".go", ".md", ".markdown"})


@dataclass(frozen=True)
class IndexOptions:
    """What to index and how."""

    root: str
    clean: bool = False
    no_embeddings: bool = False
    json: bool = False


@dataclass(frozen=True)
class Progress:
    """A progress event reported while indexing."""

    type: str
    stage: str = ""
    files_total: int = 0
    file: str = ""
    chunks: int = 0
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the event as a mapping, leaving out empty optional fields."""
        out: dict[str, Any] = {"type": self.type}
        optional = (
            ("stage", self.stage),
            ("files_total", self.files_total),
            ("file", self.file),
            ("chunks", self.chunks),
            ("message", self.message),
        )
        out.update((key, value) for key, value in optional if value)
        return out


@dataclass
class Summary:
    """How much was (re)indexed in one run."""

    files_indexed: int = 0
    chunks_indexed: int = 0


def _extension(path: str) -> str:
    name = path.replace(os.sep, "/").rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _relative(root: str, path: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


def filter_supported(files: Iterable[FileEntry]) -> list[FileEntry]:
    """Keep Go and Markdown files, sorted by path."""
    supported = [f for f in files if _extension(f.path).lower() in SUPPORTED_EXTENSIONS]
    return sorted(supported, key=lambda f: f.path)


def run(options: IndexOptions, emit: Callable[[Progress], None] | None = None) -> Summary:
    """Index the repository at ``options.root``, skipping unchanged files.

    Files that disappeared are removed from the index. Raises OSError when the
    workspace or a file cannot be read or written, and MetadataError when the
    index database fails.
    """
    report = emit or (lambda _progress: None)
    paths = resolve(options.root)
    ensure(paths)
    if options.clean:
        with contextlib.suppress(OSError):
            os.remove(paths.index_db_path)

    with open_database(paths.index_db_path) as store:
        files = filter_supported(create_scanner(options.root).list_files())
        report(Progress(type="progress", stage="scan", files_total=len(files)))

        current = {_relative(options.root, f.path) for f in files}
        for stale in set(store.list_files()) - current:
            store.delete_file(stale)

        lexicon = InvertedIndex()
        summary = Summary()
        for entry in files:
            rel = _relative(options.root, entry.path)
            with open(entry.path, "rb") as handle:
                data = handle.read()
            digest = file_hash(data)
            existing = store.get_file(rel)
            if existing is not None and existing.hash == digest:
                continue

            chunks = chunks_for_file(rel, data.decode("utf-8", errors="replace"))
            if not chunks:
                continue

            chunk_records: list[ChunkRecord] = []
            term_records: list[TermRecord] = []
            for chunk in chunks:
                chunk_id = chunk_hash(digest, chunk.start_line, chunk.end_line, chunk.text)
                chunk_records.append(
                    ChunkRecord(
                        id=chunk_id,
                        file_path=rel,
                        start_line=chunk.start_line,
                        end_line=chunk.end_line,
                        hash=chunk_id,
                        content=chunk.text,
                    )
                )
                term_records.extend(
                    TermRecord(term=p.term, chunk_id=p.chunk_id, tf=p.tf)
                    for p in lexicon.add(chunk_id, chunk.text)
                )

            record = FileRecord(
                path=rel,
                hash=digest,
                mtime=int(entry.info.st_mtime),
                size=entry.info.st_size,
            )
            store.replace_file_data(record, chunk_records, term_records)
            summary.files_indexed += 1
            summary.chunks_indexed += len(chunk_records)
            report(Progress(type="progress", stage="index", file=rel, chunks=len(chunk_records)))

    return summary