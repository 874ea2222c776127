"""Persistent storage of indexed files, chunks and term postings."""

from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

_SCHEMA = """
CREATE TABLE IF NOT EXISTS files (
  path TEXT PRIMARY KEY,
  hash TEXT NOT NULL,
  mtime INTEGER NOT NULL,
  size INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS chunks (
  id TEXT PRIMARY KEY,
  file_path TEXT NOT NULL,
  start_line INTEGER NOT NULL,
  end_line INTEGER NOT NULL,
  hash TEXT NOT NULL,
  content TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS terms (
  term TEXT NOT NULL,
  chunk_id TEXT NOT NULL,
  tf INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS terms_term_idx ON terms(term);
CREATE INDEX IF NOT EXISTS chunks_file_idx ON chunks(file_path);
"""

_DELETE_FILE_TERMS = (
    "DELETE FROM terms WHERE chunk_id IN (SELECT id FROM chunks WHERE file_path = ?)"
)
_DELETE_FILE_CHUNKS = "DELETE FROM chunks WHERE file_path = ?"
_CHUNK_COLUMNS = "id, file_path, start_line, end_line, content"

# Keeps IN (...) lists well under SQLite's bound-parameter limit.
_ID_BATCH = 500


class MetadataError(Exception):
    """Raised when the index database cannot be opened, read or written."""


@dataclass(frozen=True)
class FileRecord:
    """An indexed file and the fingerprint it was indexed with."""

    path: str
    hash: str
    mtime: int
    size: int


@dataclass(frozen=True)
class ChunkRecord:
    """A chunk as written to the index."""

    id: str
    file_path: str
    start_line: int
    end_line: int
    hash: str
    content: str


@dataclass(frozen=True)
class TermRecord:
    """A term's frequency within one chunk, as written to the index."""

    term: str
    chunk_id: str
    tf: int


@dataclass(frozen=True)
class ChunkView:
    """A chunk as read back from the index."""

    id: str
    file_path: str
    start_line: int
    end_line: int
    content: str


@dataclass(frozen=True)
class TermHit:
    """A chunk containing a term, with the term's frequency there."""

    chunk_id: str
    tf: int


@dataclass(frozen=True)
class Stats:
    """Row counts of the index tables."""

    files: int
    chunks: int
    terms: int


class Database:
    """The index database at a path; the connection opens on first use."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _errors(self) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            raise MetadataError(f"{self.path}: {exc}") from exc

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            with self._errors():
                self._conn = sqlite3.connect(self.path)
        return self._conn

    def _initialize(self) -> None:
        conn = self._connection()
        with self._errors():
            conn.executescript(_SCHEMA)

    def _rows(self, query: str, params: Sequence[object] = ()) -> list[tuple]:
        conn = self._connection()
        with self._errors():
            return conn.execute(query, params).fetchall()

    def _count(self, table: str) -> int:
        rows = self._rows(f"SELECT COUNT(*) FROM {table}")
        return int(rows[0][0]) if rows else 0

    def get_file(self, path: str) -> FileRecord | None:
        """Return the record for an indexed file, or None if it is not indexed."""
        rows = self._rows("SELECT path, hash, mtime, size FROM files WHERE path = ?", (path,))
        if not rows:
            return None
        file_path, digest, mtime, size = rows[0]
        return FileRecord(path=file_path, hash=digest, mtime=int(mtime), size=int(size))

    def list_files(self) -> list[str]:
        """Return the paths of every indexed file."""
        return [row[0] for row in self._rows("SELECT path FROM files")]

    def get_chunk(self, chunk_id: str) -> ChunkView | None:
        """Return one chunk by id, or None if there is no such chunk."""
        rows = self._rows(f"SELECT {_CHUNK_COLUMNS} FROM chunks WHERE id = ?", (chunk_id,))
        return _chunk_view(rows[0]) if rows else None

    def get_chunks_by_ids(self, ids: Iterable[str]) -> list[ChunkView]:
        """Return the chunks whose ids are given; unknown ids are left out."""
        wanted = list(ids)
        views: list[ChunkView] = []
        for offset in range(0, len(wanted), _ID_BATCH):
            batch = wanted[offset:offset + _ID_BATCH]
            marks = ",".join("?" * len(batch))
            rows = self._rows(f"SELECT {_CHUNK_COLUMNS} FROM chunks WHERE id IN ({marks})", batch)
            views.extend(_chunk_view(row) for row in rows)
        return views

    def term_hits(self, term: str) -> list[TermHit]:
        """Return every chunk containing the term, with its frequency."""
        rows = self._rows("SELECT chunk_id, tf FROM terms WHERE term = ?", (term,))
        return [TermHit(chunk_id=chunk_id, tf=int(tf)) for chunk_id, tf in rows]

    def stats(self) -> Stats:
        """Return the number of indexed files, chunks and term postings."""
        return Stats(
            files=self._count("files"),
            chunks=self._count("chunks"),
            terms=self._count("terms"),
        )

    def delete_file(self, path: str) -> None:
        """Remove a file, its chunks and their postings in one transaction."""
        conn = self._connection()
        with self._errors(), conn:
            conn.execute(_DELETE_FILE_TERMS, (path,))
            conn.execute(_DELETE_FILE_CHUNKS, (path,))
            conn.execute("DELETE FROM files WHERE path = ?", (path,))

    def replace_file_data(
        self,
        file_record: FileRecord,
        chunks: Iterable[ChunkRecord],
        terms: Iterable[TermRecord],
    ) -> None:
        """Replace everything stored for a file in one transaction."""
        conn = self._connection()
        with self._errors(), conn:
            conn.execute(_DELETE_FILE_TERMS, (file_record.path,))
            conn.execute(_DELETE_FILE_CHUNKS, (file_record.path,))
            conn.execute(
                "INSERT INTO files(path, hash, mtime, size) VALUES(?, ?, ?, ?) "
                "ON CONFLICT(path) DO UPDATE SET hash=excluded.hash, "
                "mtime=excluded.mtime, size=excluded.size",
                (file_record.path, file_record.hash, file_record.mtime, file_record.size),
            )
            conn.executemany(
                "INSERT INTO chunks(id, file_path, start_line, end_line, hash, content) "
                "VALUES(?, ?, ?, ?, ?, ?)",
                [
                    (c.id, c.file_path, c.start_line, c.end_line, c.hash, c.content)
                    for c in chunks
                ],
            )
            conn.executemany(
                "INSERT INTO terms(term, chunk_id, tf) VALUES(?, ?, ?)",
                [(t.term, t.chunk_id, t.tf) for t in terms],
            )

    def close(self) -> None:
        """Close the connection if it is open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def _chunk_view(row: tuple) -> ChunkView:
    chunk_id, file_path, start_line, end_line, content = row
    return ChunkView(
        id=chunk_id,
        file_path=file_path,
        start_line=int(start_line),
        end_line=int(end_line),
        content=content,
    )


def open_database(path: str) -> Database:
    """Open the index database, creating its directory and schema as needed.

    Raises MetadataError when the database cannot be opened or initialised.
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, mode=0o755, exist_ok=True)
    db = Database(path)
    try:
        db._initialize()
    except MetadataError:
        db.close()
        raise
    return db