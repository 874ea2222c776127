import pytest

from scry.metadata import (
    ChunkRecord,
    ChunkView,
    Database,
    FileRecord,
    MetadataError,
    Stats,
    TermHit,
    TermRecord,
    open_database,
)


@pytest.fixture
def store(tmp_path):
    db = open_database(str(tmp_path / "index.db"))
    yield db
    db.close()


def _populate(db):
    file = FileRecord(path="src/main.go", hash="h1", mtime=1, size=10)
    chunk = ChunkRecord(
        id="c1", file_path="src/main.go", start_line=1, end_line=1, hash="ch1",
        content="alpha beta",
    )
    terms = [
        TermRecord(term="alpha", chunk_id="c1", tf=2),
        TermRecord(term="beta", chunk_id="c1", tf=1),
    ]
    db.replace_file_data(file, [chunk], terms)


def test_open_rejects_directory_path(tmp_path):
    (tmp_path / "dbdir").mkdir()
    with pytest.raises(MetadataError):
        open_database(str(tmp_path / "dbdir"))


def test_open_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "index.db"
    with open_database(str(path)) as db:
        assert db.stats() == Stats(files=0, chunks=0, terms=0)
    assert path.exists()


def test_db_lifecycle(store):
    _populate(store)

    assert store.get_file("src/main.go") == FileRecord(
        path="src/main.go", hash="h1", mtime=1, size=10
    )
    assert store.list_files() == ["src/main.go"]

    view = store.get_chunk("c1")
    assert view == ChunkView(
        id="c1", file_path="src/main.go", start_line=1, end_line=1, content="alpha beta"
    )

    views = store.get_chunks_by_ids(["c1"])
    assert [v.id for v in views] == ["c1"]

    assert store.term_hits("alpha") == [TermHit(chunk_id="c1", tf=2)]
    assert store.stats() == Stats(files=1, chunks=1, terms=2)

    store.delete_file("src/main.go")
    assert store.list_files() == []
    assert store.stats() == Stats(files=0, chunks=0, terms=0)


def test_empty_queries(store):
    assert store.get_file("missing.go") is None
    assert store.get_chunk("missing") is None
    assert store.get_chunks_by_ids([]) == []
    assert store.term_hits("none") == []
    assert store.stats() == Stats(files=0, chunks=0, terms=0)


def test_replace_file_data_replaces_previous_chunks(store):
    _populate(store)
    file = FileRecord(path="src/main.go", hash="h2", mtime=5, size=20)
    chunk = ChunkRecord(
        id="c2", file_path="src/main.go", start_line=2, end_line=4, hash="ch2",
        content="gamma",
    )
    store.replace_file_data(file, [chunk], [TermRecord(term="gamma", chunk_id="c2", tf=1)])

    assert store.get_file("src/main.go").hash == "h2"
    assert store.get_chunk("c1") is None
    assert store.term_hits("alpha") == []
    assert store.stats() == Stats(files=1, chunks=1, terms=1)


def test_content_with_quotes_and_newlines_round_trips(store):
    content = "line 'one'\n\tline \"two\"\n"
    file = FileRecord(path="it's.md", hash="h", mtime=0, size=len(content))
    chunk = ChunkRecord(
        id="q1", file_path="it's.md", start_line=1, end_line=3, hash="x", content=content
    )
    store.replace_file_data(file, [chunk], [])
    assert store.get_chunk("q1").content == content
    assert store.list_files() == ["it's.md"]


def test_get_chunks_by_ids_skips_unknown(store):
    _populate(store)
    views = store.get_chunks_by_ids(["nope", "c1"])
    assert [v.id for v in views] == ["c1"]


def test_schema_missing_errors(tmp_path):
    path = tmp_path / "raw.db"
    path.write_bytes(b"")
    db = Database(str(path))
    try:
        with pytest.raises(MetadataError):
            db.get_file("x")
        with pytest.raises(MetadataError):
            db.list_files()
        with pytest.raises(MetadataError):
            db.get_chunk("c1")
        with pytest.raises(MetadataError):
            db.get_chunks_by_ids(["c1"])
        with pytest.raises(MetadataError):
            db.term_hits("alpha")
        with pytest.raises(MetadataError):
            db.stats()
    finally:
        db.close()


def test_junk_file_is_rejected(tmp_path):
    path = tmp_path / "index.db"
    path.write_bytes(b"junk" * 64)
    with pytest.raises(MetadataError):
        open_database(str(path))


def test_close_then_reuse_reopens(tmp_path):
    path = str(tmp_path / "index.db")
    db = open_database(path)
    _populate(db)
    db.close()
    assert db.list_files() == ["src/main.go"]
    db.close()