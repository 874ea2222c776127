# scry

A local-first memory engine for a codebase. `scry` walks a repository, splits
Go sources and Markdown documents into chunks, stores them with a lexical
term index in a SQLite database under `.scry/`, and answers searches and
questions with citations to file and line ranges.

Everything runs on your machine. The index is kept in `.scry/index.db` and is
accessed through Python's built-in `sqlite3` module; there are no third-party
dependencies.

## Installation

```
pip install .
```

## Usage

Run every command from the root of the repository you want to index; the
current working directory is taken as the repository root.

```
scry index              # create or update the index
scry index --clean      # delete the index database and rebuild it
scry status             # show whether an index exists and what it holds
scry search "ignore patterns" --limit 5
scry ask how are ignore patterns loaded --k 6
```

- `scry index` prints a `scan:` line with the number of supported files,
  an `indexed:` line for each file (re)indexed, and a final `done:` line.
- `scry search` ranks chunks by the summed frequency of the query's terms
  (terms are lowercased words of two or more characters), breaking ties by
  file path, and prints each hit with its location, score and a 200-character
  snippet. `--limit` defaults to 20; zero or less means no limit.
- `scry ask` searches for the `--k` best chunks (default 6), keeps those
  containing query words of three or more characters, prefers chunks matching
  two or more distinct words, adjusts scores by path rules (code under
  `internal/query/ask/` and `cmd/` is lowered; `pkg/ignore/` and `pkg/scan/`
  are raised for questions about scanning or ignore patterns), and prints up to
  two pieces of evidence with snippets. When nothing qualifies, or the
  evidence scores total below 1.0, it prints `I don't know.`
- `scry status` reports the repository path and the number of indexed files,
  chunks and term postings.

Every command accepts `--json` to print one JSON object per line instead of
text. `--quiet` is accepted but changes nothing. A configuration file can be
given with `-c`/`--config`; by default `.scry.yml` is read when it exists, and
a file named explicitly must exist. Its contents are not otherwise used.

### What gets indexed

- Files ending in `.go`, `.md` or `.markdown`.
- Go files are split into one chunk per top-level function or type
  declaration; a file that cannot be parsed, or has no such declarations,
  becomes a single chunk. Markdown files are split at heading lines.
- `.git/` and `.scry/` are always skipped, as are `*_test.go` files and
  paths under `testdata/`. Patterns from `.gitignore` and `.scryignore` in
  the root are honoured: a pattern ending in `/` matches paths beginning with
  it, other patterns are shell-style globs matched against the whole relative
  path or, when they contain no `/`, against the file name.

Re-running `scry index` only re-reads files whose content hash changed and
removes files that were deleted.

### Exit codes

| Code | Meaning |
|------|---------|
| 0 | success |
| 1 | runtime error |
| 2 | usage error (including running `scry` with no command) |
| 3 | index missing (run `scry index`) |
| 5 | search found no results |

## What it does not do

- There is no semantic or embedding-based search. `scry.vector` only defines
  a `Provider` protocol and a `VectorIndex` holding one; nothing uses them,
  and `scry index --no-embeddings` has no effect.
- `scry ask` does not compose prose answers; it reports the evidence it found.
- `scry impact` is not available: it prints a notice and exits with status 1.

## Using it as a library

```python
from scry.indexer import IndexOptions, run
from scry.metadata import open_database
from scry.search import SearchEngine
from scry.workspace import resolve

summary = run(IndexOptions(root="/path/to/repo"))
with open_database(resolve("/path/to/repo").index_db_path) as store:
    for result in SearchEngine(store).search("ignore patterns", 5):
        print(result.chunk.file_path, result.score)
```

`run` takes an optional callback receiving `Progress` events and returns a
`Summary` of files and chunks indexed. Database failures raise
`scry.metadata.MetadataError`.

The question-answering pipeline lives in `scry.ask`: `scry.ask.terms.tokenize_query`
turns a question into terms, and `scry.ask.pipeline.build_pipeline` filters,
boosts, ranks and snips candidate `scry.ask.models.Chunk` objects into a
`Decision` holding evidence, or a reason (`no_evidence` or `low_score`) when
there is none.

## Running the tests

```
pip install ".[test]"
pytest
```