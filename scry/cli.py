"""Command-line interface: index, search, ask, status and impact."""

from __future__ import annotations

import argparse
import json
import os
import sys
from enum import IntEnum
from typing import Any, Callable, Sequence

from scry.ask.models import AskOptions, Chunk
from scry.ask.pipeline import answer_header, build_pipeline
from scry.ask.terms import tokenize_query
from scry.config import load_config
from scry.indexer import IndexOptions, Progress, run
from scry.metadata import Database, MetadataError, open_database
from scry.search import SearchEngine
from scry.workspace import Paths, exists, resolve

SEARCH_SNIPPET_CHARS = 200
ASK_MAX_EVIDENCE = 2
ASK_SNIPPET_CHARS = 240
ASK_MIN_SCORE = 1.0
NO_EVIDENCE_HINT = "No relevant evidence found in indexed chunks."
IDK = "I don't know."


class ExitCode(IntEnum):
    """Process exit statuses."""

    SUCCESS = 0
    RUNTIME_ERROR = 1
    USAGE_ERROR = 2
    INDEX_MISSING = 3
    OFFLINE_VIOLATION = 4
    NO_RESULTS = 5


class CommandError(Exception):
    """Ends a command with an exit code, optionally printing a message."""

    def __init__(self, code: ExitCode, message: str = "", silent: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.silent = silent


def format_snippet(text: str, max_chars: int) -> str:
    """Strip the text and cut it to ``max_chars``, marking a cut with '...'."""
    stripped = text.strip()
    if len(stripped) <= max_chars:
        return stripped
    return stripped[:max_chars] + "..."


def _print_json(obj: dict[str, Any], sort_keys: bool = True) -> None:
    print(json.dumps(obj, ensure_ascii=False, sort_keys=sort_keys))


def _repo_root() -> str:
    try:
        return os.path.abspath(os.getcwd())
    except OSError as exc:
        raise CommandError(ExitCode.RUNTIME_ERROR, str(exc)) from exc


def _open_index(paths: Paths) -> Database:
    if not exists(paths):
        raise CommandError(ExitCode.INDEX_MISSING, "index not found; run `scry index`")
    try:
        return open_database(paths.index_db_path)
    except (OSError, MetadataError) as exc:
        raise CommandError(ExitCode.RUNTIME_ERROR, str(exc)) from exc


def _cmd_index(args: argparse.Namespace) -> None:
    root = _repo_root()
    json_out = args.json

    def emit(progress: Progress) -> None:
        if json_out:
            _print_json(progress.to_dict(), sort_keys=False)
        elif progress.stage == "scan":
            print(f"scan: {progress.files_total} files")
        elif progress.stage == "index":
            print(f"indexed: {progress.file} ({progress.chunks} chunks)")

    options = IndexOptions(
        root=root, clean=args.clean, no_embeddings=args.no_embeddings, json=json_out
    )
    try:
        summary = run(options, emit)
    except (OSError, ValueError, MetadataError) as exc:
        raise CommandError(ExitCode.RUNTIME_ERROR, str(exc)) from exc
    if json_out:
        _print_json(
            {
                "type": "summary",
                "files_indexed": summary.files_indexed,
                "chunks_indexed": summary.chunks_indexed,
            }
        )
    else:
        print(f"done: {summary.files_indexed} files, {summary.chunks_indexed} chunks")


def _cmd_search(args: argparse.Namespace) -> None:
    paths = resolve(_repo_root())
    query = " ".join(args.query)
    with _open_index(paths) as store:
        try:
            results = SearchEngine(store).search(query, args.limit)
        except MetadataError as exc:
            raise CommandError(ExitCode.RUNTIME_ERROR, str(exc)) from exc

    if not results:
        if args.json:
            _print_json({"type": "summary", "results": 0})
        else:
            print("no results")
        raise CommandError(ExitCode.NO_RESULTS, silent=True)

    for rank, result in enumerate(results, start=1):
        chunk = result.chunk
        snippet = format_snippet(chunk.content, SEARCH_SNIPPET_CHARS)
        if args.json:
            _print_json(
                {
                    "type": "result",
                    "rank": rank,
                    "score": result.score,
                    "path": chunk.file_path,
                    "start_line": chunk.start_line,
                    "end_line": chunk.end_line,
                    "snippet": snippet,
                }
            )
        else:
            print(
                f"{rank}. {chunk.file_path}:{chunk.start_line}-{chunk.end_line} "
                f"(score {result.score:.2f})"
            )
            print(f"   {snippet}")
    if args.json:
        _print_json({"type": "summary", "results": len(results)})


def _cmd_ask(args: argparse.Namespace) -> None:
    paths = resolve(_repo_root())
    question = " ".join(args.question)
    with _open_index(paths) as store:
        try:
            results = SearchEngine(store).search(question, args.k)
        except MetadataError as exc:
            raise CommandError(ExitCode.RUNTIME_ERROR, str(exc)) from exc

    terms = tokenize_query(question)
    candidates = [
        Chunk(
            id=r.chunk.id,
            file_path=r.chunk.file_path,
            start_line=r.chunk.start_line,
            end_line=r.chunk.end_line,
            text=r.chunk.content,
            score=r.score,
        )
        for r in results
    ]
    decision = build_pipeline(
        candidates,
        terms,
        AskOptions(
            max_evidence=ASK_MAX_EVIDENCE,
            snippet_chars=ASK_SNIPPET_CHARS,
            min_score=ASK_MIN_SCORE,
        ),
    )

    if not decision.evidence:
        if args.json:
            _print_json(
                {"type": "answer", "text": IDK, "reason": decision.reason, "hint": NO_EVIDENCE_HINT}
            )
        else:
            print(IDK)
            print(NO_EVIDENCE_HINT)
        return

    header = answer_header(decision.evidence)
    if args.json:
        _print_json({"type": "answer", "text": header})
        for number, ev in enumerate(decision.evidence, start=1):
            _print_json(
                {
                    "type": "evidence",
                    "id": number,
                    "snippet": ev.snippet,
                    "path": ev.chunk.file_path,
                    "start_line": ev.chunk.start_line,
                    "end_line": ev.chunk.end_line,
                }
            )
        _print_json({"type": "summary", "k": len(decision.evidence)})
        return

    print("Answer:")
    print(header)
    print("")
    print("Evidence:")
    for number, ev in enumerate(decision.evidence, start=1):
        print(f"[{number}] {ev.chunk.file_path}:{ev.chunk.start_line}-{ev.chunk.end_line}")
        print(f"    {ev.snippet}")


def _cmd_status(args: argparse.Namespace) -> None:
    root = _repo_root()
    paths = resolve(root)
    if not exists(paths):
        if args.json:
            _print_json({"type": "status", "repo": root, "index": "missing"})
            return
        print("Index: missing")
        raise CommandError(ExitCode.INDEX_MISSING, silent=True)

    with _open_index(paths) as store:
        try:
            stats = store.stats()
        except MetadataError as exc:
            raise CommandError(ExitCode.RUNTIME_ERROR, str(exc)) from exc

    if args.json:
        _print_json(
            {
                "type": "status",
                "repo": root,
                "index": "present",
                "files": stats.files,
                "chunks": stats.chunks,
                "terms": stats.terms,
            }
        )
        return
    print(f"Repo: {root}")
    print("Index: present")
    print(f"Files indexed: {stats.files}")
    print(f"Chunks indexed: {stats.chunks}")
    print(f"Terms indexed: {stats.terms}")


def _cmd_impact(args: argparse.Namespace) -> None:
    print("impact analysis is unavailable")
    raise CommandError(ExitCode.RUNTIME_ERROR, silent=True)


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="output JSON")
    parser.add_argument("--quiet", action="store_true", help="suppress progress output")


def _subcommand(
    subparsers: Any,
    parent: argparse.ArgumentParser,
    name: str,
    help_text: str,
    handler: Callable[[argparse.Namespace], None],
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help_text, description=help_text, parents=[parent])
    _add_common_flags(parser)
    parser.set_defaults(handler=handler)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every command."""
    config_help = "Config file (default: .scry.yml)"
    parser = argparse.ArgumentParser(prog="scry", description="Local-first codebase memory engine")
    parser.add_argument("-c", "--config", dest="config", default=None, help=config_help)
    parser.set_defaults(handler=None)

    # Lets --config also follow the subcommand without clobbering an earlier value.
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "-c", "--config", dest="config", default=argparse.SUPPRESS, help=config_help
    )

    subparsers = parser.add_subparsers(title="commands", metavar="<command>")

    index = _subcommand(subparsers, parent, "index", "Create or update local indexes", _cmd_index)
    index.add_argument("--clean", action="store_true", help="rebuild index from scratch")
    index.add_argument("--no-embeddings", action="store_true", help="skip embeddings")

    search = _subcommand(subparsers, parent, "search", "Hybrid search across indexes", _cmd_search)
    search.add_argument("query", nargs="+", help="search query")
    search.add_argument("--limit", type=int, default=20, help="max results")

    ask = _subcommand(subparsers, parent, "ask", "RAG-style answers with citations", _cmd_ask)
    ask.add_argument("question", nargs="+", help="question to answer")
    ask.add_argument("--k", type=int, default=6, help="number of context chunks")

    _subcommand(subparsers, parent, "status", "Show repo index health", _cmd_status)

    impact = _subcommand(subparsers, parent, "impact", "Show change impact", _cmd_impact)
    impact.add_argument("target", nargs="*", help="path, range or commit")

    return parser


def _load_config(args: argparse.Namespace) -> None:
    explicit = args.config is not None
    try:
        load_config(args.config, explicit)
    except OSError as exc:
        raise CommandError(ExitCode.RUNTIME_ERROR, f"config: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else int(ExitCode.USAGE_ERROR)

    try:
        if args.handler is None:
            parser.print_help()
            raise CommandError(ExitCode.USAGE_ERROR, silent=True)
        _load_config(args)
        args.handler(args)
    except CommandError as err:
        if not err.silent and err.message:
            print(err.message, file=sys.stderr)
        return int(err.code)
    return int(ExitCode.SUCCESS)


if __name__ == "__main__":
    sys.exit(main())