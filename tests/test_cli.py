import json
import os

import pytest

from scry.cli import CommandError, ExitCode, build_parser, format_snippet, main


def _json_lines(text):
    return [json.loads(line) for line in text.splitlines() if line.strip()]


@pytest.fixture
def repo(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_go(repo):
    (repo / "a.go").write_text("package main\n\nfunc Alpha() {}\n")


def test_format_snippet_short_is_stripped():
    assert format_snippet("  hello  ", 200) == "hello"


def test_format_snippet_truncates_long_text():
    got = format_snippet("abcdef", 3)
    assert got == "abc..."


def test_format_snippet_exact_length_kept():
    assert format_snippet("abc", 3) == "abc"


def test_command_error_carries_code():
    err = CommandError(ExitCode.NO_RESULTS, "none", silent=True)
    assert err.code == ExitCode.NO_RESULTS
    assert err.silent is True
    assert str(err) == "none"


def test_parser_defaults():
    args = build_parser().parse_args(["search", "foo", "bar"])
    assert args.query == ["foo", "bar"]
    assert args.limit == 20
    assert args.config is None
    ask_args = build_parser().parse_args(["ask", "why"])
    assert ask_args.k == 6


def test_parser_config_before_and_after_subcommand():
    parser = build_parser()
    assert parser.parse_args(["-c", "x.yml", "status"]).config == "x.yml"
    assert parser.parse_args(["status", "--config", "y.yml"]).config == "y.yml"


def test_no_command_is_usage_error(repo, capsys):
    assert main([]) == ExitCode.USAGE_ERROR
    assert "usage" in capsys.readouterr().out.lower()


def test_search_without_query_is_usage_error(repo):
    assert main(["search"]) == ExitCode.USAGE_ERROR


def test_status_missing_text(repo, capsys):
    assert main(["status"]) == ExitCode.INDEX_MISSING
    assert capsys.readouterr().out.strip() == "Index: missing"


def test_status_missing_json(repo, capsys):
    assert main(["status", "--json"]) == ExitCode.SUCCESS
    (record,) = _json_lines(capsys.readouterr().out)
    assert record["type"] == "status"
    assert record["index"] == "missing"
    assert record["repo"] == os.path.abspath(os.getcwd())


def test_search_missing_index(repo, capsys):
    assert main(["search", "alpha"]) == ExitCode.INDEX_MISSING
    assert "index not found" in capsys.readouterr().err


def test_explicit_missing_config_fails(repo, capsys):
    assert main(["status", "--config", "missing.yml"]) == ExitCode.RUNTIME_ERROR
    assert capsys.readouterr().err.startswith("config:")


def test_explicit_existing_config_loads(repo):
    (repo / "cfg.yml").write_text("foo: bar\n")
    assert main(["-c", "cfg.yml", "status"]) == ExitCode.INDEX_MISSING


def test_index_json_and_incremental(repo, capsys):
    _write_go(repo)
    assert main(["index", "--json"]) == ExitCode.SUCCESS
    records = _json_lines(capsys.readouterr().out)
    assert records[0] == {"type": "progress", "stage": "scan", "files_total": 1}
    assert records[-1]["type"] == "summary"
    assert records[-1]["files_indexed"] == 1

    assert main(["index", "--json"]) == ExitCode.SUCCESS
    again = _json_lines(capsys.readouterr().out)
    assert again[-1]["files_indexed"] == 0
    assert again[-1]["chunks_indexed"] == 0


def test_index_then_status(repo, capsys):
    _write_go(repo)
    assert main(["index"]) == ExitCode.SUCCESS
    out = capsys.readouterr().out
    assert "indexed: a.go" in out
    assert main(["status", "--json"]) == ExitCode.SUCCESS
    (record,) = _json_lines(capsys.readouterr().out)
    assert record["index"] == "present"
    assert record["files"] == 1
    assert record["chunks"] == 1
    assert record["terms"] > 0


def test_search_json_results(repo, capsys):
    _write_go(repo)
    main(["index"])
    capsys.readouterr()
    assert main(["search", "--json", "alpha"]) == ExitCode.SUCCESS
    records = _json_lines(capsys.readouterr().out)
    results = [r for r in records if r["type"] == "result"]
    assert len(results) == 1
    assert results[0]["path"] == "a.go"
    assert results[0]["rank"] == 1
    assert results[0]["snippet"] == "func Alpha() {}"
    assert records[-1] == {"type": "summary", "results": 1}


def test_search_text_results(repo, capsys):
    _write_go(repo)
    main(["index"])
    capsys.readouterr()
    assert main(["search", "alpha"]) == ExitCode.SUCCESS
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("1. a.go:3-3 (score ")
    assert lines[1] == "   func Alpha() {}"


def test_search_no_results(repo, capsys):
    _write_go(repo)
    main(["index"])
    capsys.readouterr()
    assert main(["search", "nothingmatches"]) == ExitCode.NO_RESULTS
    assert capsys.readouterr().out.strip() == "no results"


def test_ask_without_evidence(repo, capsys):
    _write_go(repo)
    main(["index"])
    capsys.readouterr()
    assert main(["ask", "nothingmatches"]) == ExitCode.SUCCESS
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["I don't know.", "No relevant evidence found in indexed chunks."]


def test_ask_json_without_evidence_reason(repo, capsys):
    _write_go(repo)
    main(["index"])
    capsys.readouterr()
    assert main(["ask", "--json", "nothingmatches"]) == ExitCode.SUCCESS
    (record,) = _json_lines(capsys.readouterr().out)
    assert record["text"] == "I don't know."
    assert record["reason"] == "no_evidence"


def test_ask_json_with_evidence(repo, capsys):
    (repo / "docs.md").write_text(
        "# Scanner\nThe scanner walks files and applies ignore rules.\n"
    )
    main(["index"])
    capsys.readouterr()
    assert main(["ask", "--json", "scanner", "ignore", "rules"]) == ExitCode.SUCCESS
    records = _json_lines(capsys.readouterr().out)
    assert records[0] == {"type": "answer", "text": "Found 1 relevant evidence chunk(s)."}
    evidence = [r for r in records if r["type"] == "evidence"]
    assert len(evidence) == 1
    assert evidence[0]["path"] == "docs.md"
    assert "ignore" in evidence[0]["snippet"]
    assert records[-1] == {"type": "summary", "k": 1}


def test_ask_text_with_evidence(repo, capsys):
    (repo / "docs.md").write_text(
        "# Scanner\nThe scanner walks files and applies ignore rules.\n"
    )
    main(["index"])
    capsys.readouterr()
    assert main(["ask", "scanner", "rules"]) == ExitCode.SUCCESS
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Answer:"
    assert lines[1] == "Found 1 relevant evidence chunk(s)."
    assert lines[3] == "Evidence:"
    assert lines[4].startswith("[1] docs.md:1-")


def test_impact_fails(repo, capsys):
    assert main(["impact", "a.go"]) == ExitCode.RUNTIME_ERROR
    assert capsys.readouterr().err == ""