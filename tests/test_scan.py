import os
from unittest import mock

import pytest

from scry.scan import Scanner, create_scanner


def _rel_paths(root, files):
    return {os.path.relpath(f.path, root).replace(os.sep, "/") for f in files}


def test_scanner_respects_ignore(tmp_path):
    (tmp_path / ".gitignore").write_text("vendor/\n*.md\n")
    (tmp_path / ".scryignore").write_text("notes.md\n")
    (tmp_path / "vendor" / "mod").mkdir(parents=True)
    (tmp_path / "src").mkdir()
    (tmp_path / "vendor" / "mod" / "x.go").write_text("package mod")
    (tmp_path / "notes.md").write_text("notes")
    (tmp_path / "README.md").write_text("readme")
    (tmp_path / "src" / "main.go").write_text("package main")

    files = create_scanner(str(tmp_path)).list_files()
    rels = _rel_paths(tmp_path, files)
    assert "src/main.go" in rels
    assert not rels & {"README.md", "notes.md", "vendor/mod/x.go"}


def test_scanner_skips_git_and_scry_dirs(tmp_path):
    (tmp_path / ".git" / "objects").mkdir(parents=True)
    (tmp_path / ".scry" / "cache").mkdir(parents=True)
    (tmp_path / ".git" / "objects" / "obj").write_text("x")
    (tmp_path / ".scry" / "cache" / "x").write_text("x")
    (tmp_path / "main.go").write_text("package main")

    files = create_scanner(str(tmp_path)).list_files()
    assert len(files) == 1
    assert _rel_paths(tmp_path, files) == {"main.go"}


def test_scanner_new_error(tmp_path):
    (tmp_path / ".gitignore").mkdir()
    with pytest.raises(OSError):
        create_scanner(str(tmp_path))


def test_scanner_list_files_without_matcher(tmp_path):
    (tmp_path / "main.go").write_text("package main")
    files = Scanner(root=str(tmp_path), matcher=None).list_files()
    assert len(files) == 1
    assert files[0].info.st_size == len("package main")


def test_scanner_list_files_error(tmp_path):
    (tmp_path / "blocked").mkdir()
    real_scandir = os.scandir

    def fake_scandir(path="."):
        if os.path.basename(os.fspath(path)) == "blocked":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    scanner = Scanner(root=str(tmp_path), matcher=None)
    with mock.patch("os.scandir", side_effect=fake_scandir):
        with pytest.raises(PermissionError):
            scanner.list_files()


def test_scanner_missing_root(tmp_path):
    scanner = Scanner(root=str(tmp_path / "missing"))
    with pytest.raises(FileNotFoundError):
        scanner.list_files()


def test_scanner_lexical_order(tmp_path):
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "z.go").write_text("x")
    (tmp_path / "a.go").write_text("x")
    (tmp_path / "c.md").write_text("x")
    files = Scanner(root=str(tmp_path)).list_files()
    rels = [os.path.relpath(f.path, tmp_path).replace(os.sep, "/") for f in files]
    assert rels == ["a.go", "b/z.go", "c.md"]


def test_default_patterns_skip_go_tests_and_testdata(tmp_path):
    (tmp_path / "testdata").mkdir()
    (tmp_path / "testdata" / "in.txt").write_text("x")
    (tmp_path / "x_test.go").write_text("package x")
    (tmp_path / "x.go").write_text("package x")
    files = create_scanner(str(tmp_path)).list_files()
    assert _rel_paths(tmp_path, files) == {"x.go"}