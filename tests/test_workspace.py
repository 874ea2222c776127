import os

from scry.workspace import ensure, exists, resolve


def test_resolve_paths():
    root = os.path.join("root", "repo")
    paths = resolve(root)
    assert paths.root == root
    assert paths.workspace == os.path.join(root, ".scry")
    assert paths.index_db_path == os.path.join(root, ".scry", "index.db")


def test_ensure_and_exists(tmp_path):
    paths = resolve(str(tmp_path))
    assert exists(paths) is False
    ensure(paths)
    assert os.path.isdir(paths.workspace)
    assert exists(paths) is False
    with open(paths.index_db_path, "wb"):
        pass
    assert exists(paths) is True


def test_ensure_twice_keeps_index_absent(tmp_path):
    paths = resolve(str(tmp_path))
    ensure(paths)
    ensure(paths)
    assert exists(paths) is False
    with open(paths.index_db_path, "wb"):
        pass
    ensure(paths)
    assert exists(paths) is True