"""Location of the on-disk workspace for a repository."""

from __future__ import annotations

import os
from dataclasses import dataclass

WORKSPACE_DIR = ".scry"
INDEX_DB_NAME = "index.db"


@dataclass(frozen=True)
class Paths:
    """The repository root, its workspace directory and its index database."""

    root: str
    workspace: str
    index_db_path: str


def resolve(root: str) -> Paths:
    """Return the workspace paths for a repository root."""
    ws = os.path.join(root, WORKSPACE_DIR)
    return Paths(root=root, workspace=ws, index_db_path=os.path.join(ws, INDEX_DB_NAME))


def ensure(paths: Paths) -> None:
    """Create the workspace directory if it does not exist."""
    os.makedirs(paths.workspace, mode=0o755, exist_ok=True)


def exists(paths: Paths) -> bool:
    """Tell whether the index database is present."""
    try:
        os.stat(paths.index_db_path)
    except OSError:
        return False
    return True