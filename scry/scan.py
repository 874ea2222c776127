"""Walking a repository for the files that are not ignored."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from typing import Iterator

from scry.ignore import Matcher, load_matcher

_SKIPPED_DIRS = (".git", ".scry")


@dataclass(frozen=True)
class FileEntry:
    """A file found under the root, with its lstat information."""

    path: str
    info: os.stat_result


@dataclass
class Scanner:
    """Lists the files under a root, skipping ignored paths."""

    root: str
    matcher: Matcher | None = None

    def _skipped(self, rel: str) -> bool:
        for name in _SKIPPED_DIRS:
            if rel == name or rel.startswith(name + "/"):
                return True
        return self.matcher is not None and self.matcher.ignored(rel)

    def _walk(self, directory: str, rel_dir: str) -> Iterator[FileEntry]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if self._skipped(rel):
                continue
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk(entry.path, rel)
            else:
                yield FileEntry(path=entry.path, info=entry.stat(follow_symlinks=False))

    def list_files(self) -> list[FileEntry]:
        """Return every non-ignored file, in lexical walk order.

        Raises OSError when the root or a directory beneath it cannot be read.
        """
        root_info = os.lstat(self.root)
        if not stat.S_ISDIR(root_info.st_mode):
            return []
        return list(self._walk(self.root, ""))


def create_scanner(root: str) -> Scanner:
    """Build a scanner whose ignore rules come from the root's ignore files."""
    return Scanner(root=root, matcher=load_matcher(root))