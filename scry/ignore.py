"""Ignore rules built from defaults, .gitignore and .scryignore."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from functools import lru_cache

MAX_LINE_BYTES = 64 * 1024


class _BadPattern(ValueError):
    pass


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise _BadPattern(pattern)
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise _BadPattern(pattern)
    return pattern[i], i + 1


def _translate_class(pattern: str, i: int) -> tuple[str, int]:
    negated = pattern.startswith("^", i)
    i += negated
    parts: list[str] = []
    first = True
    while not (i < len(pattern) and pattern[i] == "]" and not first):
        lo, i = _class_char(pattern, i)
        hi = lo
        if i < len(pattern) and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
        first = False
        if lo == hi:
            parts.append(re.escape(lo))
        elif lo < hi:
            parts.append(f"{re.escape(lo)}-{re.escape(hi)}")
    if not parts:
        return ("." if negated else "(?!)"), i + 1
    return f"[{'^' if negated else ''}{''.join(parts)}]", i + 1


@lru_cache(maxsize=512)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        i += 1
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "\\":
            if i >= len(pattern):
                raise _BadPattern(pattern)
            out.append(re.escape(pattern[i]))
            i += 1
        elif ch == "[":
            cls, i = _translate_class(pattern, i)
            out.append(cls)
        else:
            out.append(re.escape(ch))
    return re.compile("".join(out), re.DOTALL)


def _glob_match(pattern: str, name: str) -> bool:
    """Shell-style match where wildcards never cross '/'; bad patterns match nothing."""
    try:
        return _compile_glob(pattern).fullmatch(name) is not None
    except _BadPattern:
        return False


def _base_name(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    return stripped.rsplit("/", 1)[-1] if stripped else "/"


def _to_slash(path: str) -> str:
    return path.replace(os.sep, "/")


@dataclass
class Matcher:
    """Decides whether a path relative to the root is ignored."""

    root: str
    globs: list[str] = field(default_factory=list)

    def ignored(self, rel_path: str) -> bool:
        rel = _to_slash(rel_path)
        for glob in self.globs:
            if not glob:
                continue
            if glob.endswith("/"):
                if rel.startswith(glob):
                    return True
                continue
            if _glob_match(glob, rel):
                return True
            if "/" not in glob and _glob_match(glob, _base_name(rel)):
                return True
        return False


def default_patterns() -> list[str]:
    return ["*_test.go", "testdata/"]


def load_patterns(path: str) -> list[str]:
    """Read patterns from an ignore file; a missing file yields none.

    Raises OSError when the file cannot be read and ValueError on an overlong line.
    """
    try:
        handle = open(path, "rb")
    except FileNotFoundError:
        return []
    patterns: list[str] = []
    with handle:
        for raw in handle:
            body = raw.rstrip(b"\n")
            if len(body) >= MAX_LINE_BYTES:
                raise ValueError(f"{path}: line too long")
            line = body.decode("utf-8", errors="replace").strip()
            if line and not line.startswith("#"):
                patterns.append(_to_slash(line))
    return patterns


def load_matcher(root: str) -> Matcher:
    globs = default_patterns()
    globs += load_patterns(os.path.join(root, ".gitignore"))
    globs += load_patterns(os.path.join(root, ".scryignore"))
    return Matcher(root=root, globs=globs)