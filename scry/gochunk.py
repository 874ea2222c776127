"""Chunking of Go source files by top-level function and type declarations."""

from __future__ import annotations

import re
from typing import NamedTuple

from scry.chunk import Chunk

_KEYWORDS = frozenset(
    "break case chan const continue default defer else fallthrough for func go "
    "goto if import interface map package range return select struct switch "
    "type var".split()
)
_END_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})
_END_OPS = frozenset({")", "]", "}", "++", "--"})
_DECLS = frozenset({"import", "const", "var", "type", "func"})
_CLOSERS = {")": "(", "]": "[", "}": "{"}

_TOKEN_RE = re.compile(
    r"""(?P<nl>\n)|(?P<ws>[ \t\r]+)|(?P<lc>//[^\n]*)|(?P<bc>/\*.*?\*/)
    |(?P<raw>`[^`]*`)|(?P<str>"(?:[^"\\\n]|\\[^\n])*")|(?P<rune>'(?:[^'\\\n]|\\[^\n])*')
    |(?P<bad>["'`]|/\*)|(?P<ident>[^\W\d]\w*)|(?P<num>\.?\d(?:[eEpP][+-]|[\w.])*)
    |(?P<incdec>\+\+|--)|(?P<semi>;)|(?P<op>.)""",
    re.VERBOSE | re.DOTALL,
)


class _GoSyntaxError(ValueError):
    pass


class _Token(NamedTuple):
    kind: str
    text: str
    line: int
    end_line: int

    def ends_statement(self) -> bool:
        if self.kind in ("ident", "literal"):
            return True
        if self.kind == "keyword":
            return self.text in _END_KEYWORDS
        return self.kind == "op" and self.text in _END_OPS


def _tokenize(src: str) -> list[_Token]:
    """Tokens of Go source, with semicolons inserted as the language does."""
    tokens: list[_Token] = []
    line = 1

    def auto_semicolon() -> None:
        if tokens and tokens[-1].ends_statement():
            tokens.append(_Token("semi", ";", line, line))

    for m in _TOKEN_RE.finditer(src):
        kind, text = m.lastgroup, m.group()
        if kind == "bad":
            raise _GoSyntaxError(f"unterminated literal on line {line}")
        if kind == "nl" or (kind == "bc" and "\n" in text):
            auto_semicolon()
        start = line
        line += text.count("\n")
        if kind in ("nl", "ws", "lc", "bc"):
            continue
        if kind == "ident":
            kind = "keyword" if text in _KEYWORDS else "ident"
        elif kind in ("raw", "str", "rune", "num"):
            kind = "literal"
        elif kind in ("incdec", "op"):
            kind = "op"
        tokens.append(_Token(kind, text, start, line))
    auto_semicolon()
    return tokens


def _top_level_statements(tokens: list[_Token]) -> list[list[_Token]]:
    stack: list[str] = []
    statements: list[list[_Token]] = []
    current: list[_Token] = []
    for tok in tokens:
        if tok.kind == "op" and tok.text in "([{":
            stack.append(tok.text)
        elif tok.kind == "op" and tok.text in _CLOSERS:
            if not stack or stack.pop() != _CLOSERS[tok.text]:
                raise _GoSyntaxError(f"unbalanced {tok.text!r} on line {tok.line}")
        if tok.kind == "semi" and not stack:
            if current:
                statements.append(current)
                current = []
            continue
        current.append(tok)
    if stack:
        raise _GoSyntaxError("unclosed bracket at end of file")
    if current:
        statements.append(current)
    return statements


def _declaration_spans(content: str) -> list[tuple[int, int]]:
    statements = _top_level_statements(_tokenize(content))
    if not statements:
        raise _GoSyntaxError("missing package clause")
    clause = statements[0]
    if len(clause) != 2 or clause[0].text != "package" or clause[1].kind != "ident":
        raise _GoSyntaxError("missing package clause")
    spans: list[tuple[int, int]] = []
    for stmt in statements[1:]:
        head = stmt[0]
        if head.kind != "keyword" or head.text not in _DECLS:
            raise _GoSyntaxError(f"unexpected {head.text!r} on line {head.line}")
        if head.text not in ("func", "type"):
            continue
        if len(stmt) < 3 or not (stmt[1].kind == "ident" or stmt[1].text == "("):
            raise _GoSyntaxError(f"malformed declaration on line {head.line}")
        spans.append((head.line, stmt[-1].end_line))
    return spans


def clamp_line(line: int, maximum: int) -> int:
    return max(1, min(line, maximum))


def chunk_go(path: str, content: str) -> list[Chunk]:
    """One chunk per top-level func or type declaration, else one chunk for the file."""
    lines = content.split("\n")
    try:
        spans = _declaration_spans(content)
    except _GoSyntaxError:
        spans = []
    if not spans:
        return [Chunk(file_path=path, start_line=1, end_line=len(lines), text=content, lang="go")]
    chunks = []
    for span_start, span_end in sorted(spans, key=lambda span: span[0]):
        start = clamp_line(span_start, len(lines))
        end = clamp_line(span_end, len(lines))
        chunks.append(
            Chunk(
                file_path=path,
                start_line=start,
                end_line=end,
                text="\n".join(lines[start - 1:end]),
                lang="go",
            )
        )
    return chunks