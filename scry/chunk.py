"""A span of lines taken from a source file."""

from dataclasses import dataclass


@dataclass
class Chunk:
    id: str = ""
    file_path: str = ""
    start_line: int = 0
    end_line: int = 0
    text: str = ""
    lang: str = ""