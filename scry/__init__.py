"""Local-first codebase memory engine: indexing, lexical search and cited answers."""

__version__ = "0.1.0"