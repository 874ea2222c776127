"""Loading of the optional configuration file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    path: str
    raw: str = ""
    found: bool = False


def load_config(path: str | None, required: bool) -> Config:
    """Read the config file; a missing file is an error only when required."""
    cfg_path = path or ".scry.yml"
    try:
        data = Path(cfg_path).read_bytes()
    except FileNotFoundError:
        if required:
            raise
        return Config(path=cfg_path)
    return Config(path=cfg_path, raw=data.decode("utf-8", errors="replace"), found=True)