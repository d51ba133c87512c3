"""Text file helpers."""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import IO


def is_gzip(path: str | Path) -> bool:
    return Path(path).suffix == ".gz"


def open_text(path: str | Path, mode: str = "r") -> IO[str]:
    """Open a text file, compressing or decompressing ``.gz`` paths transparently."""
    path = Path(path)
    if mode not in ("r", "w", "a"):
        msg = f"Unsupported mode: {mode}"
        raise ValueError(msg)
    if is_gzip(path):
        return gzip.open(path, mode + "t", encoding="utf-8", newline="")  # type: ignore[return-value]
    return path.open(mode, encoding="utf-8", newline="")
