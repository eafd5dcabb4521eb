"""I/O utilities for JSON and text files.

orjson-backed JSON I/O plus atomic text writes (temp file then
``os.replace``) so a crashed run never leaves a half-written page.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON with sorted keys."""
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    write_bytes_atomic(path, orjson.dumps(obj, option=opts) + b"\n")


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Atomic write: write to temp file then os.replace()."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = Path(f"{path}.tmp")
    tmp.write_bytes(data)
    os.replace(str(tmp), str(path))


def write_text_atomic(path: Path, text: str) -> None:
    """Atomic UTF-8 text write (newlines written as-is)."""
    write_bytes_atomic(path, text.encode("utf-8"))


def sha256_text(text: str) -> str:
    """Hex SHA-256 of UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
