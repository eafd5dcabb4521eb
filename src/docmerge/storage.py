"""Storage abstraction for destination documents.

The merge logic only ever calls ``read(path)`` and ``write(path, content)``.
Paths are POSIX-style and relative to the store root
("guides/power-users.mdx").

Stores:
    FileStore    — UTF-8 files under a content root (atomic replace on write)
    MemoryStore  — dict-backed, for tests and embedding
    OverlayStore — buffers writes over another store (dry runs)
"""
from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Protocol

from docmerge.errors import ConfigError, StorageFault
from docmerge.io_utils import write_text_atomic


class DocumentStore(Protocol):
    """Minimal read/write interface used by the pipeline driver."""

    def read(self, path: str) -> str | None:
        """Return document text, or None if no document exists at ``path``."""
        ...

    def write(self, path: str, content: str) -> None:
        """Create or overwrite the document at ``path``."""
        ...


def normalize_target(path: str) -> str:
    """Validate a relative target path and return its canonical form.

    Absolute paths and ``..`` segments are rejected so a definition can
    never write outside the content root.
    """
    raw = path.strip().replace("\\", "/")
    rel = PurePosixPath(raw)
    if not raw or rel.is_absolute() or ".." in rel.parts:
        raise ConfigError(f"Target path must be relative and inside the content root: {path!r}")
    return rel.as_posix()


class MemoryStore:
    """In-memory store. ``reads``/``writes`` record the access order."""

    def __init__(self, docs: dict[str, str] | None = None) -> None:
        self.docs: dict[str, str] = dict(docs or {})
        self.reads: list[str] = []
        self.writes: list[str] = []

    def read(self, path: str) -> str | None:
        self.reads.append(path)
        return self.docs.get(path)

    def write(self, path: str, content: str) -> None:
        self.writes.append(path)
        self.docs[path] = content


class FileStore:
    """Documents stored as UTF-8 files below ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def resolve(self, path: str) -> Path:
        return self.root / normalize_target(path)

    def read(self, path: str) -> str | None:
        full = self.resolve(path)
        try:
            return full.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageFault(path, f"read failed: {exc}") from exc

    def write(self, path: str, content: str) -> None:
        full = self.resolve(path)
        try:
            write_text_atomic(full, content)
        except OSError as exc:
            raise StorageFault(path, f"write failed: {exc}") from exc


class OverlayStore:
    """Reads fall through to ``base``; writes stay in memory.

    Used for dry runs so later sections targeting the same page still see
    the output of earlier ones without touching the real store.
    """

    def __init__(self, base: DocumentStore) -> None:
        self.base = base
        self.pending: dict[str, str] = {}

    def read(self, path: str) -> str | None:
        if path in self.pending:
            return self.pending[path]
        return self.base.read(path)

    def write(self, path: str, content: str) -> None:
        self.pending[path] = content
