"""Exception types for the docs merge engine.

Only configuration and storage problems raise. Section-level conditions
(missing source heading, missing subsection marker) are reported as
outcomes on the run report instead.
"""
from __future__ import annotations


class DocMergeError(RuntimeError):
    """Base class for all docmerge failures."""


class ConfigError(DocMergeError, ValueError):
    """Raised when section definitions are malformed or inconsistent."""


class StorageFault(DocMergeError):
    """Raised when a destination cannot be read or written.

    Fatal for the whole run. Writes committed for earlier sections are
    kept (there is no rollback across sections).
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
