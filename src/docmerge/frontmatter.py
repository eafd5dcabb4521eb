"""Destination resolver: frontmatter header, import preamble and body.

An MDX page is treated as three parts::

    ---                                   <- header (verbatim, may be absent)
    title: "Power User Guide"
    ---

    import { Aside } from '...';          <- preamble (verbatim, may be empty)

    ## Multi-Mac Sync                     <- body
    ...

Rewrites reproduce the header and preamble exactly as found, so manual
edits to page metadata survive every run. ``compose_document`` and
``split_document`` round-trip: splitting a composed page returns the parts
it was composed from.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

import orjson

from docmerge.merge_types import PageMeta
from docmerge.storage import DocumentStore

DEFAULT_PREAMBLE = "import { Aside } from '@astrojs/starlight/components';"

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(?:.*?\n)?---[ \t]*(?=\n|\Z)", re.DOTALL)
_STATEMENT_START_RE = re.compile(r"^(?:import|export)\s")

_OPENERS = "{[("
_CLOSERS = "}])"


@dataclass(frozen=True, slots=True)
class PageParts:
    """A destination page split into its three parts."""

    header: str | None  # "---\n...\n---" exactly as found
    preamble: str       # "" when the page has no import/export block
    body: str


@dataclass(frozen=True, slots=True)
class DestinationHeader:
    """Header and preamble of an existing destination.

    ``header`` is None when the page exists but has no frontmatter; the
    caller then generates one. A missing page is represented by None
    instead of this object.
    """

    header: str | None
    preamble: str


def _bracket_delta(line: str) -> int:
    return sum(line.count(c) for c in _OPENERS) - sum(line.count(c) for c in _CLOSERS)


def _split_preamble(rest: str) -> tuple[str, str]:
    """Split leading import/export statements off ``rest``.

    Blank lines between statements are allowed. A statement continues over
    following lines while brackets are unbalanced (multi-line imports).
    """
    lines = rest.split("\n")
    i = 0
    first: int | None = None
    last = -1
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            i += 1
            continue
        if not _STATEMENT_START_RE.match(line):
            break
        if first is None:
            first = i
        depth = _bracket_delta(line)
        while depth > 0 and i + 1 < len(lines):
            i += 1
            depth += _bracket_delta(lines[i])
        last = i
        i += 1
    if first is None:
        return "", rest
    preamble = "\n".join(lines[first:last + 1]).strip()
    body = "\n".join(lines[last + 1:])
    return preamble, body


def split_document(text: str) -> PageParts:
    """Split page text into header, preamble and body."""
    m = _FRONTMATTER_RE.match(text)
    if m is not None:
        header: str | None = m.group(0)
        rest = text[m.end():]
    else:
        header = None
        rest = text
    preamble, body = _split_preamble(rest)
    return PageParts(header=header, preamble=preamble, body=body.strip())


def compose_document(header: str | None, preamble: str, body: str) -> str:
    """Join non-empty parts with exactly one blank line; end with one newline."""
    parts = [p for p in (header, preamble.strip(), body.strip()) if p]
    return "\n\n".join(parts) + "\n"


def render_header(meta: PageMeta) -> str:
    """Generate a Starlight frontmatter block.

    Values are JSON-quoted, which is also valid YAML double-quoted style.
    """
    title = orjson.dumps(meta.title).decode("utf-8")
    description = orjson.dumps(meta.description).decode("utf-8")
    return f"---\ntitle: {title}\ndescription: {description}\n---"


def resolve_destination(text: str | None) -> DestinationHeader | None:
    """Header and preamble of already-loaded page text (None if no page)."""
    if text is None:
        return None
    parts = split_document(text)
    return DestinationHeader(header=parts.header, preamble=parts.preamble)


def read_header_and_preamble(
    store: DocumentStore, path: str,
) -> DestinationHeader | None:
    """Read a destination and return its verbatim header and preamble.

    Returns None when no document exists at ``path``.
    """
    return resolve_destination(store.read(path))
